"""Unit tests for OpenAI narration and local audio storage."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.config.settings import Settings
from src.providers.audio.local_audio_storage import LocalAudioStorage
from src.providers.narration.openai_narration_provider import OpenAINarrationProvider
from src.utils.errors import NarrationError, StorageError


class TestLocalAudioStorage:
    @pytest.mark.asyncio
    async def test_save_returns_served_url(self, tmp_path: Path) -> None:
        audio = LocalAudioStorage(tmp_path / "audio")

        url = await audio.save(b"RIFF", "pod-sec.wav", owner_id="user-1")

        assert url == "/api/audio/pod-sec.wav"
        assert (tmp_path / "audio" / "pod-sec.wav").read_bytes() == b"RIFF"
        assert audio.path_for("pod-sec.wav") == str(tmp_path / "audio" / "pod-sec.wav")

    @pytest.mark.parametrize("name", ["", "../x.wav", "a/b.wav", ".hidden"])
    def test_path_for_rejects_bad_names(self, tmp_path: Path, name: str) -> None:
        assert LocalAudioStorage(tmp_path).path_for(name) is None

    def test_path_for_missing_file(self, tmp_path: Path) -> None:
        assert LocalAudioStorage(tmp_path).path_for("absent.wav") is None

    @pytest.mark.asyncio
    async def test_save_rejects_bad_name(self, tmp_path: Path) -> None:
        with pytest.raises(StorageError):
            await LocalAudioStorage(tmp_path).save(b"x", "../escape.wav", owner_id="u")


class TestOpenAINarrationProvider:
    @staticmethod
    def _settings(**overrides) -> Settings:
        values = {"openai_api_key": "sk-test", "openai_tts_model": "tts-1", "openai_tts_voice": "alloy"}
        values.update(overrides)
        return Settings(**values)

    @pytest.mark.asyncio
    async def test_synthesize_requests_wav(self) -> None:
        mock_client = AsyncMock()
        mock_client.audio.speech.create = AsyncMock(return_value=MagicMock(content=b"RIFFdata"))

        with patch(
            "src.providers.narration.openai_narration_provider.openai.AsyncOpenAI",
            return_value=mock_client,
        ):
            provider = OpenAINarrationProvider(self._settings())
            audio = await provider.synthesize("Hello there")

        assert audio == b"RIFFdata"
        kwargs = mock_client.audio.speech.create.await_args.kwargs
        assert kwargs == {"model": "tts-1", "voice": "alloy", "input": "Hello there", "response_format": "wav"}
        assert provider.file_extension == "wav"

    @pytest.mark.asyncio
    async def test_long_input_is_truncated(self) -> None:
        mock_client = AsyncMock()
        mock_client.audio.speech.create = AsyncMock(return_value=MagicMock(content=b"RIFF"))

        with patch(
            "src.providers.narration.openai_narration_provider.openai.AsyncOpenAI",
            return_value=mock_client,
        ):
            provider = OpenAINarrationProvider(self._settings())
            await provider.synthesize("x" * 5000)

        assert len(mock_client.audio.speech.create.await_args.kwargs["input"]) == 4096

    @pytest.mark.asyncio
    async def test_blank_text_is_rejected(self) -> None:
        provider = OpenAINarrationProvider(self._settings())

        with pytest.raises(NarrationError):
            await provider.synthesize("   ")

    @pytest.mark.asyncio
    async def test_empty_audio_is_an_error(self) -> None:
        mock_client = AsyncMock()
        mock_client.audio.speech.create = AsyncMock(return_value=MagicMock(content=b""))

        with patch(
            "src.providers.narration.openai_narration_provider.openai.AsyncOpenAI",
            return_value=mock_client,
        ):
            provider = OpenAINarrationProvider(self._settings())
            with pytest.raises(NarrationError):
                await provider.synthesize("Hello")

    def test_availability(self) -> None:
        assert OpenAINarrationProvider(self._settings()).is_available() is True
        assert OpenAINarrationProvider(self._settings(openai_api_key="")).is_available() is False
        assert OpenAINarrationProvider(self._settings()).get_provider_name() == "openai_tts"
