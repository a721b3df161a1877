"""OpenAI text-to-speech narration provider.

Uses the ``audio.speech`` endpoint of the ``openai`` SDK and requests WAV
output so stored files match the ``.wav`` audio references the podcast
pipeline hands out.
"""

from __future__ import annotations

import openai
import structlog

from src.config.settings import Settings
from src.interfaces.narration_provider import INarrationProvider
from src.utils.errors import NarrationError

logger = structlog.get_logger(logger_name=__name__)

# The speech endpoint rejects inputs longer than this many characters.
_MAX_INPUT_CHARS = 4096


class OpenAINarrationProvider(INarrationProvider):
    """Narration via OpenAI TTS (``tts-1`` / ``alloy`` by default)."""

    def __init__(self, settings: Settings) -> None:
        self._api_key = settings.openai_api_key
        self._model = settings.openai_tts_model
        self._voice = settings.openai_tts_voice
        self._client = openai.AsyncOpenAI(
            api_key=self._api_key or "unset",
            timeout=openai.Timeout(120.0, connect=5.0),
        )

    async def synthesize(self, text: str) -> bytes:
        if not text.strip():
            raise NarrationError("Nothing to narrate", provider_name=self.get_provider_name())
        if len(text) > _MAX_INPUT_CHARS:
            logger.info("narration_input_truncated", chars=len(text), limit=_MAX_INPUT_CHARS)
            text = text[:_MAX_INPUT_CHARS]

        try:
            response = await self._client.audio.speech.create(
                model=self._model,
                voice=self._voice,
                input=text,
                response_format="wav",
            )
        except openai.APIError as exc:
            raise NarrationError(f"TTS API error: {exc}", provider_name=self.get_provider_name()) from exc

        audio = response.content
        if not audio:
            raise NarrationError("TTS returned no audio", provider_name=self.get_provider_name())
        logger.info("narration_synthesized", model=self._model, voice=self._voice, size=len(audio))
        return audio

    @property
    def file_extension(self) -> str:
        return "wav"

    def get_provider_name(self) -> str:
        return "openai_tts"

    def is_available(self) -> bool:
        return bool(self._api_key)
