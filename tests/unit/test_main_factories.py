"""Unit tests for factory functions in src/main.py.

Tests LLM provider selection, storage backend selection, the
_build_all assembly, and the create_app factory, with no real network
calls or API keys.
"""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest
from fastapi import FastAPI

from src.config.settings import Settings


# ======================================================================
# Shared helpers
# ======================================================================


def _settings(**overrides) -> Settings:
    """Build a Settings instance with safe defaults and optional overrides.

    All API keys default to empty strings so the Ollama fallback is
    exercised unless explicitly overridden.
    """
    defaults = {
        "openai_api_key": "",
        "openai_base_url": "",
        "openai_text_model": "",
        "openai_vision_model": "",
        "anthropic_api_key": "",
        "ollama_base_url": "http://localhost:11434",
        "storage_backend": "local",
        "storage_base_url": "",
        "app_env": "test",
    }
    defaults.update(overrides)
    return Settings(**defaults)


# ======================================================================
# _build_llm_provider
# ======================================================================


class TestBuildLLMProvider:
    """Provider priority order: Anthropic, then OpenAI, then Ollama."""

    def test_anthropic_priority(self) -> None:
        from src.main import _build_llm_provider
        from src.providers.llm.anthropic_provider import AnthropicLLMProvider

        s = _settings(anthropic_api_key="test-anthropic-key", openai_api_key="sk-also-set")
        assert isinstance(_build_llm_provider(s), AnthropicLLMProvider)

    def test_openai_fallback(self) -> None:
        from src.main import _build_llm_provider
        from src.providers.llm.openai_provider import OpenAILLMProvider

        s = _settings(openai_api_key="sk-test")
        assert isinstance(_build_llm_provider(s), OpenAILLMProvider)

    def test_ollama_default(self) -> None:
        from src.main import _build_llm_provider
        from src.providers.llm.ollama_provider import OllamaLLMProvider

        assert isinstance(_build_llm_provider(_settings()), OllamaLLMProvider)


# ======================================================================
# _build_storage
# ======================================================================


class TestBuildStorage:
    def test_local_backend(self, tmp_path: Path) -> None:
        from src.main import _build_storage
        from src.providers.storage.local_storage_provider import LocalStorageProvider

        storage = _build_storage(_settings(storage_dir=str(tmp_path)), httpx.AsyncClient())
        assert isinstance(storage, LocalStorageProvider)

    def test_http_backend(self) -> None:
        from src.main import _build_storage
        from src.providers.storage.http_storage_provider import HTTPStorageProvider

        s = _settings(storage_backend="http", storage_base_url="http://storage.local")
        assert isinstance(_build_storage(s, httpx.AsyncClient()), HTTPStorageProvider)

    def test_http_backend_requires_url(self) -> None:
        from src.main import _build_storage
        from src.utils.errors import ConfigurationError

        with pytest.raises(ConfigurationError):
            _build_storage(_settings(storage_backend="http"), httpx.AsyncClient())

    def test_unknown_backend(self) -> None:
        from src.main import _build_storage
        from src.utils.errors import ConfigurationError

        with pytest.raises(ConfigurationError, match="Unknown storage backend"):
            _build_storage(_settings(storage_backend="ftp"), httpx.AsyncClient())


# ======================================================================
# _build_all
# ======================================================================


class TestBuildAll:
    def test_components_are_wired(self, tmp_path: Path) -> None:
        from src.main import _build_all
        from src.pipeline.flashcard_pipeline import FlashcardPipeline
        from src.pipeline.podcast_pipeline import PodcastPipeline
        from src.pipeline.quiz_pipeline import QuizPipeline

        s = _settings(
            storage_dir=str(tmp_path / "uploads"),
            database_path=str(tmp_path / "lectern.db"),
            audio_dir=str(tmp_path / "audio"),
        )
        components = _build_all(s, {"app": {"pipeline_timeout_seconds": 42}})

        assert set(components) >= {
            "http_client",
            "llm_provider",
            "storage",
            "document_store",
            "narration",
            "audio_storage",
            "content_loader",
            "flashcard_pipeline",
            "quiz_pipeline",
            "podcast_pipeline",
        }
        assert isinstance(components["flashcard_pipeline"], FlashcardPipeline)
        assert isinstance(components["quiz_pipeline"], QuizPipeline)
        assert isinstance(components["podcast_pipeline"], PodcastPipeline)
        assert components["pipeline_timeout"] == 42.0

    @pytest.mark.parametrize("enabled", [True, False])
    def test_image_text_switch_reaches_chunk_store(self, tmp_path: Path, enabled: bool) -> None:
        from src.main import _build_all

        s = _settings(storage_dir=str(tmp_path), database_path=str(tmp_path / "x.db"))
        components = _build_all(s, {"extraction": {"extract_image_text": enabled, "max_pages": 75}})

        options = components["chunk_store"].extraction_options
        assert options.extract_image_text is enabled
        assert options.max_pages == 75

    def test_unknown_section_strategy_is_rejected(self, tmp_path: Path) -> None:
        from src.main import _build_all

        s = _settings(storage_dir=str(tmp_path), database_path=str(tmp_path / "x.db"))
        with pytest.raises(ValueError, match="Unknown section strategy"):
            _build_all(s, {"podcast": {"section_strategy": "chapters"}})


# ======================================================================
# create_app
# ======================================================================


class TestCreateApp:
    def test_routes_are_registered(self) -> None:
        from src.main import create_app

        application = create_app()

        assert isinstance(application, FastAPI)
        paths = set(application.openapi()["paths"])
        assert {
            "/api/v1/documents",
            "/api/v1/documents/{document_id}/content",
            "/api/v1/flashcards",
            "/api/v1/quizzes",
            "/api/v1/podcasts",
            "/api/v1/health",
            "/api/audio/{filename}",
        } <= paths
