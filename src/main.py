"""Lectern FastAPI application entry point.

Wires together all providers, services, and pipelines via dependency
injection.  Loads configuration from ``.env`` and ``config/config.yaml``,
configures structured logging, and registers the API routers and error
handlers.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI

from src.api.middleware import RequestLoggingMiddleware, configure_cors, register_error_handlers
from src.api.routes import VERSION, audio_router
from src.api.routes import router as api_router
from src.config.loader import load_config
from src.config.settings import Settings
from src.interfaces.llm_provider import ILLMProvider
from src.interfaces.storage_provider import IStorageProvider
from src.models.generation import ExtractionOptions
from src.pipeline.content_loader import DocumentContentLoader
from src.pipeline.flashcard_pipeline import FlashcardPipeline
from src.pipeline.podcast_pipeline import PodcastPipeline
from src.pipeline.quiz_pipeline import QuizPipeline
from src.providers.audio.local_audio_storage import LocalAudioStorage
from src.providers.document_store.sqlite_document_store import SQLiteDocumentStore
from src.providers.llm.anthropic_provider import AnthropicLLMProvider
from src.providers.llm.ollama_provider import OllamaLLMProvider
from src.providers.llm.openai_provider import OpenAILLMProvider
from src.providers.narration.openai_narration_provider import OpenAINarrationProvider
from src.providers.storage.http_storage_provider import HTTPStorageProvider
from src.providers.storage.local_storage_provider import LocalStorageProvider
from src.services.content_assembler import build_section_planner
from src.services.generation.generation_executor import GenerationExecutor
from src.services.ingestion.chunk_store import ChunkStore
from src.services.ingestion.chunker import WordChunker
from src.services.ingestion.extraction_cascade import ExtractionCascade
from src.utils.errors import ConfigurationError
from src.utils.logging import configure_logging, get_logger

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()
config = load_config(settings=settings)

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Provider selection
# ---------------------------------------------------------------------------


def _build_llm_provider(app_settings: Settings) -> ILLMProvider:
    """Select the first available LLM provider based on configured API keys.

    Priority order: Anthropic -> OpenAI -> Ollama (always available).
    """
    if app_settings.anthropic_api_key:
        return AnthropicLLMProvider(settings=app_settings)
    if app_settings.openai_api_key:
        return OpenAILLMProvider(settings=app_settings)
    return OllamaLLMProvider(settings=app_settings)


def _build_storage(app_settings: Settings, http_client: httpx.AsyncClient) -> IStorageProvider:
    backend = app_settings.storage_backend.lower()
    if backend == "local":
        return LocalStorageProvider(root=app_settings.storage_dir)
    if backend == "http":
        if not app_settings.storage_base_url:
            raise ConfigurationError("STORAGE_BASE_URL is required for the http storage backend")
        return HTTPStorageProvider(
            base_url=app_settings.storage_base_url,
            http_client=http_client,
            auth_token=app_settings.storage_auth_token,
        )
    raise ConfigurationError(f"Unknown storage backend: {app_settings.storage_backend!r}")


# ---------------------------------------------------------------------------
# Full DI assembly for the FastAPI application
# ---------------------------------------------------------------------------


def _build_all(app_settings: Settings, app_config: dict[str, Any]) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    The document store still needs ``await initialize()`` before use.
    """
    extraction_cfg = app_config.get("extraction", {})
    chunking_cfg = app_config.get("chunking", {})
    generation_cfg = app_config.get("generation", {})
    flashcard_cfg = app_config.get("flashcards", {})
    quiz_cfg = app_config.get("quiz", {})
    podcast_cfg = app_config.get("podcast", {})
    words_per_minute = podcast_cfg.get("words_per_minute", 150)

    # -- Shared resources --
    http_client = httpx.AsyncClient(timeout=30.0)

    # -- Providers --
    llm_provider = _build_llm_provider(app_settings)
    storage = _build_storage(app_settings, http_client)
    document_store = SQLiteDocumentStore(db_path=app_settings.database_path)
    narration = OpenAINarrationProvider(settings=app_settings)
    audio_storage = LocalAudioStorage(audio_dir=app_settings.audio_dir)

    # -- Ingestion --
    extractor = ExtractionCascade(
        fast_timeout_seconds=extraction_cfg.get("fast_timeout_seconds", 30.0),
        fast_max_pages=extraction_cfg.get("fast_max_pages", 20),
        vision_provider=llm_provider if llm_provider.supports_vision() else None,
        sparse_text_threshold=extraction_cfg.get("sparse_text_threshold", 100),
    )
    chunk_store = ChunkStore(
        document_store=document_store,
        storage=storage,
        extractor=extractor,
        chunker=WordChunker(chunking_cfg.get("max_words", 500)),
        extraction_options=ExtractionOptions(
            max_pages=extraction_cfg.get("max_pages", 50),
            extract_image_text=extraction_cfg.get("extract_image_text", False),
        ),
    )
    content_loader = DocumentContentLoader(document_store, chunk_store)

    # -- Generation --
    executor = GenerationExecutor(
        llm=llm_provider,
        max_attempts=generation_cfg.get("max_attempts", 5),
        backoff_seconds=generation_cfg.get("backoff_seconds", 2.0),
        temperature=generation_cfg.get("temperature", 0.1),
        max_tokens=generation_cfg.get("max_tokens", 3500),
    )
    flashcard_pipeline = FlashcardPipeline(
        loader=content_loader,
        executor=executor,
        document_store=document_store,
        card_count=flashcard_cfg.get("card_count", 16),
        max_chunks=flashcard_cfg.get("max_chunks", 30),
    )
    quiz_pipeline = QuizPipeline(
        loader=content_loader,
        executor=executor,
        document_store=document_store,
        question_count=quiz_cfg.get("question_count", 5),
        max_chunks=quiz_cfg.get("max_chunks", 30),
        max_tokens=quiz_cfg.get("max_tokens", 1000),
    )
    podcast_pipeline = PodcastPipeline(
        loader=content_loader,
        document_store=document_store,
        narration=narration,
        audio_storage=audio_storage,
        planner=build_section_planner(
            podcast_cfg.get("section_strategy", "single"),
            max_words=podcast_cfg.get("section_max_words", 750),
            words_per_minute=words_per_minute,
        ),
        max_chunks=podcast_cfg.get("max_chunks", 20),
        words_per_minute=words_per_minute,
    )

    return {
        "http_client": http_client,
        "llm_provider": llm_provider,
        "storage": storage,
        "document_store": document_store,
        "narration": narration,
        "audio_storage": audio_storage,
        "chunk_store": chunk_store,
        "content_loader": content_loader,
        "flashcard_pipeline": flashcard_pipeline,
        "quiz_pipeline": quiz_pipeline,
        "podcast_pipeline": podcast_pipeline,
        "pipeline_timeout": float(app_config.get("app", {}).get("pipeline_timeout_seconds", 300.0)),
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Initialise all providers and services on startup, clean up on shutdown."""
    components = _build_all(settings, config)

    for key, value in components.items():
        setattr(application.state, key, value)

    await components["document_store"].initialize()

    _logger.info(
        "app_startup",
        version=VERSION,
        environment=settings.app_env,
        llm=components["llm_provider"].get_provider_name(),
        storage=components["storage"].get_provider_name(),
    )

    yield

    # -- Shutdown: close shared httpx client --
    http_client: httpx.AsyncClient = components["http_client"]
    await http_client.aclose()
    _logger.info("app_shutdown", message="HTTP client closed")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="Lectern API",
        version=VERSION,
        description=(
            "Upload study documents, then generate flashcard decks, "
            "multiple-choice quizzes, and narrated podcasts from their text."
        ),
        lifespan=_lifespan,
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application)
    register_error_handlers(application)

    # -- API routes --
    application.include_router(api_router)
    application.include_router(audio_router)

    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "src.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
