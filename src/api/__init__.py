"""Lectern API layer: routes, schemas, and middleware."""

from src.api.middleware import RequestLoggingMiddleware, configure_cors, register_error_handlers
from src.api.routes import audio_router, router
from src.api.schemas import (
    DocumentContentResponse,
    DocumentResponse,
    ErrorResponse,
    FlashcardsResponse,
    GenerateRequest,
    HealthResponse,
    PodcastResponse,
    QuizResponse,
)

__all__ = [
    "RequestLoggingMiddleware",
    "audio_router",
    "configure_cors",
    "register_error_handlers",
    "router",
    "DocumentContentResponse",
    "DocumentResponse",
    "ErrorResponse",
    "FlashcardsResponse",
    "GenerateRequest",
    "HealthResponse",
    "PodcastResponse",
    "QuizResponse",
]
