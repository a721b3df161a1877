"""Request and response bodies for the Lectern HTTP API."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from src.models.artifacts import FlashcardDeck, Podcast, Quiz


class GenerateRequest(BaseModel):
    """Body of every artifact-generation request."""

    document_id: str = Field(..., min_length=1, max_length=128)


class DocumentResponse(BaseModel):
    """An uploaded document."""

    id: str
    name: str
    media_type: str
    storage_key: str
    created_at: datetime


class DocumentContentResponse(BaseModel):
    """Assembled chunk text of a document."""

    success: bool = True
    content: str
    chunk_count: int


class FlashcardsResponse(BaseModel):
    flashcards: FlashcardDeck


class QuizResponse(BaseModel):
    quiz: Quiz


class PodcastResponse(BaseModel):
    message: str = "Podcast created successfully"
    podcast: Podcast


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    providers: dict[str, Any]


class ErrorResponse(BaseModel):
    """Standard error response body.

    ``kind`` is the stable failure classification (``not-found``,
    ``no-content``, ``generation-failed``, ...); ``error`` is a
    human-readable message.
    """

    error: str
    details: str | None = None
    kind: str | None = None
