"""Document and chunk models.

A :class:`Document` is created when a user uploads a file and is never
mutated by the generation pipelines.  Its text is materialized once into an
ordered sequence of :class:`Chunk` records by
:class:`src.services.ingestion.chunk_store.ChunkStore`; concatenating chunk
texts in ``(created_at, ordinal)`` order with a blank line between them
reconstructs the extracted text.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Document(BaseModel):
    """An uploaded file owned by one user."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Unique identifier (UUID) for the document.")
    owner_id: str = Field(description="Opaque id of the user who uploaded it.")
    storage_key: str = Field(description="Object-storage key holding the raw bytes.")
    name: str = Field(description="Display name, usually the original filename.")
    media_type: str = Field(default="application/pdf", description="Declared MIME type.")
    created_at: datetime = Field(default_factory=utc_now)


class Chunk(BaseModel):
    """A bounded-size, ordered slice of a document's extracted text."""

    model_config = ConfigDict(frozen=True)

    id: str
    document_id: str
    ordinal: int = Field(ge=0, description="Position within the document's chunk set.")
    text: str
    created_at: datetime = Field(default_factory=utc_now)

    @property
    def word_count(self) -> int:
        return len(self.text.split())
