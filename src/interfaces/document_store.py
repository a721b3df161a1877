"""Abstract base class for the relational store of documents, chunks and artifacts.

The store owns the two transactional guarantees the pipelines rely on:

* :meth:`IDocumentStore.create_chunk_set` creates at most one chunk set per
  document, even when callers race.
* The ``replace_*`` methods swap a document's artifact set and all its
  children in a single transaction, so readers never observe a document
  without a current set.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.models.artifacts import FlashcardDeck, Podcast, Quiz, SectionPlan
from src.models.document import Chunk, Document


# Concrete implementation: SQLiteDocumentStore (src/providers/document_store/)
class IDocumentStore(ABC):
    """Contract for document, chunk and artifact persistence."""

    # ── Lifecycle ──────────────────────────────────────────────────────

    @abstractmethod
    async def initialize(self) -> None:
        """Create tables/indices if they don't exist.  Called at startup."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier for this store."""

    # ── Documents ──────────────────────────────────────────────────────

    @abstractmethod
    async def create_document(self, document: Document) -> Document:
        """Insert *document* and return it."""

    @abstractmethod
    async def get_document(self, document_id: str, owner_id: str) -> Document | None:
        """Return the document only if it exists and belongs to *owner_id*."""

    @abstractmethod
    async def delete_document(self, document_id: str) -> bool:
        """Delete a document with its chunks and artifacts.  True if it existed."""

    # ── Chunks ─────────────────────────────────────────────────────────

    @abstractmethod
    async def list_chunks(self, document_id: str, limit: int | None = None) -> list[Chunk]:
        """Return the document's chunks ordered by ``(created_at, ordinal)``."""

    @abstractmethod
    async def create_chunk_set(self, document_id: str, texts: list[str]) -> list[Chunk]:
        """Persist *texts* as the document's chunks unless a set already exists.

        Returns
        -------
        list[Chunk]
            The document's chunks after the call: the new ones, or the
            pre-existing set if another caller created it first.
        """

    # ── Artifacts ──────────────────────────────────────────────────────

    @abstractmethod
    async def replace_flashcard_deck(
        self,
        document_id: str,
        title: str,
        cards: list[tuple[str, str]],
    ) -> FlashcardDeck:
        """Replace the document's deck with *cards* (question, answer pairs)."""

    @abstractmethod
    async def get_flashcard_deck(self, document_id: str) -> FlashcardDeck | None:
        """Return the document's current deck, if any."""

    @abstractmethod
    async def replace_quiz(
        self,
        document_id: str,
        title: str,
        questions: list[tuple[str, list[str], str]],
    ) -> Quiz:
        """Replace the document's quiz with *questions* (question, options, answer)."""

    @abstractmethod
    async def get_quiz(self, document_id: str) -> Quiz | None:
        """Return the document's current quiz, if any."""

    @abstractmethod
    async def replace_podcast(
        self,
        document_id: str,
        user_id: str,
        title: str,
        description: str,
        sections: list[SectionPlan],
    ) -> Podcast:
        """Replace the document's podcast with audio-less sections from *sections*."""

    @abstractmethod
    async def get_podcast(self, document_id: str) -> Podcast | None:
        """Return the document's current podcast, if any."""

    @abstractmethod
    async def update_section_audio(self, section_id: str, audio_url: str) -> bool:
        """Attach an audio reference to a podcast section.  True if found."""

    @abstractmethod
    async def update_podcast_duration(self, podcast_id: str, total_duration: str) -> bool:
        """Set a podcast's formatted total duration.  True if found."""
