"""Shared first stage of every generation pipeline.

Resolves the caller's document, makes sure its chunks exist, and rebuilds
the prompt text from the first ``max_chunks`` of them.  Also home to the
translation from executor outcomes into caller-facing errors, which every
pipeline applies the same way.
"""

from __future__ import annotations

from typing import Any, NamedTuple

import structlog

from src.interfaces.document_store import IDocumentStore
from src.models.document import Chunk, Document
from src.models.generation import FailureKind, GenerationFailure, GenerationResult
from src.services.content_assembler import assemble
from src.services.ingestion.chunk_store import ChunkStore
from src.utils.errors import (
    DocumentNotFoundError,
    GenerationExhaustedError,
    MalformedOutputError,
    UnauthorizedError,
)

logger = structlog.get_logger(logger_name=__name__)


class LoadedContent(NamedTuple):
    document: Document
    chunks: list[Chunk]
    text: str


class DocumentContentLoader:
    """Resolve -> ensure chunks -> assemble."""

    def __init__(self, document_store: IDocumentStore, chunk_store: ChunkStore) -> None:
        self._store = document_store
        self._chunks = chunk_store

    async def resolve(self, document_id: str, user_id: str | None) -> Document:
        """Return the caller's document.

        Raises
        ------
        UnauthorizedError
            If *user_id* is empty.
        DocumentNotFoundError
            If the document is missing or owned by someone else.
        """
        if not user_id:
            raise UnauthorizedError()
        document = await self._store.get_document(document_id, user_id)
        if document is None:
            raise DocumentNotFoundError(document_id)
        return document

    async def load(
        self,
        document_id: str,
        user_id: str | None,
        max_chunks: int | None = None,
    ) -> LoadedContent:
        """Resolve the document and assemble its (leading) chunk text.

        Raises
        ------
        UnauthorizedError, DocumentNotFoundError
            From :meth:`resolve`.
        NoContentAvailableError
            If the document has no extractable text.
        """
        document = await self.resolve(document_id, user_id)
        chunks = await self._chunks.ensure_chunks(document)
        used = chunks[:max_chunks] if max_chunks else chunks
        text = assemble(used)
        logger.info(
            "document_content_loaded",
            document_id=document.id,
            chunks=len(chunks),
            used=len(used),
            chars=len(text),
        )
        return LoadedContent(document, used, text)


def unwrap_generation(outcome: GenerationResult | GenerationFailure, artifact: str) -> list[Any]:
    """Return the generated items or raise the matching caller-facing error."""
    if isinstance(outcome, GenerationResult):
        return outcome.items
    if outcome.kind is FailureKind.VALIDATION:
        raise MalformedOutputError(
            message=f"Generated {artifact} failed validation",
            details=outcome.message,
        )
    raise GenerationExhaustedError(
        message=f"Failed to generate {artifact} after {outcome.attempts} attempts",
        attempts=outcome.attempts,
        details=outcome.message,
    )
