"""Idempotent materialization of a document's chunks.

:meth:`ChunkStore.ensure_chunks` is the only path by which chunks come into
existence.  The first call for a document fetches its bytes, extracts text,
splits it into word windows and persists them; every later call returns the
persisted chunks without touching storage or the extractor.

Concurrent first calls are safe: the store's chunk-set creation is guarded
by a per-document uniqueness constraint, and the loser of the race receives
the winner's chunks.
"""

from __future__ import annotations

import structlog

from src.interfaces.document_store import IDocumentStore
from src.interfaces.storage_provider import IStorageProvider
from src.models.document import Chunk, Document
from src.models.generation import ExtractionFailure, ExtractionOptions
from src.services.ingestion.chunker import WordChunker
from src.services.ingestion.extraction_cascade import ExtractionCascade
from src.utils.errors import NoContentAvailableError, StorageError, StorageObjectNotFoundError

logger = structlog.get_logger(logger_name=__name__)


class ChunkStore:
    """Ensures a document has persisted chunks, creating them once on demand.

    Parameters
    ----------
    document_store:
        Relational store for chunk persistence.
    storage:
        Object storage holding the raw document bytes.
    extractor:
        Extraction cascade run on first materialization.
    chunker:
        Word-window chunker.
    extraction_options:
        Default options; ``media_type`` is filled in per document.
    """

    def __init__(
        self,
        document_store: IDocumentStore,
        storage: IStorageProvider,
        extractor: ExtractionCascade,
        chunker: WordChunker | None = None,
        extraction_options: ExtractionOptions | None = None,
    ) -> None:
        self._store = document_store
        self._storage = storage
        self._extractor = extractor
        self._chunker = chunker or WordChunker()
        self._options = extraction_options or ExtractionOptions()

    @property
    def extraction_options(self) -> ExtractionOptions:
        return self._options

    async def ensure_chunks(
        self,
        document: Document,
        options: ExtractionOptions | None = None,
    ) -> list[Chunk]:
        """Return *document*'s chunks in order, creating them if none exist.

        Raises
        ------
        NoContentAvailableError
            If the bytes cannot be fetched, extraction yields nothing, or the
            text contains no words.  No chunk rows are written in that case.
        """
        existing = await self._store.list_chunks(document.id)
        if existing:
            logger.debug("chunks_already_present", document_id=document.id, count=len(existing))
            return existing

        try:
            data = await self._storage.get_object(document.storage_key)
        except StorageObjectNotFoundError as exc:
            logger.warning("chunk_source_missing", document_id=document.id, key=document.storage_key)
            raise NoContentAvailableError(str(exc), document_id=document.id) from exc
        except StorageError as exc:
            logger.warning("chunk_source_unreadable", document_id=document.id, error=str(exc))
            raise NoContentAvailableError(str(exc), document_id=document.id) from exc

        base = options or self._options
        if base.media_type is None:
            base = base.model_copy(update={"media_type": document.media_type})

        extraction = await self._extractor.extract(data, base)
        if isinstance(extraction, ExtractionFailure):
            detail = "; ".join(extraction.errors)
            reason = f"{extraction.reason}: {detail}" if detail else extraction.reason
            raise NoContentAvailableError(reason, document_id=document.id)

        windows = self._chunker.chunk(extraction.text)
        if not windows:
            raise NoContentAvailableError("extracted text contains no words", document_id=document.id)

        chunks = await self._store.create_chunk_set(document.id, windows)
        logger.info(
            "chunks_created",
            document_id=document.id,
            count=len(chunks),
            strategy=extraction.strategy.value,
            pages=extraction.pages_extracted,
        )
        return chunks
