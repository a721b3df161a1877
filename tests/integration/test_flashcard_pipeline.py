"""Integration tests for FlashcardPipeline against a real store and a mock LLM."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.pipeline.content_loader import DocumentContentLoader
from src.pipeline.flashcard_pipeline import DECK_TITLE, FlashcardPipeline, is_valid_flashcard
from src.providers.document_store.sqlite_document_store import SQLiteDocumentStore
from src.providers.storage.local_storage_provider import LocalStorageProvider
from src.services.generation.generation_executor import GenerationExecutor
from src.services.ingestion.chunk_store import ChunkStore
from src.services.ingestion.extraction_cascade import ExtractionCascade
from src.utils.errors import (
    DocumentNotFoundError,
    GenerationExhaustedError,
    MalformedOutputError,
    NoContentAvailableError,
    PersistenceError,
)

_FENCED_REPLY = """Here are your flashcards:
```json
[
  {"question": "What pigment absorbs light in plants?", "answer": "Chlorophyll"},
  {"question": "Why?", "answer": "ok"}
]
```"""


async def _no_sleep(seconds: float) -> None:
    return None


@pytest.fixture
def pipeline(
    document_store: SQLiteDocumentStore,
    storage: LocalStorageProvider,
    mock_llm_provider: MagicMock,
) -> FlashcardPipeline:
    loader = DocumentContentLoader(document_store, ChunkStore(document_store, storage, ExtractionCascade()))
    executor = GenerationExecutor(mock_llm_provider, sleep=_no_sleep)
    return FlashcardPipeline(loader, executor, document_store, card_count=16)


class TestFlashcardPipeline:
    @pytest.mark.asyncio
    async def test_fenced_reply_yields_persisted_deck(
        self,
        make_document,
        pipeline: FlashcardPipeline,
        document_store: SQLiteDocumentStore,
        mock_llm_provider: MagicMock,
    ) -> None:
        await make_document(b"Chlorophyll absorbs light for photosynthesis.")
        mock_llm_provider.complete.side_effect = [_FENCED_REPLY]

        deck = await pipeline.run("doc-1", "user-1")

        assert deck.persisted is True
        assert deck.title == DECK_TITLE
        assert [(c.question, c.answer) for c in deck.cards] == [
            ("What pigment absorbs light in plants?", "Chlorophyll")
        ]
        assert mock_llm_provider.complete.await_count == 1

        stored = await document_store.get_flashcard_deck("doc-1")
        assert stored is not None
        assert stored.id == deck.id
        assert len(stored.cards) == 1

    @pytest.mark.asyncio
    async def test_prompt_carries_document_text_and_count(
        self, make_document, pipeline: FlashcardPipeline, mock_llm_provider: MagicMock
    ) -> None:
        await make_document(b"Mitochondria produce ATP.")
        mock_llm_provider.complete.side_effect = [_FENCED_REPLY]

        await pipeline.run("doc-1", "user-1")

        kwargs = mock_llm_provider.complete.await_args.kwargs
        assert "Mitochondria produce ATP." in kwargs["user_prompt"]
        assert "create 16 educational flashcards" in kwargs["user_prompt"]
        assert "JSON" in kwargs["system_prompt"]

    @pytest.mark.asyncio
    async def test_regeneration_replaces_deck(
        self,
        make_document,
        pipeline: FlashcardPipeline,
        document_store: SQLiteDocumentStore,
        mock_llm_provider: MagicMock,
    ) -> None:
        await make_document(b"Some study text.")
        second = '[{"question": "What is the second question?", "answer": "Second answer"}]'
        mock_llm_provider.complete.side_effect = [_FENCED_REPLY, second]

        await pipeline.run("doc-1", "user-1")
        latest = await pipeline.run("doc-1", "user-1")

        stored = await document_store.get_flashcard_deck("doc-1")
        assert stored is not None
        assert stored.id == latest.id
        assert [c.answer for c in stored.cards] == ["Second answer"]

    @pytest.mark.asyncio
    async def test_exhausted_budget_persists_nothing(
        self,
        make_document,
        pipeline: FlashcardPipeline,
        document_store: SQLiteDocumentStore,
        mock_llm_provider: MagicMock,
    ) -> None:
        await make_document(b"Some study text.")
        mock_llm_provider.complete.side_effect = ["no json here"] * 5

        with pytest.raises(GenerationExhaustedError) as exc_info:
            await pipeline.run("doc-1", "user-1")

        assert exc_info.value.attempts == 5
        assert await document_store.get_flashcard_deck("doc-1") is None

    @pytest.mark.asyncio
    async def test_all_cards_invalid(
        self, make_document, pipeline: FlashcardPipeline, mock_llm_provider: MagicMock
    ) -> None:
        await make_document(b"Some study text.")
        mock_llm_provider.complete.side_effect = ['[{"question": "Q?", "answer": "A"}]']

        with pytest.raises(MalformedOutputError):
            await pipeline.run("doc-1", "user-1")

        assert mock_llm_provider.complete.await_count == 1

    @pytest.mark.asyncio
    async def test_unknown_document_never_calls_llm(
        self, pipeline: FlashcardPipeline, mock_llm_provider: MagicMock
    ) -> None:
        with pytest.raises(DocumentNotFoundError):
            await pipeline.run("missing", "user-1")

        mock_llm_provider.complete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_bytes_never_calls_llm(
        self, make_document, pipeline: FlashcardPipeline, mock_llm_provider: MagicMock
    ) -> None:
        await make_document(b"", media_type="application/pdf", name="gone.pdf", upload=False)

        with pytest.raises(NoContentAvailableError):
            await pipeline.run("doc-1", "user-1")

        mock_llm_provider.complete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_store_failure_returns_unpersisted_deck(
        self,
        make_document,
        pipeline: FlashcardPipeline,
        document_store: SQLiteDocumentStore,
        mock_llm_provider: MagicMock,
    ) -> None:
        await make_document(b"Some study text.")
        mock_llm_provider.complete.side_effect = [_FENCED_REPLY]

        with patch.object(
            document_store,
            "replace_flashcard_deck",
            AsyncMock(side_effect=PersistenceError("disk full", provider_name="sqlite")),
        ):
            deck = await pipeline.run("doc-1", "user-1")

        assert deck.persisted is False
        assert len(deck.cards) == 1


@pytest.mark.parametrize(
    ("item", "expected"),
    [
        ({"question": "What is the largest planet?", "answer": "Jupiter"}, True),
        ({"question": "Short?", "answer": "Jupiter"}, False),
        ({"question": "What is the largest planet?", "answer": "Big"}, False),
        ({"question": "What is the largest planet?"}, False),
        ({"question": 42, "answer": "Jupiter"}, False),
        ("not a dict", False),
    ],
)
def test_flashcard_validation(item, expected: bool) -> None:
    assert is_valid_flashcard(item) is expected
