"""Unit tests for domain models and the error hierarchy."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from src.models.artifacts import FlashcardDeck, QuizQuestion
from src.models.document import Chunk, Document
from src.utils.errors import (
    DocumentNotFoundError,
    GenerationExhaustedError,
    LecternError,
    MalformedOutputError,
    NoContentAvailableError,
    PipelineFailure,
    PipelineTimeoutError,
    StorageError,
    StorageObjectNotFoundError,
    UnauthorizedError,
)


class TestModels:
    def test_document_is_frozen(self) -> None:
        document = Document(id="d", owner_id="u", storage_key="u/d/x.pdf", name="x.pdf")

        assert document.media_type == "application/pdf"
        with pytest.raises(ValidationError):
            document.name = "y.pdf"

    def test_chunk_ordinal_is_non_negative(self) -> None:
        with pytest.raises(ValidationError):
            Chunk(id="c", document_id="d", ordinal=-1, text="x")

    def test_chunk_word_count(self) -> None:
        assert Chunk(id="c", document_id="d", ordinal=0, text="a  b\nc").word_count == 3

    def test_quiz_question_needs_four_options(self) -> None:
        with pytest.raises(ValidationError):
            QuizQuestion(id="q", question="Q?", options=["a", "b", "c"], answer="A", ordinal=0)

    @pytest.mark.parametrize("answer", ["E", "a", "AB", ""])
    def test_quiz_answer_is_a_capital_letter(self, answer: str) -> None:
        with pytest.raises(ValidationError):
            QuizQuestion(id="q", question="Q?", options=["a", "b", "c", "d"], answer=answer, ordinal=0)

    def test_deck_defaults(self) -> None:
        deck = FlashcardDeck(id="k", document_id="d", title="T")

        assert deck.cards == []
        assert deck.persisted is True


class TestErrors:
    @pytest.mark.parametrize(
        ("error", "kind", "status"),
        [
            (UnauthorizedError(), "unauthorized", 401),
            (DocumentNotFoundError("doc-1"), "not-found", 404),
            (NoContentAvailableError("empty"), "no-content", 400),
            (GenerationExhaustedError(attempts=5), "generation-failed", 502),
            (MalformedOutputError(), "malformed-output", 502),
            (PipelineTimeoutError(300.0), "timeout", 504),
        ],
    )
    def test_caller_facing_classification(self, error: PipelineFailure, kind: str, status: int) -> None:
        assert isinstance(error, LecternError)
        assert error.kind == kind
        assert error.status_code == status

    def test_not_found_message(self) -> None:
        error = DocumentNotFoundError("doc-9")

        assert error.message == "File not found"
        assert "doc-9" in error.details

    def test_no_content_exposes_reason(self) -> None:
        error = NoContentAvailableError("no text extracted", document_id="doc-1")

        assert error.reason == "no text extracted"
        assert error.details == "no text extracted"

    def test_storage_not_found_is_storage_error(self) -> None:
        error = StorageObjectNotFoundError("a/b.pdf", provider_name="local_storage")

        assert isinstance(error, StorageError)
        assert error.key == "a/b.pdf"
        assert "local_storage" in str(error)
