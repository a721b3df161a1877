"""Integration tests for QuizPipeline."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest

from src.pipeline.content_loader import DocumentContentLoader
from src.pipeline.quiz_pipeline import QUIZ_TITLE, QuizPipeline, is_valid_question, normalize_answer
from src.providers.document_store.sqlite_document_store import SQLiteDocumentStore
from src.providers.storage.local_storage_provider import LocalStorageProvider
from src.services.generation.generation_executor import GenerationExecutor
from src.services.ingestion.chunk_store import ChunkStore
from src.services.ingestion.extraction_cascade import ExtractionCascade
from src.utils.errors import MalformedOutputError

_OPTIONS = ["Mercury", "Venus", "Earth", "Mars"]


async def _no_sleep(seconds: float) -> None:
    return None


@pytest.fixture
def pipeline(
    document_store: SQLiteDocumentStore,
    storage: LocalStorageProvider,
    mock_llm_provider: MagicMock,
) -> QuizPipeline:
    loader = DocumentContentLoader(document_store, ChunkStore(document_store, storage, ExtractionCascade()))
    executor = GenerationExecutor(mock_llm_provider, sleep=_no_sleep, max_tokens=3500)
    return QuizPipeline(loader, executor, document_store, question_count=5, max_tokens=1000)


class TestQuizPipeline:
    @pytest.mark.asyncio
    async def test_valid_questions_are_persisted(
        self,
        make_document,
        pipeline: QuizPipeline,
        document_store: SQLiteDocumentStore,
        mock_llm_provider: MagicMock,
    ) -> None:
        await make_document(b"The planets in order are Mercury, Venus, Earth, Mars.")
        reply = "Quiz below:\n" + json.dumps(
            [
                {"question": "Which planet is closest to the Sun?", "options": _OPTIONS, "answer": "A"},
                {"question": "Which planet do we live on?", "options": _OPTIONS, "answer": "Earth"},
                {"question": "Too few options?", "options": _OPTIONS[:3], "answer": "A"},
            ]
        )
        mock_llm_provider.complete.side_effect = [reply]

        quiz = await pipeline.run("doc-1", "user-1")

        assert quiz.title == QUIZ_TITLE
        assert quiz.persisted is True
        assert [q.answer for q in quiz.questions] == ["A", "C"]
        assert quiz.questions[0].options == _OPTIONS

        stored = await document_store.get_quiz("doc-1")
        assert stored is not None
        assert [q.question for q in stored.questions] == [q.question for q in quiz.questions]

    @pytest.mark.asyncio
    async def test_quiz_uses_its_own_token_limit(
        self, make_document, pipeline: QuizPipeline, mock_llm_provider: MagicMock
    ) -> None:
        await make_document(b"Some text.")
        mock_llm_provider.complete.side_effect = [
            json.dumps([{"question": "Which is first?", "options": _OPTIONS, "answer": "A"}])
        ]

        await pipeline.run("doc-1", "user-1")

        kwargs = mock_llm_provider.complete.await_args.kwargs
        assert kwargs["max_tokens"] == 1000
        assert "create 5 challenging" in kwargs["user_prompt"]

    @pytest.mark.asyncio
    async def test_no_valid_question(
        self, make_document, pipeline: QuizPipeline, mock_llm_provider: MagicMock
    ) -> None:
        await make_document(b"Some text.")
        mock_llm_provider.complete.side_effect = [
            json.dumps([{"question": "Q?", "options": ["a", "b"], "answer": "A"}])
        ]

        with pytest.raises(MalformedOutputError):
            await pipeline.run("doc-1", "user-1")


class TestQuestionRules:
    @pytest.mark.parametrize(
        ("answer", "expected"),
        [("A", "A"), ("b", "B"), ("C)", "C"), ("Mars", "D"), ("Pluto", None), (3, None)],
    )
    def test_normalize_answer(self, answer, expected) -> None:
        assert normalize_answer({"options": _OPTIONS, "answer": answer}) == expected

    def test_blank_option_is_invalid(self) -> None:
        item = {"question": "Which?", "options": ["a", " ", "c", "d"], "answer": "A"}
        assert is_valid_question(item) is False

    def test_five_options_is_invalid(self) -> None:
        item = {"question": "Which?", "options": ["a", "b", "c", "d", "e"], "answer": "A"}
        assert is_valid_question(item) is False
