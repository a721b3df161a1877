"""Multiple-choice quiz generation.

Same shape as the flashcard pipeline: load -> generate -> validate ->
replace.  Each question needs exactly four options and an answer letter
A-D; answers given as the option text are mapped back to their letter.
"""

from __future__ import annotations

import uuid
from typing import Any

import structlog

from src.interfaces.document_store import IDocumentStore
from src.models.artifacts import Quiz, QuizQuestion
from src.pipeline.content_loader import DocumentContentLoader, unwrap_generation
from src.services.generation.generation_executor import GenerationExecutor

logger = structlog.get_logger(logger_name=__name__)

QUIZ_TITLE = "Generated Quiz"
_LETTERS = ("A", "B", "C", "D")

QUIZ_SYSTEM_PROMPT = (
    "You are a professional quiz creator. Create multiple-choice questions "
    "that are SPECIFIC to the provided content. Always respond with valid "
    "JSON only. If you cannot create specific questions from the content, "
    "respond with an empty array []."
)

QUIZ_PROMPT_TEMPLATE = """\
Based on the following document content, create {count} challenging \
multiple-choice questions that test understanding of specific facts and details \
in the text.

Requirements:
1. Create exactly {count} questions.
2. Each question has exactly 4 options (A, B, C, D) and one correct answer.
3. Use real names, facts, dates and details from the content.
4. Return ONLY a JSON array in this format:

[
  {{"question": "Question text", "options": ["Option A", "Option B", "Option C", "Option D"], "answer": "A"}}
]

Document content:
{content}
"""


def normalize_answer(item: dict[str, Any]) -> str | None:
    """Return the answer as a letter A-D, or ``None`` if it cannot be resolved."""
    answer = item.get("answer")
    options = item.get("options")
    if not isinstance(answer, str):
        return None
    letter = answer.strip().upper().rstrip(").:")
    if letter in _LETTERS:
        return letter
    if isinstance(options, list):
        for index, option in enumerate(options[: len(_LETTERS)]):
            if isinstance(option, str) and option.strip() == answer.strip():
                return _LETTERS[index]
    return None


def is_valid_question(item: Any) -> bool:
    if not isinstance(item, dict):
        return False
    question = item.get("question")
    options = item.get("options")
    if not isinstance(question, str) or not question.strip():
        return False
    if not isinstance(options, list) or len(options) != 4:
        return False
    if not all(isinstance(option, str) and option.strip() for option in options):
        return False
    return normalize_answer(item) is not None


class QuizPipeline:
    """Generates and stores the quiz for a document."""

    def __init__(
        self,
        loader: DocumentContentLoader,
        executor: GenerationExecutor,
        document_store: IDocumentStore,
        question_count: int = 5,
        max_chunks: int | None = 30,
        max_tokens: int | None = 1000,
        max_attempts: int | None = None,
        system_prompt: str = QUIZ_SYSTEM_PROMPT,
        prompt_template: str = QUIZ_PROMPT_TEMPLATE,
    ) -> None:
        self._loader = loader
        self._executor = executor
        self._store = document_store
        self._question_count = question_count
        self._max_chunks = max_chunks
        self._max_tokens = max_tokens
        self._max_attempts = max_attempts
        self._system_prompt = system_prompt
        self._prompt_template = prompt_template

    async def run(self, document_id: str, user_id: str | None) -> Quiz:
        content = await self._loader.load(document_id, user_id, max_chunks=self._max_chunks)
        prompt = self._prompt_template.format(count=self._question_count, content=content.text)

        outcome = await self._executor.generate(
            prompt,
            self._system_prompt,
            validate=is_valid_question,
            max_attempts=self._max_attempts,
            max_tokens=self._max_tokens,
        )
        items = unwrap_generation(outcome, "quiz")
        questions = [
            (
                item["question"].strip(),
                [option.strip() for option in item["options"]],
                normalize_answer(item),
            )
            for item in items
        ]

        try:
            quiz = await self._store.replace_quiz(document_id, QUIZ_TITLE, questions)
        except Exception as exc:
            logger.error("quiz_persist_failed", document_id=document_id, error=str(exc))
            return Quiz(
                id=str(uuid.uuid4()),
                document_id=document_id,
                title=QUIZ_TITLE,
                questions=[
                    QuizQuestion(id=str(uuid.uuid4()), question=q, options=o, answer=a, ordinal=i)
                    for i, (q, o, a) in enumerate(questions)
                ],
                persisted=False,
            )

        logger.info("quiz_generated", document_id=document_id, questions=len(quiz.questions))
        return quiz
