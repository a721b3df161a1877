"""Flashcard deck generation.

Flow: load document text -> generate ``card_count`` question/answer pairs
through the retrying executor -> replace the document's deck in one
transaction.  When the store rejects the write the generated deck is still
returned, marked ``persisted=False``.
"""

from __future__ import annotations

import uuid
from typing import Any

import structlog

from src.interfaces.document_store import IDocumentStore
from src.models.artifacts import Flashcard, FlashcardDeck
from src.pipeline.content_loader import DocumentContentLoader, unwrap_generation
from src.services.generation.generation_executor import GenerationExecutor

logger = structlog.get_logger(logger_name=__name__)

DECK_TITLE = "Generated Flashcards"

FLASHCARD_SYSTEM_PROMPT = (
    "You are a professional flashcard creator. Create flashcards that are "
    "SPECIFIC to the provided content, using exact facts, names, dates and "
    "details from the text. Never create generic flashcards. Always respond "
    "with valid JSON only. If you cannot create specific flashcards from the "
    "content, respond with an empty array []."
)

FLASHCARD_PROMPT_TEMPLATE = """\
Based on the following document content, create {count} educational flashcards \
covering specific facts, details and key information mentioned in the text.

Requirements:
1. Create exactly {count} flashcards.
2. Each flashcard has a clear, specific question and a concise, accurate answer.
3. Use real names, facts, dates and details from the content.
4. Return ONLY a JSON array in this format:

[
  {{"question": "Specific question about the content", "answer": "Concise answer"}}
]

Document content:
{content}
"""


def is_valid_flashcard(item: Any) -> bool:
    """A card needs a question longer than 10 and an answer longer than 5 characters."""
    if not isinstance(item, dict):
        return False
    question = item.get("question")
    answer = item.get("answer")
    if not isinstance(question, str) or not isinstance(answer, str):
        return False
    return len(question.strip()) > 10 and len(answer.strip()) > 5


class FlashcardPipeline:
    """Generates and stores the flashcard deck for a document.

    Parameters
    ----------
    loader:
        Resolves the document and assembles its text.
    executor:
        Retrying generation executor.
    document_store:
        Destination for the deck.
    card_count:
        Number of cards requested from the model.
    max_chunks:
        Leading chunks included in the prompt.
    """

    def __init__(
        self,
        loader: DocumentContentLoader,
        executor: GenerationExecutor,
        document_store: IDocumentStore,
        card_count: int = 16,
        max_chunks: int | None = 30,
        max_attempts: int | None = None,
        system_prompt: str = FLASHCARD_SYSTEM_PROMPT,
        prompt_template: str = FLASHCARD_PROMPT_TEMPLATE,
    ) -> None:
        self._loader = loader
        self._executor = executor
        self._store = document_store
        self._card_count = card_count
        self._max_chunks = max_chunks
        self._max_attempts = max_attempts
        self._system_prompt = system_prompt
        self._prompt_template = prompt_template

    async def run(self, document_id: str, user_id: str | None) -> FlashcardDeck:
        """Generate the deck for *document_id* on behalf of *user_id*.

        Raises
        ------
        UnauthorizedError, DocumentNotFoundError, NoContentAvailableError
            Before any generation is attempted.
        GenerationExhaustedError
            If no attempt produced parseable output.
        MalformedOutputError
            If parsed output held no valid card.
        """
        content = await self._loader.load(document_id, user_id, max_chunks=self._max_chunks)
        prompt = self._prompt_template.format(count=self._card_count, content=content.text)

        outcome = await self._executor.generate(
            prompt,
            self._system_prompt,
            validate=is_valid_flashcard,
            max_attempts=self._max_attempts,
        )
        items = unwrap_generation(outcome, "flashcards")
        cards = [(item["question"].strip(), item["answer"].strip()) for item in items]

        try:
            deck = await self._store.replace_flashcard_deck(document_id, DECK_TITLE, cards)
        except Exception as exc:
            logger.error(
                "flashcard_persist_failed",
                document_id=document_id,
                cards=len(cards),
                error=str(exc),
            )
            return FlashcardDeck(
                id=str(uuid.uuid4()),
                document_id=document_id,
                title=DECK_TITLE,
                cards=[
                    Flashcard(id=str(uuid.uuid4()), question=q, answer=a, ordinal=i)
                    for i, (q, a) in enumerate(cards)
                ],
                persisted=False,
            )

        logger.info("flashcards_generated", document_id=document_id, cards=len(deck.cards))
        return deck
