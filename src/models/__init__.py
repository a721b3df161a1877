"""Lectern domain models, re-exported for ``from src.models import ...``.

- document.py   : uploaded documents and their persisted chunks
- artifacts.py  : flashcard decks, quizzes, podcasts and section plans
- generation.py : typed extraction and generation outcomes
"""

from __future__ import annotations

from src.models.artifacts import (
    Flashcard,
    FlashcardDeck,
    Podcast,
    PodcastSection,
    Quiz,
    QuizQuestion,
    SectionPlan,
)
from src.models.document import Chunk, Document
from src.models.generation import (
    ExtractionFailure,
    ExtractionOptions,
    ExtractionResult,
    ExtractionStrategy,
    FailureKind,
    GenerationFailure,
    GenerationResult,
)

__all__ = [
    # document
    "Chunk",
    "Document",
    # artifacts
    "Flashcard",
    "FlashcardDeck",
    "Podcast",
    "PodcastSection",
    "Quiz",
    "QuizQuestion",
    "SectionPlan",
    # generation
    "ExtractionFailure",
    "ExtractionOptions",
    "ExtractionResult",
    "ExtractionStrategy",
    "FailureKind",
    "GenerationFailure",
    "GenerationResult",
]
