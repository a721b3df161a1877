"""Generated study artifacts: flashcard decks, quizzes and podcasts.

Each artifact set belongs to exactly one document and is replaced as a
whole when regenerated.  ``persisted`` is ``False`` when generation
succeeded but the store rejected the write; ids are then locally minted
placeholders that do not exist in the database.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.models.document import utc_now


# ---------------------------------------------------------------------------
# Flashcards
# ---------------------------------------------------------------------------
class Flashcard(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    question: str
    answer: str
    ordinal: int = Field(ge=0)


class FlashcardDeck(BaseModel):
    """The current flashcard set for a document."""

    model_config = ConfigDict(frozen=True)

    id: str
    document_id: str
    title: str
    cards: list[Flashcard] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    persisted: bool = True


# ---------------------------------------------------------------------------
# Quizzes
# ---------------------------------------------------------------------------
class QuizQuestion(BaseModel):
    """A four-option multiple-choice question; ``answer`` is a letter A-D."""

    model_config = ConfigDict(frozen=True)

    id: str
    question: str
    options: list[str] = Field(min_length=4, max_length=4)
    answer: str = Field(pattern=r"^[A-D]$")
    ordinal: int = Field(ge=0)


class Quiz(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    document_id: str
    title: str
    questions: list[QuizQuestion] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    persisted: bool = True


# ---------------------------------------------------------------------------
# Podcasts
# ---------------------------------------------------------------------------
class SectionPlan(BaseModel):
    """One planned narration section before it is persisted."""

    model_config = ConfigDict(frozen=True)

    title: str
    description: str
    content: str
    estimated_duration: str = Field(description='Formatted "M:SS" narration estimate.')


class PodcastSection(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str
    content: str
    duration: str
    audio_url: str | None = None
    ordinal: int = Field(ge=0)


class Podcast(BaseModel):
    """The current narrated audio version of a document."""

    model_config = ConfigDict(frozen=True)

    id: str
    document_id: str
    user_id: str
    title: str
    description: str
    sections: list[PodcastSection] = Field(default_factory=list)
    total_duration: str = "0:00"
    created_at: datetime = Field(default_factory=utc_now)
    persisted: bool = True
