"""Typed outcomes for extraction and generation.

The extraction cascade and the generation executor never raise for
expected failures; they return one of the ``*Failure`` models below and
leave the translation into caller-facing errors to the pipelines.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------
class ExtractionStrategy(str, Enum):
    FAST = "fast"
    SLOW = "slow"
    PLAIN_TEXT = "plain_text"


class ExtractionOptions(BaseModel):
    """Per-call extraction options."""

    model_config = ConfigDict(frozen=True)

    max_pages: int = Field(default=50, ge=1, description="Page cap for the slow path.")
    extract_image_text: bool = Field(
        default=False,
        description="Recover text from sparse pages with the LLM vision call.",
    )
    media_type: str | None = Field(default=None, description="Declared MIME type of the bytes.")


class ExtractionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    strategy: ExtractionStrategy
    page_count: int = Field(ge=0, description="Pages in the source document.")
    pages_extracted: int = Field(ge=0, description="Pages that contributed text.")


class ExtractionFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    reason: str
    errors: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------
class FailureKind(str, Enum):
    EXHAUSTED = "exhausted"
    VALIDATION = "validation"


class GenerationResult(BaseModel):
    """Parsed and validated items from a successful attempt."""

    model_config = ConfigDict(frozen=True)

    items: list[Any]
    attempts: int = Field(ge=1)
    strategy: str = Field(description="Name of the parse-recovery tier that succeeded.")
    rejected: int = Field(default=0, ge=0, description="Items dropped by the validator.")


class GenerationFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: FailureKind
    message: str
    attempts: int = Field(ge=0)
