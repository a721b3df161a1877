"""Reassembly of chunk text and planning of narration sections.

``assemble`` rebuilds a prompt-ready text blob from ordered chunks.
Section planning is a strategy: the podcast pipeline is handed a
:class:`SectionPlanner` and never decides section boundaries itself.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from src.models.artifacts import SectionPlan
from src.models.document import Chunk

WORDS_PER_MINUTE = 150


def assemble(chunks: Sequence[Chunk]) -> str:
    """Join chunk texts in order with a blank line between them."""
    return "\n\n".join(chunk.text for chunk in chunks)


def estimate_duration_seconds(text: str, words_per_minute: int = WORDS_PER_MINUTE) -> int:
    """Estimated narration time for *text*, rounded to whole seconds."""
    if words_per_minute < 1:
        raise ValueError(f"words_per_minute must be >= 1, got {words_per_minute}")
    return round(len(text.split()) * 60 / words_per_minute)


def format_duration(seconds: int) -> str:
    """Format *seconds* as ``M:SS`` (minutes are not wrapped into hours)."""
    minutes, secs = divmod(max(int(seconds), 0), 60)
    return f"{minutes}:{secs:02d}"


# ---------------------------------------------------------------------------
# Section planners
# ---------------------------------------------------------------------------

class SectionPlanner(ABC):
    """Splits source text into ordered, non-overlapping narration sections."""

    def __init__(self, words_per_minute: int = WORDS_PER_MINUTE) -> None:
        self._wpm = words_per_minute

    @abstractmethod
    def plan(self, text: str, title: str) -> list[SectionPlan]:
        """Return sections whose contents, in order, cover *text*."""

    def _section(self, title: str, description: str, content: str) -> SectionPlan:
        return SectionPlan(
            title=title,
            description=description,
            content=content,
            estimated_duration=format_duration(estimate_duration_seconds(content, self._wpm)),
        )


class SingleSectionPlanner(SectionPlanner):
    """One section holding the whole document."""

    def plan(self, text: str, title: str) -> list[SectionPlan]:
        if not text.strip():
            return []
        return [self._section(title, f"Audio version of {title}", text)]


class WordBudgetSectionPlanner(SectionPlanner):
    """Consecutive sections of at most ``max_words`` words each."""

    def __init__(self, max_words: int = 750, words_per_minute: int = WORDS_PER_MINUTE) -> None:
        if max_words < 1:
            raise ValueError(f"max_words must be >= 1, got {max_words}")
        super().__init__(words_per_minute)
        self._max_words = max_words

    def plan(self, text: str, title: str) -> list[SectionPlan]:
        words = text.split()
        spans = [words[i : i + self._max_words] for i in range(0, len(words), self._max_words)]
        total = len(spans)
        return [
            self._section(
                f"{title} (Part {index} of {total})" if total > 1 else title,
                f"Audio version of {title}, part {index}" if total > 1 else f"Audio version of {title}",
                " ".join(span),
            )
            for index, span in enumerate(spans, start=1)
        ]


def build_section_planner(
    strategy: str,
    max_words: int = 750,
    words_per_minute: int = WORDS_PER_MINUTE,
) -> SectionPlanner:
    """Return the planner named *strategy* (``"single"`` or ``"word_budget"``)."""
    if strategy == "single":
        return SingleSectionPlanner(words_per_minute)
    if strategy == "word_budget":
        return WordBudgetSectionPlanner(max_words, words_per_minute)
    raise ValueError(f"Unknown section strategy: {strategy!r}")
