"""Fixed-size word-window chunking.

Splits extracted document text into windows of at most ``max_words``
whitespace-delimited words.  Windows are contiguous and non-overlapping,
and each window's words are re-joined with single spaces, so only the
whitespace layout of the source is lost:

    " ".join(chunk(text)).split() == text.split()

The chunker is pure and deterministic: the same input always yields the
same windows, which is what lets chunk persistence be idempotent.
"""

from __future__ import annotations

DEFAULT_MAX_WORDS = 500


def chunk_text(text: str, max_words: int = DEFAULT_MAX_WORDS) -> list[str]:
    """Split *text* into word windows of at most *max_words* words.

    Parameters
    ----------
    text:
        Arbitrary text; runs of any whitespace count as one separator.
    max_words:
        Window size. Must be at least 1.

    Returns
    -------
    list[str]
        Ordered windows; empty when *text* contains no words.

    Raises
    ------
    ValueError
        If *max_words* is less than 1.
    """
    if max_words < 1:
        raise ValueError(f"max_words must be >= 1, got {max_words}")

    words = text.split()
    return [
        " ".join(words[start : start + max_words])
        for start in range(0, len(words), max_words)
    ]


class WordChunker:
    """Configured wrapper around :func:`chunk_text` for injection into services."""

    def __init__(self, max_words: int = DEFAULT_MAX_WORDS) -> None:
        if max_words < 1:
            raise ValueError(f"max_words must be >= 1, got {max_words}")
        self._max_words = max_words

    @property
    def max_words(self) -> int:
        return self._max_words

    def chunk(self, text: str) -> list[str]:
        return chunk_text(text, self._max_words)
