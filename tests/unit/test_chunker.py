"""Unit tests for word-window chunking."""

from __future__ import annotations

import pytest

from src.services.ingestion.chunker import DEFAULT_MAX_WORDS, WordChunker, chunk_text


def _words(count: int) -> str:
    return " ".join(f"w{i}" for i in range(count))


class TestChunkText:
    def test_splits_into_full_windows_and_remainder(self) -> None:
        windows = chunk_text(_words(1200), 500)

        assert [len(w.split()) for w in windows] == [500, 500, 200]

    def test_exact_multiple_has_no_empty_tail(self) -> None:
        windows = chunk_text(_words(1000), 500)

        assert [len(w.split()) for w in windows] == [500, 500]

    def test_short_text_is_one_window(self) -> None:
        assert chunk_text("just a few words", 500) == ["just a few words"]

    @pytest.mark.parametrize("text", ["", "   ", "\n\t  \n"])
    def test_no_words_yields_no_windows(self, text: str) -> None:
        assert chunk_text(text, 500) == []

    def test_whitespace_runs_collapse_and_words_are_preserved(self) -> None:
        text = "alpha\n\nbeta\tgamma   delta\r\nepsilon"
        windows = chunk_text(text, 2)

        assert windows == ["alpha beta", "gamma delta", "epsilon"]
        assert " ".join(windows).split() == text.split()

    def test_windows_do_not_overlap(self) -> None:
        windows = chunk_text(_words(25), 10)

        assert windows[0].split()[-1] == "w9"
        assert windows[1].split()[0] == "w10"

    def test_deterministic(self) -> None:
        text = _words(777)
        assert chunk_text(text, 100) == chunk_text(text, 100)

    @pytest.mark.parametrize("max_words", [0, -5])
    def test_rejects_non_positive_window(self, max_words: int) -> None:
        with pytest.raises(ValueError, match="max_words"):
            chunk_text("some text", max_words)


class TestWordChunker:
    def test_default_window_size(self) -> None:
        assert WordChunker().max_words == DEFAULT_MAX_WORDS == 500

    def test_chunk_uses_configured_size(self) -> None:
        chunker = WordChunker(max_words=3)

        assert chunker.chunk("a b c d e") == ["a b c", "d e"]

    def test_rejects_zero(self) -> None:
        with pytest.raises(ValueError):
            WordChunker(max_words=0)
