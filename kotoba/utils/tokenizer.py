"""Tokenizer seam for Japanese word segmentation."""

from __future__ import annotations

from collections.abc import Callable, Iterable

import tinysegmenter

Tokenizer = Callable[[str], Iterable[str]]


class TinySegmenterTokenizer:
    """Default tokenizer backed by the TinySegmenter statistical segmenter."""

    def __init__(self) -> None:
        self._segmenter = tinysegmenter.TinySegmenter()

    def __call__(self, text: str) -> list[str]:
        if not text or not text.strip():
            return []
        return list(self._segmenter.tokenize(text))


def tokenize_text(tokenizer: Tokenizer, text: str) -> list[str]:
    """Materializes one tokenizer call; blank text yields no tokens."""
    if not text or not text.strip():
        return []
    return [token for token in tokenizer(text) if token]


def count_tokens(tokenizer: Tokenizer, text: str) -> int:
    """Returns the number of tokens produced for ``text``."""
    return len(tokenize_text(tokenizer, text))
