"""Tests for the tokenizer seam."""

import pytest

import kotoba.utils.tokenizer as tokenizer_module
from kotoba.utils import TinySegmenterTokenizer, count_tokens, tokenize_text


class _RecordingSegmenter:
    calls: list[str] = []

    def tokenize(self, text: str) -> list[str]:
        self.calls.append(text)
        return ["私", "は", "学生", "です"]


def test_tinysegmenter_backend_is_used(monkeypatch: pytest.MonkeyPatch) -> None:
    _RecordingSegmenter.calls = []
    monkeypatch.setattr(tokenizer_module.tinysegmenter, "TinySegmenter", _RecordingSegmenter)
    tokenizer = TinySegmenterTokenizer()

    assert tokenizer("私は学生です") == ["私", "は", "学生", "です"]
    assert _RecordingSegmenter.calls == ["私は学生です"]


def test_tinysegmenter_skips_blank_text(monkeypatch: pytest.MonkeyPatch) -> None:
    _RecordingSegmenter.calls = []
    monkeypatch.setattr(tokenizer_module.tinysegmenter, "TinySegmenter", _RecordingSegmenter)
    tokenizer = TinySegmenterTokenizer()

    assert tokenizer("") == []
    assert tokenizer("  \n") == []
    assert _RecordingSegmenter.calls == []


def test_tinysegmenter_segments_real_text() -> None:
    tokens = TinySegmenterTokenizer()("私の名前は中野です")

    assert tokens
    assert "".join(tokens) == "私の名前は中野です"


def test_tokenize_text_drops_empty_tokens() -> None:
    def noisy(text: str):
        return iter(["ある", "", "いる"])

    assert tokenize_text(noisy, "あるいる") == ["ある", "いる"]
    assert count_tokens(noisy, "あるいる") == 2
    assert tokenize_text(noisy, "") == []
