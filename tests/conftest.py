import sys
from collections.abc import Generator
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import kotoba.config as config
from kotoba.domain import GrammarPattern, VocabularyEntry
from kotoba.lexicon import GrammarPatternSet, LexiconIndex


def split_tokenizer(text: str) -> list[str]:
    """Whitespace tokenizer keeping test token boundaries explicit."""
    return text.split()


@pytest.fixture(autouse=True)
def _reset_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Keeps global settings independent from the developer environment."""
    for name in (
        "KOTOBA_WINDOW_SECONDS",
        "KOTOBA_RECOMMENDATION_LIMIT",
        "KOTOBA_DENSITY_HIGH",
        "KOTOBA_DENSITY_MEDIUM",
        "KOTOBA_SEGMENTS_PER_STUDY_MINUTE",
        "KOTOBA_MAX_WORKERS",
        "KOTOBA_LEXICON_FILE",
        "KOTOBA_GRAMMAR_FILE",
        "KOTOBA_JLPT_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    config.reload_settings()
    yield
    config.reload_settings()


@pytest.fixture
def tokenizer():
    return split_tokenizer


@pytest.fixture
def vocabulary() -> list[VocabularyEntry]:
    return [
        VocabularyEntry(entry_id=1, reading="こんにちは", gloss="hello"),
        VocabularyEntry(entry_id=2, reading="ある", gloss="to exist", part_of_speech="verb"),
        VocabularyEntry(
            entry_id=3,
            reading="ねこ",
            gloss="cat",
            written_form="猫",
            variants=("ネコ",),
            group="3",
        ),
        VocabularyEntry(entry_id=4, reading="がくせい", gloss="student", written_form="学生"),
    ]


@pytest.fixture
def grammar_patterns() -> list[GrammarPattern]:
    return [
        GrammarPattern(pattern_id=1, name="です", regex="です", rank=1),
        GrammarPattern(pattern_id=11, name="のだ", regex="(のだ|んです|のです)", rank=11),
        GrammarPattern(pattern_id=99, name="broken", regex="(unclosed"),
    ]


@pytest.fixture
def lexicon_index(vocabulary: list[VocabularyEntry]) -> LexiconIndex:
    return LexiconIndex.build(vocabulary)


@pytest.fixture
def pattern_set(grammar_patterns: list[GrammarPattern]) -> GrammarPatternSet:
    return GrammarPatternSet.build(grammar_patterns)
