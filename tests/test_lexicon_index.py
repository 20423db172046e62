"""Behavior tests for surface-form lookup."""

import logging

import pytest

from kotoba.domain import VocabularyEntry
from kotoba.lexicon import LexiconIndex


def test_every_surface_form_resolves_to_its_entry(lexicon_index: LexiconIndex) -> None:
    """Written form, reading and variants should all map to the same entry."""
    for surface in ("猫", "ねこ", "ネコ"):
        entry = lexicon_index.lookup(surface)
        assert entry is not None
        assert entry.entry_id == 3


def test_lookup_is_exact_string_equality(lexicon_index: LexiconIndex) -> None:
    """No normalization or partial matching should take place."""
    assert lexicon_index.lookup("ねこ ") is None
    assert lexicon_index.lookup("ね") is None
    assert lexicon_index.lookup("") is None
    assert "ねこ" in lexicon_index
    assert "いぬ" not in lexicon_index


def test_homograph_resolves_to_first_registered_entry(
    caplog: pytest.LogCaptureFixture,
) -> None:
    """A reading shared by two entries should stay bound to the earlier one."""
    entries = [
        VocabularyEntry(entry_id=10, reading="はし", gloss="bridge", written_form="橋"),
        VocabularyEntry(entry_id=11, reading="はし", gloss="chopsticks", written_form="箸"),
    ]

    with caplog.at_level(logging.INFO):
        index = LexiconIndex.build(entries)

    homograph = index.lookup("はし")
    assert homograph is not None and homograph.entry_id == 10
    chopsticks = index.lookup("箸")
    assert chopsticks is not None and chopsticks.entry_id == 11
    assert index.collision_count == 1
    assert "homograph collision" in caplog.text


def test_repeated_surface_within_one_entry_is_not_a_collision() -> None:
    """A variant equal to the reading should not count as a homograph."""
    index = LexiconIndex.build(
        [VocabularyEntry(entry_id=1, reading="ある", gloss="to exist", variants=("ある",))]
    )

    assert index.collision_count == 0
    assert index.surface_count == 1


def test_duplicate_ids_are_rejected() -> None:
    """Two entries with the same id cannot be indexed together."""
    entries = [
        VocabularyEntry(entry_id=1, reading="ある", gloss="to exist"),
        VocabularyEntry(entry_id=1, reading="いる", gloss="to be"),
    ]

    with pytest.raises(ValueError, match="Duplicate vocabulary id"):
        LexiconIndex.build(entries)


def test_entry_lookup_by_id_and_size(lexicon_index: LexiconIndex) -> None:
    """The index should expose entries by id and report its size."""
    entry = lexicon_index.entry(4)

    assert entry is not None and entry.display_form == "学生"
    assert lexicon_index.entry(404) is None
    assert len(lexicon_index) == 4
    assert [item.entry_id for item in lexicon_index.entries] == [1, 2, 3, 4]


def test_entry_requires_reading() -> None:
    """A vocabulary entry without a reading is malformed."""
    with pytest.raises(ValueError, match="non-empty reading"):
        VocabularyEntry(entry_id=1, reading="", gloss="nothing")


def test_empty_index_matches_nothing() -> None:
    index = LexiconIndex.build([])

    assert len(index) == 0
    assert index.lookup("ある") is None
