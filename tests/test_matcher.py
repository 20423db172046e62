"""Behavior tests for vocabulary and grammar matching."""

import logging

import pytest

from kotoba.analysis.matcher import match_grammar, match_transcript, match_vocabulary
from kotoba.domain import GrammarPattern, PatternFault, TranscriptSegment, VocabularyEntry
from kotoba.errors import AnalysisInputError
from kotoba.lexicon import CompiledPattern, GrammarPatternSet, LexiconIndex


def test_single_token_segment_matches_at_offset_zero(
    lexicon_index: LexiconIndex, tokenizer
) -> None:
    segment = TranscriptSegment(0.0, 2.5, "こんにちは")

    matches = match_vocabulary(segment, lexicon_index, tokenizer)

    assert len(matches) == 1
    match = matches[0]
    assert match.entry_id == 1
    assert match.matched_text == "こんにちは"
    assert match.position == 0
    assert (match.start_seconds, match.end_seconds) == (0.0, 2.5)
    assert match.segment_text == "こんにちは"


def test_repeated_tokens_resolve_to_successive_offsets(
    lexicon_index: LexiconIndex, tokenizer
) -> None:
    """Identical tokens should not all report the first occurrence's offset."""
    segment = TranscriptSegment(0.0, 3.0, "ある ある 猫 ある")

    matches = match_vocabulary(segment, lexicon_index, tokenizer, segment_index=4)

    assert [(m.entry_id, m.position) for m in matches] == [
        (2, 0),
        (2, 3),
        (3, 6),
        (2, 8),
    ]
    assert {m.segment_index for m in matches} == {4}


def test_cursor_advances_over_tokens_outside_the_lexicon(
    lexicon_index: LexiconIndex, tokenizer
) -> None:
    """Unknown tokens still move the search cursor forward."""
    segment = TranscriptSegment(0.0, 1.0, "ある です ある")

    matches = match_vocabulary(segment, lexicon_index, tokenizer)

    assert [m.position for m in matches] == [0, 6]


def test_token_missing_from_text_is_placed_at_cursor(lexicon_index: LexiconIndex) -> None:
    """A token the tokenizer rewrote should fall back to the current cursor."""
    segment = TranscriptSegment(0.0, 1.0, "ある 猫")

    def rewriting_tokenizer(text: str) -> list[str]:
        return ["ある", "ねこ", "猫"]

    matches = match_vocabulary(segment, lexicon_index, rewriting_tokenizer)

    assert [(m.matched_text, m.position) for m in matches] == [
        ("ある", 0),
        ("ねこ", 2),
        ("猫", 3),
    ]


def test_blank_segment_yields_no_matches(lexicon_index: LexiconIndex, tokenizer) -> None:
    assert match_vocabulary(TranscriptSegment(0.0, 1.0, ""), lexicon_index, tokenizer) == []
    assert match_vocabulary(TranscriptSegment(0.0, 1.0, "   "), lexicon_index, tokenizer) == []


def test_grammar_offset_points_into_segment_text(pattern_set: GrammarPatternSet) -> None:
    segment = TranscriptSegment(5.0, 6.0, "そうなのだ。")

    matches = match_grammar(segment, pattern_set)

    assert len(matches) == 1
    assert matches[0].pattern_id == 11
    assert matches[0].matched_text == "のだ"
    assert matches[0].position == 3
    assert matches[0].start_seconds == 5.0


def test_grammar_reports_every_non_overlapping_hit(pattern_set: GrammarPatternSet) -> None:
    segment = TranscriptSegment(0.0, 1.0, "学生です。先生です。")

    matches = match_grammar(segment, pattern_set)

    assert [(m.pattern_id, m.position) for m in matches] == [(1, 2), (1, 7)]


def test_invalid_pattern_does_not_abort_matching(pattern_set: GrammarPatternSet) -> None:
    """Remaining patterns still match when one failed to compile."""
    segment = TranscriptSegment(0.0, 1.0, "学生なんです")

    matches = match_grammar(segment, pattern_set)

    assert [m.pattern_id for m in matches] == [1, 11]
    assert all(m.pattern_id != 99 for m in matches)


def test_zero_length_hits_are_ignored() -> None:
    pattern_set = GrammarPatternSet.build(
        [GrammarPattern(pattern_id=1, name="optional", regex="x*")]
    )

    assert match_grammar(TranscriptSegment(0.0, 1.0, "abc"), pattern_set) == []


class _ExplodingRegex:
    def finditer(self, text: str):
        raise RuntimeError("catastrophic backtracking")


def test_scan_failure_is_logged_and_recorded(caplog: pytest.LogCaptureFixture) -> None:
    """A pattern raising while scanning is skipped for that segment only."""
    exploding = GrammarPattern(pattern_id=7, name="boom", regex="x")
    working = GrammarPattern(pattern_id=8, name="です", regex="です")
    pattern_set = GrammarPatternSet(
        (
            CompiledPattern(pattern=exploding, compiled=_ExplodingRegex()),
            GrammarPatternSet.build([working]).compiled[0],
        ),
        (exploding, working),
    )
    faults: list[PatternFault] = []

    with caplog.at_level(logging.WARNING):
        matches = match_grammar(
            TranscriptSegment(0.0, 1.0, "です"),
            pattern_set,
            segment_index=2,
            faults=faults,
        )

    assert [m.pattern_id for m in matches] == [8]
    assert faults == [
        PatternFault(
            pattern_id=7,
            stage="scan",
            message="catastrophic backtracking",
            segment_index=2,
        )
    ]
    assert "Grammar pattern 7 failed on segment 2" in caplog.text


def test_match_transcript_requires_a_transcript(
    lexicon_index: LexiconIndex, pattern_set: GrammarPatternSet, tokenizer
) -> None:
    with pytest.raises(AnalysisInputError):
        match_transcript(None, lexicon_index, pattern_set, tokenizer)


def test_match_transcript_accepts_empty_transcript(
    lexicon_index: LexiconIndex, pattern_set: GrammarPatternSet, tokenizer
) -> None:
    matches = match_transcript([], lexicon_index, pattern_set, tokenizer)

    assert matches.vocabulary == []
    assert matches.grammar == []
    assert matches.faults == []


def test_threaded_matching_equals_sequential_matching(
    lexicon_index: LexiconIndex, pattern_set: GrammarPatternSet, tokenizer
) -> None:
    """Fan-out across workers should not change results or their order."""
    texts = ["こんにちは", "ある ある", "猫 です", "", "学生 なのだ", "ネコ ある"]
    segments = [
        TranscriptSegment(float(index), float(index) + 0.5, texts[index % len(texts)])
        for index in range(30)
    ]
    progress: list[tuple[int, int]] = []

    sequential = match_transcript(segments, lexicon_index, pattern_set, tokenizer)
    threaded = match_transcript(
        segments,
        lexicon_index,
        pattern_set,
        tokenizer,
        max_workers=4,
        on_progress=lambda done, total: progress.append((done, total)),
    )

    assert threaded == sequential
    assert [m.segment_index for m in threaded.vocabulary] == sorted(
        m.segment_index for m in threaded.vocabulary
    )
    assert progress[-1] == (30, 30)
    assert [done for done, _ in progress] == list(range(1, 31))


def test_matches_carry_segment_index_and_timing(
    lexicon_index: LexiconIndex, pattern_set: GrammarPatternSet, tokenizer
) -> None:
    segments = [
        TranscriptSegment(0.0, 2.0, "こんにちは"),
        TranscriptSegment(2.0, 4.0, "学生 です"),
    ]

    matches = match_transcript(segments, lexicon_index, pattern_set, tokenizer)

    assert [(m.entry_id, m.segment_index) for m in matches.vocabulary] == [(1, 0), (4, 1)]
    assert [(m.pattern_id, m.segment_index, m.start_seconds) for m in matches.grammar] == [
        (1, 1, 2.0)
    ]


def test_homograph_tokens_are_attributed_to_first_entry(tokenizer) -> None:
    index = LexiconIndex.build(
        [
            VocabularyEntry(entry_id=10, reading="はし", gloss="bridge"),
            VocabularyEntry(entry_id=11, reading="はし", gloss="chopsticks"),
        ]
    )

    matches = match_vocabulary(TranscriptSegment(0.0, 1.0, "はし"), index, tokenizer)

    assert [m.entry_id for m in matches] == [10]
