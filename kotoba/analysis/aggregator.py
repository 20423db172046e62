"""Folding of raw match records into per-item summaries and headline stats."""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from kotoba.analysis.schema import (
    AggregatedGrammarItem,
    AggregatedVocabularyItem,
    GrammarSummary,
    VocabularySummary,
)
from kotoba.domain import GrammarMatch, ItemId, Occurrence, VocabularyMatch
from kotoba.errors import AnalysisInputError
from kotoba.lexicon.grammar import GrammarPatternSet
from kotoba.lexicon.index import LexiconIndex


def round_half_up(value: float) -> int:
    """Rounds to the nearest integer with halves rounded up."""
    return int(math.floor(value + 0.5))


def percent(numerator: int, denominator: int) -> int:
    """Integer percentage of ``numerator / denominator``; 0 for an empty base."""
    if denominator <= 0:
        return 0
    return round_half_up(numerator / denominator * 100.0)


def estimate_study_minutes(segment_count: int, segments_per_minute: int) -> int:
    """Rough study time assuming a fixed number of segments per minute."""
    if segment_count <= 0:
        return 0
    return math.ceil(segment_count / max(1, segments_per_minute))


@dataclass
class _Accumulator:
    """Occurrences collected for one id before ordering."""

    keyed: list[tuple[tuple[float, int, int], Occurrence]] = field(default_factory=list)
    first_appearance: float = math.inf

    def add(self, match: VocabularyMatch | GrammarMatch) -> None:
        if match.start_seconds < self.first_appearance:
            self.first_appearance = match.start_seconds
        self.keyed.append(
            (
                (match.start_seconds, match.segment_index, match.position),
                Occurrence(
                    matched_text=match.matched_text,
                    start_seconds=match.start_seconds,
                    end_seconds=match.end_seconds,
                    segment_text=match.segment_text,
                    position=match.position,
                ),
            )
        )

    def ordered(self) -> tuple[Occurrence, ...]:
        return tuple(item for _, item in sorted(self.keyed, key=lambda pair: pair[0]))


def _accumulate(
    matches: Iterable[VocabularyMatch | GrammarMatch],
    key_of: Callable[[Any], ItemId],
) -> dict[ItemId, _Accumulator]:
    grouped: dict[ItemId, _Accumulator] = {}
    for match in matches:
        item_id = key_of(match)
        accumulator = grouped.get(item_id)
        if accumulator is None:
            accumulator = _Accumulator()
            grouped[item_id] = accumulator
        accumulator.add(match)
    return grouped


def aggregate_vocabulary(
    matches: Sequence[VocabularyMatch],
    lexicon_index: LexiconIndex,
) -> VocabularySummary:
    """Deduplicates vocabulary matches by entry id.

    Items keep the order in which their ids were first seen. Each item's
    occurrences are sorted by start time, then segment order, then position.
    """
    grouped = _accumulate(matches, lambda match: match.entry_id)
    items: list[AggregatedVocabularyItem] = []
    for entry_id, accumulator in grouped.items():
        entry = lexicon_index.entry(entry_id)
        if entry is None:
            raise AnalysisInputError(
                f"Vocabulary match references unknown entry id {entry_id!r}."
            )
        items.append(
            AggregatedVocabularyItem(
                entry_id=entry_id,
                written_form=entry.written_form,
                reading=entry.reading,
                gloss=entry.gloss,
                part_of_speech=entry.part_of_speech,
                group=entry.group,
                occurrences=accumulator.ordered(),
                first_appearance_seconds=accumulator.first_appearance,
            )
        )
    return VocabularySummary(
        unique_count=len(items),
        total_occurrences=len(matches),
        items=tuple(items),
    )


def aggregate_grammar(
    matches: Sequence[GrammarMatch],
    pattern_set: GrammarPatternSet,
) -> GrammarSummary:
    """Deduplicates grammar matches by pattern id."""
    grouped = _accumulate(matches, lambda match: match.pattern_id)
    items: list[AggregatedGrammarItem] = []
    for pattern_id, accumulator in grouped.items():
        pattern = pattern_set.pattern(pattern_id)
        if pattern is None:
            raise AnalysisInputError(
                f"Grammar match references unknown pattern id {pattern_id!r}."
            )
        items.append(
            AggregatedGrammarItem(
                pattern_id=pattern_id,
                name=pattern.name,
                structure=pattern.structure,
                explanation=pattern.explanation,
                example_source=pattern.example_source,
                example_target=pattern.example_target,
                group=pattern.group,
                rank=pattern.rank,
                occurrences=accumulator.ordered(),
                first_appearance_seconds=accumulator.first_appearance,
            )
        )
    return GrammarSummary(
        unique_count=len(items),
        total_occurrences=len(matches),
        items=tuple(items),
    )
