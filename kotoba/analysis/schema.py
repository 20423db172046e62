"""Versioned analysis and timeline result payloads."""

from __future__ import annotations

from dataclasses import dataclass

from kotoba.domain import DensityTier, ItemId, Occurrence, PatternFault

OUTPUT_SCHEMA_VERSION = "v1"


def _occurrence_to_dict(occurrence: Occurrence) -> dict[str, object]:
    return {
        "matched_text": occurrence.matched_text,
        "start_time": occurrence.start_seconds,
        "end_time": occurrence.end_seconds,
        "segment_text": occurrence.segment_text,
        "position": occurrence.position,
    }


@dataclass(frozen=True)
class AggregatedVocabularyItem:
    """All occurrences of one vocabulary entry."""

    entry_id: ItemId
    written_form: str | None
    reading: str
    gloss: str
    part_of_speech: str | None
    group: str | None
    occurrences: tuple[Occurrence, ...]
    first_appearance_seconds: float

    @property
    def frequency(self) -> int:
        return len(self.occurrences)

    @property
    def display_form(self) -> str:
        return self.written_form or self.reading

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.entry_id,
            "japanese": self.display_form,
            "written_form": self.written_form,
            "reading": self.reading,
            "gloss": self.gloss,
            "part_of_speech": self.part_of_speech,
            "group": self.group,
            "frequency": self.frequency,
            "first_appearance": self.first_appearance_seconds,
            "occurrences": [_occurrence_to_dict(item) for item in self.occurrences],
        }


@dataclass(frozen=True)
class AggregatedGrammarItem:
    """All occurrences of one grammar pattern."""

    pattern_id: ItemId
    name: str
    structure: str | None
    explanation: str | None
    example_source: str | None
    example_target: str | None
    group: str | None
    rank: int | None
    occurrences: tuple[Occurrence, ...]
    first_appearance_seconds: float

    @property
    def frequency(self) -> int:
        return len(self.occurrences)

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.pattern_id,
            "name": self.name,
            "structure": self.structure,
            "explanation": self.explanation,
            "example_source": self.example_source,
            "example_target": self.example_target,
            "group": self.group,
            "rank": self.rank,
            "frequency": self.frequency,
            "first_appearance": self.first_appearance_seconds,
            "occurrences": [_occurrence_to_dict(item) for item in self.occurrences],
        }


@dataclass(frozen=True)
class VocabularySummary:
    unique_count: int
    total_occurrences: int
    items: tuple[AggregatedVocabularyItem, ...]


@dataclass(frozen=True)
class GrammarSummary:
    unique_count: int
    total_occurrences: int
    items: tuple[AggregatedGrammarItem, ...]


@dataclass(frozen=True)
class AnalysisStats:
    """Headline statistics for one transcript."""

    total_tokens: int
    matched_tokens: int
    density_percent: int
    estimated_study_minutes: int


@dataclass(frozen=True)
class AnalysisResult:
    """Full analysis payload for one transcript."""

    schema_version: str
    vocabulary: VocabularySummary
    grammar: GrammarSummary
    stats: AnalysisStats
    faults: tuple[PatternFault, ...] = ()

    def to_dict(self) -> dict[str, object]:
        """Returns a JSON-serializable mapping."""
        return {
            "schema_version": self.schema_version,
            "vocabulary": {
                "unique_count": self.vocabulary.unique_count,
                "total_occurrences": self.vocabulary.total_occurrences,
                "items": [item.to_dict() for item in self.vocabulary.items],
            },
            "grammar": {
                "unique_count": self.grammar.unique_count,
                "total_occurrences": self.grammar.total_occurrences,
                "items": [item.to_dict() for item in self.grammar.items],
            },
            "stats": {
                "total_tokens": self.stats.total_tokens,
                "matched_tokens": self.stats.matched_tokens,
                "density_percent": self.stats.density_percent,
                "estimated_study_minutes": self.stats.estimated_study_minutes,
            },
            "faults": [
                {
                    "pattern_id": fault.pattern_id,
                    "stage": fault.stage,
                    "message": fault.message,
                    "segment_index": fault.segment_index,
                }
                for fault in self.faults
            ],
        }


@dataclass(frozen=True)
class TimelineWindow:
    """One fixed-width slice of the recording with its density score."""

    start_seconds: float
    end_seconds: float
    vocabulary_count: int
    grammar_count: int
    total_tokens: int
    density: int
    tier: DensityTier

    def to_dict(self) -> dict[str, object]:
        return {
            "start": self.start_seconds,
            "end": self.end_seconds,
            "vocabulary_count": self.vocabulary_count,
            "grammar_count": self.grammar_count,
            "total_tokens": self.total_tokens,
            "density": self.density,
            "tier": str(self.tier),
        }


@dataclass(frozen=True)
class RecommendedWindow:
    """A timeline window suggested as a study segment."""

    window: TimelineWindow
    description: str

    def to_dict(self) -> dict[str, object]:
        return {
            "start": self.window.start_seconds,
            "end": self.window.end_seconds,
            "density": self.window.density,
            "vocabulary_count": self.window.vocabulary_count,
            "grammar_count": self.window.grammar_count,
            "description": self.description,
        }


@dataclass(frozen=True)
class Timeline:
    """Windowed density view of one recording."""

    duration_seconds: float
    window_seconds: float
    windows: tuple[TimelineWindow, ...]
    recommended: tuple[RecommendedWindow, ...]
    overall_density_percent: int

    def to_dict(self) -> dict[str, object]:
        """Returns a JSON-serializable mapping."""
        return {
            "duration": self.duration_seconds,
            "window_width": self.window_seconds,
            "windows": [window.to_dict() for window in self.windows],
            "recommended": [item.to_dict() for item in self.recommended],
            "overall_density_percent": self.overall_density_percent,
        }
