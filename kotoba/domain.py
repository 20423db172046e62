"""Domain data structures for reference data, transcripts, and matches."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import NamedTuple

from kotoba.errors import AnalysisInputError

ItemId = int | str


@dataclass(frozen=True)
class VocabularyEntry:
    """One reference vocabulary item and every surface form it may take."""

    entry_id: ItemId
    reading: str
    gloss: str
    written_form: str | None = None
    part_of_speech: str | None = None
    group: str | None = None
    variants: tuple[str, ...] = ()
    romaji: str | None = None
    jlpt_level: int | None = None

    def __post_init__(self) -> None:
        if not self.reading:
            raise ValueError(
                f"VocabularyEntry {self.entry_id!r} must have a non-empty reading."
            )

    @property
    def display_form(self) -> str:
        """Written form when available, otherwise the reading."""
        return self.written_form or self.reading

    def surface_forms(self) -> tuple[str, ...]:
        """Surface forms in registration order: written form, reading, variants."""
        forms: list[str] = []
        if self.written_form:
            forms.append(self.written_form)
        forms.append(self.reading)
        forms.extend(variant for variant in self.variants if variant)
        return tuple(forms)


@dataclass(frozen=True)
class GrammarPattern:
    """One reference grammar pattern expressed as a regular expression."""

    pattern_id: ItemId
    name: str
    regex: str
    structure: str | None = None
    explanation: str | None = None
    example_source: str | None = None
    example_target: str | None = None
    group: str | None = None
    rank: int | None = None
    jlpt_level: int | None = None


class TranscriptSegment(NamedTuple):
    """A transcript text span with start/end timing in seconds."""

    start_seconds: float
    end_seconds: float
    text: str

    @classmethod
    def from_record(cls, record: Mapping[str, object]) -> TranscriptSegment:
        """Builds a validated segment from a ``{start, end, text}`` mapping."""
        start = _read_seconds(record, "start")
        end = _read_seconds(record, "end")
        if start < 0.0:
            raise AnalysisInputError(
                f"Transcript segment start must be non-negative, got {start}."
            )
        if end <= start:
            raise AnalysisInputError(
                f"Transcript segment end ({end}) must be after its start ({start})."
            )
        raw_text = record.get("text")
        if raw_text is None:
            text = ""
        elif isinstance(raw_text, str):
            text = raw_text
        else:
            raise AnalysisInputError("Transcript segment text must be a string.")
        return cls(start_seconds=start, end_seconds=end, text=text)


def _read_seconds(record: Mapping[str, object], key: str) -> float:
    raw = record.get(key)
    if isinstance(raw, bool) or not isinstance(raw, int | float):
        raise AnalysisInputError(
            f"Transcript segment {key!r} must be a number, got {raw!r}."
        )
    value = float(raw)
    if not math.isfinite(value):
        raise AnalysisInputError(f"Transcript segment {key!r} must be finite.")
    return value


@dataclass(frozen=True)
class VocabularyMatch:
    """One lexicon hit inside a transcript segment."""

    entry_id: ItemId
    matched_text: str
    position: int
    segment_index: int
    start_seconds: float
    end_seconds: float
    segment_text: str


@dataclass(frozen=True)
class GrammarMatch:
    """One grammar-pattern hit inside a transcript segment."""

    pattern_id: ItemId
    matched_text: str
    position: int
    segment_index: int
    start_seconds: float
    end_seconds: float
    segment_text: str


@dataclass(frozen=True)
class Occurrence:
    """Where and when an aggregated item was seen."""

    matched_text: str
    start_seconds: float
    end_seconds: float
    segment_text: str
    position: int


class DensityTier(StrEnum):
    """Difficulty tier assigned to a timeline window."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class PatternFault:
    """A grammar pattern that could not be compiled or scanned."""

    pattern_id: ItemId
    stage: str
    message: str
    segment_index: int | None = None
