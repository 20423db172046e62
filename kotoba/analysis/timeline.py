"""Fixed-width density timeline and study-segment recommendations.

The recording is partitioned into ``ceil(duration / window)`` contiguous
windows, the last one clipped to the duration. Each window counts distinct
vocabulary and grammar ids whose occurrences start inside ``[start, end)`` and
the tokens of every transcript segment whose start lies in the window. A
segment that crosses a window boundary is attributed wholly to the window
holding its start.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from kotoba.analysis.aggregator import percent, round_half_up
from kotoba.analysis.schema import (
    AggregatedGrammarItem,
    AggregatedVocabularyItem,
    RecommendedWindow,
    Timeline,
    TimelineWindow,
)
from kotoba.config import (
    DEFAULT_DENSITY_HIGH,
    DEFAULT_DENSITY_MEDIUM,
    DEFAULT_RECOMMENDATION_LIMIT,
    DEFAULT_WINDOW_SECONDS,
)
from kotoba.domain import DensityTier, TranscriptSegment
from kotoba.errors import AnalysisInputError
from kotoba.utils.logger import get_logger
from kotoba.utils.tokenizer import Tokenizer, count_tokens

logger = get_logger(__name__)

DESCRIPTION_WORD_LIMIT = 5
DESCRIPTION_FALLBACK = "Reference vocabulary"


@dataclass(frozen=True)
class DensityThresholds:
    """Inclusive lower bounds (percent) for the medium and high tiers."""

    high: int = DEFAULT_DENSITY_HIGH
    medium: int = DEFAULT_DENSITY_MEDIUM

    def classify(self, density: int) -> DensityTier:
        if density >= self.high:
            return DensityTier.HIGH
        if density >= self.medium:
            return DensityTier.MEDIUM
        return DensityTier.LOW


def _is_positive_finite(value: object) -> bool:
    if isinstance(value, bool | np.bool_) or not isinstance(
        value, int | float | np.integer | np.floating
    ):
        return False
    return bool(np.isfinite(value)) and value > 0


def _window_bounds(
    duration_seconds: float, window_seconds: float
) -> list[tuple[float, float]]:
    count = math.ceil(duration_seconds / window_seconds)
    bounds: list[tuple[float, float]] = []
    for index in range(count):
        start = index * window_seconds
        if index == count - 1:
            end = duration_seconds
        else:
            end = min((index + 1) * window_seconds, duration_seconds)
        if end <= start:
            break
        bounds.append((start, end))
    return bounds


def _starts_within(start_seconds: float, window: tuple[float, float]) -> bool:
    return window[0] <= start_seconds < window[1]


def _distinct_ids_in_window(
    items: Sequence[AggregatedVocabularyItem] | Sequence[AggregatedGrammarItem],
    window: tuple[float, float],
) -> int:
    return sum(
        1
        for item in items
        if any(
            _starts_within(occurrence.start_seconds, window)
            for occurrence in item.occurrences
        )
    )


def describe_window(
    window: TimelineWindow, segments: Sequence[TranscriptSegment]
) -> str:
    """Short description from the first segment that starts in ``window``."""
    bounds = (window.start_seconds, window.end_seconds)
    for segment in segments:
        if _starts_within(segment.start_seconds, bounds):
            words = segment.text.split(" ")
            description = " ".join(words[:DESCRIPTION_WORD_LIMIT])
            if len(words) > DESCRIPTION_WORD_LIMIT:
                description += "..."
            return description
    return DESCRIPTION_FALLBACK


def recommend_windows(
    windows: Sequence[TimelineWindow],
    segments: Sequence[TranscriptSegment],
    *,
    limit: int = DEFAULT_RECOMMENDATION_LIMIT,
) -> list[RecommendedWindow]:
    """Top windows by density among those with vocabulary.

    The sort is stable, so equal densities keep partition order.
    """
    candidates = [window for window in windows if window.vocabulary_count > 0]
    ranked = sorted(candidates, key=lambda window: -window.density)
    return [
        RecommendedWindow(window=window, description=describe_window(window, segments))
        for window in ranked[: max(0, limit)]
    ]


def build_density_timeline(
    duration_seconds: float,
    segments: Sequence[TranscriptSegment],
    vocabulary_items: Sequence[AggregatedVocabularyItem],
    grammar_items: Sequence[AggregatedGrammarItem],
    tokenizer: Tokenizer,
    *,
    window_seconds: float = DEFAULT_WINDOW_SECONDS,
    recommendation_limit: int = DEFAULT_RECOMMENDATION_LIMIT,
    thresholds: DensityThresholds | None = None,
) -> Timeline:
    """Builds the windowed density timeline for one recording.

    Args:
        duration_seconds: Total recording length; must be positive and finite.
        segments: Ordered transcript segments used for token counts.
        vocabulary_items: Aggregated vocabulary for the transcript.
        grammar_items: Aggregated grammar for the transcript.
        tokenizer: Word segmentation callable.
        window_seconds: Window width; must be positive and finite.
        recommendation_limit: Maximum number of recommended windows.
        thresholds: Tier thresholds; defaults to 50 (high) and 25 (medium).

    Returns:
        Windows covering ``[0, duration)``, recommendations and the mean density.

    Raises:
        AnalysisInputError: If the duration or window width is invalid.
    """
    if not _is_positive_finite(duration_seconds):
        raise AnalysisInputError(
            f"Timeline duration must be a positive finite number, got {duration_seconds!r}."
        )
    if not _is_positive_finite(window_seconds):
        raise AnalysisInputError(
            f"Timeline window width must be a positive finite number, got {window_seconds!r}."
        )
    if segments is None:
        raise AnalysisInputError("A transcript is required to build a timeline.")
    resolved_thresholds = thresholds if thresholds is not None else DensityThresholds()

    segment_tokens = [count_tokens(tokenizer, segment.text) for segment in segments]
    windows: list[TimelineWindow] = []
    for bounds in _window_bounds(float(duration_seconds), float(window_seconds)):
        vocabulary_count = _distinct_ids_in_window(vocabulary_items, bounds)
        grammar_count = _distinct_ids_in_window(grammar_items, bounds)
        total_tokens = sum(
            tokens
            for segment, tokens in zip(segments, segment_tokens)
            if _starts_within(segment.start_seconds, bounds)
        )
        density = percent(vocabulary_count, total_tokens)
        windows.append(
            TimelineWindow(
                start_seconds=bounds[0],
                end_seconds=bounds[1],
                vocabulary_count=vocabulary_count,
                grammar_count=grammar_count,
                total_tokens=total_tokens,
                density=density,
                tier=resolved_thresholds.classify(density),
            )
        )

    recommended = recommend_windows(windows, segments, limit=recommendation_limit)
    overall = round_half_up(float(np.mean([window.density for window in windows])))
    logger.info(
        "Timeline built: %s window(s), %s recommended, overall density %s%%.",
        len(windows),
        len(recommended),
        overall,
    )
    return Timeline(
        duration_seconds=float(duration_seconds),
        window_seconds=float(window_seconds),
        windows=tuple(windows),
        recommended=tuple(recommended),
        overall_density_percent=overall,
    )
