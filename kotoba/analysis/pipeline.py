"""Analysis pipeline seam wiring tokenizer, reference data and result builders."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from kotoba.analysis.aggregator import (
    aggregate_grammar,
    aggregate_vocabulary,
    estimate_study_minutes,
    percent,
)
from kotoba.analysis.matcher import ProgressCallback, TranscriptMatches, match_transcript
from kotoba.analysis.phase_timing import (
    PHASE_AGGREGATION,
    PHASE_MATCHING,
    PHASE_TIMELINE_BUILD,
    log_phase_completed,
    log_phase_failed,
    log_phase_started,
)
from kotoba.analysis.schema import (
    OUTPUT_SCHEMA_VERSION,
    AnalysisResult,
    AnalysisStats,
    Timeline,
)
from kotoba.analysis.timeline import DensityThresholds, build_density_timeline
from kotoba.config import AppConfig, get_settings
from kotoba.domain import GrammarPattern, TranscriptSegment, VocabularyEntry
from kotoba.errors import AnalysisInputError
from kotoba.lexicon.grammar import GrammarPatternSet
from kotoba.lexicon.index import LexiconIndex
from kotoba.utils.logger import get_logger
from kotoba.utils.tokenizer import Tokenizer, count_tokens

logger = get_logger(__name__)


def coerce_segments(
    transcript: Sequence[TranscriptSegment | Mapping[str, object]] | None,
) -> list[TranscriptSegment]:
    """Validates a transcript given as segments or ``{start, end, text}`` records."""
    if transcript is None:
        raise AnalysisInputError("A transcript is required for analysis.")
    segments: list[TranscriptSegment] = []
    for item in transcript:
        if isinstance(item, TranscriptSegment):
            segments.append(item)
        elif isinstance(item, Mapping):
            segments.append(TranscriptSegment.from_record(item))
        else:
            raise AnalysisInputError(
                f"Unsupported transcript segment type: {type(item).__name__}."
            )
    return segments


@dataclass(frozen=True)
class AnalysisPipeline:
    """Runs matching, aggregation and timeline building for transcripts.

    The lexicon index and grammar pattern set are read-only after construction
    and may be shared by concurrent analyses.
    """

    lexicon_index: LexiconIndex
    pattern_set: GrammarPatternSet
    tokenizer: Tokenizer
    settings: AppConfig

    def match(
        self,
        segments: Sequence[TranscriptSegment],
        *,
        on_progress: ProgressCallback | None = None,
    ) -> TranscriptMatches:
        """Returns raw vocabulary and grammar matches for ``segments``."""
        started_at = log_phase_started(logger, phase_name=PHASE_MATCHING)
        try:
            matches = match_transcript(
                segments,
                self.lexicon_index,
                self.pattern_set,
                self.tokenizer,
                max_workers=self.settings.analysis.max_workers,
                on_progress=on_progress,
            )
        except Exception:
            log_phase_failed(logger, phase_name=PHASE_MATCHING, started_at=started_at)
            raise
        log_phase_completed(logger, phase_name=PHASE_MATCHING, started_at=started_at)
        return matches

    def analyze(
        self,
        transcript: Sequence[TranscriptSegment | Mapping[str, object]] | None,
        *,
        full_text: str | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> AnalysisResult:
        """Analyzes one transcript.

        Args:
            transcript: Ordered segments or ``{start, end, text}`` records.
            full_text: Text used for the total token count; defaults to the
                segment texts joined without a separator.
            on_progress: Optional observer called with ``(done, total)``.

        Returns:
            Aggregated vocabulary and grammar plus headline statistics.

        Raises:
            AnalysisInputError: If the transcript is missing or malformed.
        """
        segments = coerce_segments(transcript)
        matches = self.match(segments, on_progress=on_progress)

        started_at = log_phase_started(logger, phase_name=PHASE_AGGREGATION)
        try:
            vocabulary = aggregate_vocabulary(matches.vocabulary, self.lexicon_index)
            grammar = aggregate_grammar(matches.grammar, self.pattern_set)
        except Exception:
            log_phase_failed(
                logger, phase_name=PHASE_AGGREGATION, started_at=started_at
            )
            raise
        log_phase_completed(logger, phase_name=PHASE_AGGREGATION, started_at=started_at)

        text = (
            full_text
            if full_text is not None
            else "".join(segment.text for segment in segments)
        )
        total_tokens = count_tokens(self.tokenizer, text)
        matched_tokens = vocabulary.total_occurrences
        stats = AnalysisStats(
            total_tokens=total_tokens,
            matched_tokens=matched_tokens,
            density_percent=percent(matched_tokens, total_tokens),
            estimated_study_minutes=estimate_study_minutes(
                len(segments), self.settings.analysis.segments_per_study_minute
            ),
        )
        logger.info(
            "Analysis complete: %s unique word(s) (%s total), "
            "%s unique grammar pattern(s) (%s total), density %s%%.",
            vocabulary.unique_count,
            vocabulary.total_occurrences,
            grammar.unique_count,
            grammar.total_occurrences,
            stats.density_percent,
        )
        return AnalysisResult(
            schema_version=OUTPUT_SCHEMA_VERSION,
            vocabulary=vocabulary,
            grammar=grammar,
            stats=stats,
            faults=self.pattern_set.faults + tuple(matches.faults),
        )

    def build_timeline(
        self,
        duration_seconds: float,
        transcript: Sequence[TranscriptSegment | Mapping[str, object]] | None,
        result: AnalysisResult,
        *,
        window_seconds: float | None = None,
    ) -> Timeline:
        """Builds the density timeline from an analysis result."""
        segments = coerce_segments(transcript)
        timeline_settings = self.settings.timeline
        started_at = log_phase_started(logger, phase_name=PHASE_TIMELINE_BUILD)
        try:
            timeline = build_density_timeline(
                duration_seconds,
                segments,
                result.vocabulary.items,
                result.grammar.items,
                self.tokenizer,
                window_seconds=(
                    window_seconds
                    if window_seconds is not None
                    else timeline_settings.window_seconds
                ),
                recommendation_limit=timeline_settings.recommendation_limit,
                thresholds=DensityThresholds(
                    high=timeline_settings.density_high,
                    medium=timeline_settings.density_medium,
                ),
            )
        except Exception:
            log_phase_failed(
                logger, phase_name=PHASE_TIMELINE_BUILD, started_at=started_at
            )
            raise
        log_phase_completed(
            logger, phase_name=PHASE_TIMELINE_BUILD, started_at=started_at
        )
        return timeline


def create_analysis_pipeline(
    vocabulary: Sequence[VocabularyEntry],
    grammar_patterns: Sequence[GrammarPattern],
    tokenizer: Tokenizer,
    *,
    settings: AppConfig | None = None,
) -> AnalysisPipeline:
    """Builds the lexicon index and pattern set once and returns a pipeline."""
    return AnalysisPipeline(
        lexicon_index=LexiconIndex.build(vocabulary),
        pattern_set=GrammarPatternSet.build(grammar_patterns),
        tokenizer=tokenizer,
        settings=settings if settings is not None else get_settings(),
    )
