"""Transcript matching, aggregation and density timeline building."""

from .aggregator import aggregate_grammar, aggregate_vocabulary
from .matcher import TranscriptMatches, match_grammar, match_transcript, match_vocabulary
from .pipeline import AnalysisPipeline, coerce_segments, create_analysis_pipeline
from .schema import AnalysisResult, Timeline, TimelineWindow
from .timeline import DensityThresholds, build_density_timeline

__all__ = [
    "AnalysisPipeline",
    "AnalysisResult",
    "DensityThresholds",
    "Timeline",
    "TimelineWindow",
    "TranscriptMatches",
    "aggregate_grammar",
    "aggregate_vocabulary",
    "build_density_timeline",
    "coerce_segments",
    "create_analysis_pipeline",
    "match_grammar",
    "match_transcript",
    "match_vocabulary",
]
