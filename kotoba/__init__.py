"""JLPT vocabulary and grammar analysis for timestamped Japanese transcripts."""

from .analysis import AnalysisPipeline, create_analysis_pipeline
from .config import get_settings, reload_settings
from .domain import GrammarPattern, TranscriptSegment, VocabularyEntry
from .errors import AnalysisInputError

__all__ = [
    "AnalysisInputError",
    "AnalysisPipeline",
    "GrammarPattern",
    "TranscriptSegment",
    "VocabularyEntry",
    "create_analysis_pipeline",
    "get_settings",
    "reload_settings",
]
