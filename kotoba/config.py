"""Typed runtime configuration for transcript analysis.

Values come from environment variables (optionally populated from a ``.env``
file by the CLI) and are cached until ``reload_settings`` is called.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_SECONDS = 15.0
DEFAULT_RECOMMENDATION_LIMIT = 5
DEFAULT_DENSITY_HIGH = 50
DEFAULT_DENSITY_MEDIUM = 25
DEFAULT_SEGMENTS_PER_STUDY_MINUTE = 6
DEFAULT_MAX_WORKERS = 1


@dataclass(frozen=True)
class TimelineConfig:
    """Windowing and recommendation policy for density timelines."""

    window_seconds: float = DEFAULT_WINDOW_SECONDS
    recommendation_limit: int = DEFAULT_RECOMMENDATION_LIMIT
    density_high: int = DEFAULT_DENSITY_HIGH
    density_medium: int = DEFAULT_DENSITY_MEDIUM


@dataclass(frozen=True)
class AnalysisConfig:
    """Matching and headline-statistics settings."""

    max_workers: int = DEFAULT_MAX_WORKERS
    segments_per_study_minute: int = DEFAULT_SEGMENTS_PER_STUDY_MINUTE


@dataclass(frozen=True)
class ReferenceConfig:
    """Locations and filters for reference vocabulary and grammar data."""

    lexicon_file: Path | None = None
    grammar_file: Path | None = None
    jlpt_level: int | None = None


@dataclass(frozen=True)
class AppConfig:
    """Top-level application settings."""

    timeline: TimelineConfig
    analysis: AnalysisConfig
    reference: ReferenceConfig


def _read_text(name: str) -> str | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return raw.strip()


def _read_int(name: str, default: int, *, minimum: int = 1) -> int:
    raw = _read_text(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r; using %s.", name, raw, default)
        return default
    if value < minimum:
        logger.warning("Ignoring out-of-range %s=%r; using %s.", name, raw, default)
        return default
    return value


def _read_float(name: str, default: float) -> float:
    raw = _read_text(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r; using %s.", name, raw, default)
        return default
    if not value > 0.0 or value == float("inf"):
        logger.warning("Ignoring out-of-range %s=%r; using %s.", name, raw, default)
        return default
    return value


def _read_path(name: str) -> Path | None:
    raw = _read_text(name)
    return Path(raw) if raw is not None else None


def _read_optional_level(name: str) -> int | None:
    raw = _read_text(name)
    if raw is None:
        return None
    try:
        level = int(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r.", name, raw)
        return None
    if level not in (1, 2, 3, 4, 5):
        logger.warning("Ignoring out-of-range %s=%r.", name, raw)
        return None
    return level


def _resolve_max_workers() -> int:
    requested = _read_int("KOTOBA_MAX_WORKERS", DEFAULT_MAX_WORKERS)
    return min(requested, os.cpu_count() or 1)


def _load_settings() -> AppConfig:
    density_high = _read_int("KOTOBA_DENSITY_HIGH", DEFAULT_DENSITY_HIGH, minimum=0)
    density_medium = _read_int(
        "KOTOBA_DENSITY_MEDIUM", DEFAULT_DENSITY_MEDIUM, minimum=0
    )
    if density_medium > density_high:
        logger.warning(
            "KOTOBA_DENSITY_MEDIUM (%s) exceeds KOTOBA_DENSITY_HIGH (%s); "
            "using default thresholds.",
            density_medium,
            density_high,
        )
        density_high, density_medium = DEFAULT_DENSITY_HIGH, DEFAULT_DENSITY_MEDIUM
    return AppConfig(
        timeline=TimelineConfig(
            window_seconds=_read_float("KOTOBA_WINDOW_SECONDS", DEFAULT_WINDOW_SECONDS),
            recommendation_limit=_read_int(
                "KOTOBA_RECOMMENDATION_LIMIT", DEFAULT_RECOMMENDATION_LIMIT
            ),
            density_high=density_high,
            density_medium=density_medium,
        ),
        analysis=AnalysisConfig(
            max_workers=_resolve_max_workers(),
            segments_per_study_minute=_read_int(
                "KOTOBA_SEGMENTS_PER_STUDY_MINUTE", DEFAULT_SEGMENTS_PER_STUDY_MINUTE
            ),
        ),
        reference=ReferenceConfig(
            lexicon_file=_read_path("KOTOBA_LEXICON_FILE"),
            grammar_file=_read_path("KOTOBA_GRAMMAR_FILE"),
            jlpt_level=_read_optional_level("KOTOBA_JLPT_LEVEL"),
        ),
    )


_SETTINGS: AppConfig | None = None


def get_settings() -> AppConfig:
    """Returns cached settings, loading them on first access."""
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = _load_settings()
    return _SETTINGS


def reload_settings() -> AppConfig:
    """Re-reads the environment and replaces cached settings."""
    global _SETTINGS
    _SETTINGS = _load_settings()
    return _SETTINGS
