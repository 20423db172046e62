"""
kotoba command-line entry point.

Reads a timestamped transcript plus reference vocabulary and grammar files,
runs the analysis pipeline and prints the result as JSON, or as a short
terminal summary of the recommended study windows.

Usage:
    kotoba --transcript talk.json --lexicon n5_vocabulary.json
    kotoba --transcript talk.json --lexicon n5.yaml --grammar grammar.yaml --summary
"""

import argparse
import json
import logging
import sys
from collections.abc import Mapping
from dataclasses import replace
from pathlib import Path

from dotenv import load_dotenv
from halo import Halo

from kotoba.analysis import create_analysis_pipeline
from kotoba.analysis.schema import Timeline
from kotoba.config import AppConfig, reload_settings
from kotoba.domain import GrammarPattern, VocabularyEntry
from kotoba.errors import AnalysisInputError
from kotoba.lexicon import (
    ReferenceDataError,
    load_default_grammar_patterns,
    load_grammar_patterns,
    load_vocabulary,
)
from kotoba.utils import TinySegmenterTokenizer, configure_logging, get_logger
from kotoba.utils.timeline_utils import print_timeline_summary

logger: logging.Logger = get_logger("kotoba")


def _build_parser(settings: AppConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kotoba",
        description="JLPT vocabulary, grammar and density analysis for transcripts",
    )
    parser.add_argument(
        "--transcript",
        type=Path,
        required=True,
        help="JSON transcript: a list of {start, end, text} segments or an "
        "object with 'segments' and optional 'duration'/'full_text'",
    )
    parser.add_argument(
        "--lexicon",
        type=Path,
        default=settings.reference.lexicon_file,
        help="Vocabulary reference file (JSON, JSONL or YAML)",
    )
    parser.add_argument(
        "--grammar",
        type=Path,
        default=settings.reference.grammar_file,
        help="Grammar pattern file; the bundled N5 catalog is used when omitted",
    )
    parser.add_argument(
        "--jlpt-level",
        type=int,
        choices=(1, 2, 3, 4, 5),
        default=settings.reference.jlpt_level,
        help="Only keep reference items of this JLPT level",
    )
    parser.add_argument(
        "--duration",
        type=float,
        help="Recording duration in seconds (defaults to the transcript's "
        "'duration' or last segment end)",
    )
    parser.add_argument(
        "--window-seconds",
        type=float,
        default=settings.timeline.window_seconds,
        help="Timeline window width in seconds",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=settings.analysis.max_workers,
        help="Threads used to match transcript segments",
    )
    parser.add_argument(
        "--no-timeline",
        action="store_true",
        help="Skip the density timeline",
    )
    parser.add_argument(
        "--summary",
        action="store_true",
        help="Print a terminal summary instead of JSON",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        help="Logging level (overrides LOG_LEVEL)",
    )
    return parser


def _read_transcript(path: Path) -> tuple[list[object], float | None, str | None]:
    with path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if isinstance(payload, list):
        return payload, None, None
    if isinstance(payload, Mapping) and isinstance(payload.get("segments"), list):
        duration = payload.get("duration")
        full_text = payload.get("full_text")
        return (
            payload["segments"],
            float(duration) if isinstance(duration, int | float) else None,
            full_text if isinstance(full_text, str) else None,
        )
    raise AnalysisInputError(
        f"Transcript file {path} must hold a list of segments or a 'segments' list."
    )


def _load_reference(
    args: argparse.Namespace,
) -> tuple[list[VocabularyEntry], list[GrammarPattern]]:
    vocabulary: list[VocabularyEntry] = []
    if args.lexicon is not None:
        vocabulary = load_vocabulary(args.lexicon, jlpt_level=args.jlpt_level)
    else:
        logger.warning("No lexicon file given; vocabulary matching is disabled.")
    if args.grammar is not None:
        grammar = load_grammar_patterns(args.grammar, jlpt_level=args.jlpt_level)
    else:
        grammar = load_default_grammar_patterns()
    return vocabulary, grammar


def _resolve_duration(
    explicit: float | None, from_file: float | None, segments: list[object]
) -> float:
    if explicit is not None:
        return explicit
    if from_file is not None:
        return from_file
    ends = [
        float(segment["end"])
        for segment in segments
        if isinstance(segment, Mapping) and isinstance(segment.get("end"), int | float)
    ]
    return max(ends, default=0.0)


def main() -> None:
    """
    Main function to handle the command line interface logic.
    """
    load_dotenv()
    settings = reload_settings()
    parser = _build_parser(settings)
    args: argparse.Namespace = parser.parse_args()
    configure_logging(args.log_level)

    try:
        segments, file_duration, full_text = _read_transcript(args.transcript)
        vocabulary, grammar = _load_reference(args)
    except (OSError, json.JSONDecodeError, ReferenceDataError, AnalysisInputError) as err:
        logger.error(msg=f"Failed to load input: {err}")
        sys.exit(1)

    settings = replace(
        settings,
        analysis=replace(settings.analysis, max_workers=max(1, args.workers)),
    )
    pipeline = create_analysis_pipeline(
        vocabulary, grammar, TinySegmenterTokenizer(), settings=settings
    )
    try:
        with Halo(text="Analyzing transcript...", spinner="dots", stream=sys.stderr):
            result = pipeline.analyze(segments, full_text=full_text)
            timeline: Timeline | None = None
            if not args.no_timeline:
                timeline = pipeline.build_timeline(
                    _resolve_duration(args.duration, file_duration, segments),
                    segments,
                    result,
                    window_seconds=args.window_seconds,
                )
    except AnalysisInputError as err:
        logger.error(msg=f"Analysis failed: {err}")
        sys.exit(1)

    if args.summary:
        print_timeline_summary(result, timeline)
    else:
        payload: dict[str, object] = {"analysis": result.to_dict()}
        if timeline is not None:
            payload["timeline"] = timeline.to_dict()
        print(json.dumps(payload, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
