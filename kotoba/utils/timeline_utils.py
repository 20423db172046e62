"""
Terminal rendering of density timelines for the kotoba CLI.

Functions:
    - display_elapsed_time: Formats a second offset as a short clock string.
    - color_txt: Colorizes a string.
    - print_timeline_summary: Prints headline stats and recommended windows.
"""

import logging

from colored import attr, bg, fg

from kotoba.analysis.schema import AnalysisResult, Timeline
from kotoba.domain import DensityTier
from kotoba.utils.logger import get_logger

logger: logging.Logger = get_logger(__name__)

TIER_COLORS: dict[DensityTier, str] = {
    DensityTier.HIGH: "green",
    DensityTier.MEDIUM: "yellow",
    DensityTier.LOW: "white",
}


def display_elapsed_time(elapsed_time: float) -> str:
    """
    Returns an offset in seconds as ``m:ss``.

    Arguments:
        elapsed_time (float): Offset in seconds.

    Returns:
        str: Formatted offset.
    """
    minutes, seconds = divmod(int(elapsed_time), 60)
    return f"{minutes}:{seconds:02d}"


def color_txt(
    string: str, fg_color: str, bg_color: str, padding: int = 0
) -> str:
    """
    Colorizes a string.

    Arguments:
        string (str): String to be colorized.
        fg_color (str): Foreground color.
        bg_color (str): Background color.
        padding (int): Minimum width, padded on the right.

    Returns:
        str: Colorized string.
    """
    if padding:
        string = string.ljust(padding)

    return f"{fg(fg_color)}{bg(bg_color)}{string}{attr('reset')}"


def print_timeline_summary(result: AnalysisResult, timeline: Timeline | None) -> None:
    """
    Prints headline statistics and the recommended study windows.

    Arguments:
        result (AnalysisResult): Analysis of the transcript.
        timeline (Timeline | None): Density timeline, when one was built.
    """
    stats = result.stats
    print(
        f"Vocabulary: {result.vocabulary.unique_count} unique "
        f"({result.vocabulary.total_occurrences} total)  "
        f"Grammar: {result.grammar.unique_count} unique "
        f"({result.grammar.total_occurrences} total)"
    )
    print(
        f"Tokens: {stats.total_tokens}  Density: {stats.density_percent}%  "
        f"Study time: ~{stats.estimated_study_minutes} min"
    )
    if timeline is None:
        return

    logger.debug("Printing %s recommended windows.", len(timeline.recommended))
    print(f"Overall window density: {timeline.overall_density_percent}%")
    print(color_txt("Recommended segments", "black", "green"))
    if not timeline.recommended:
        print("  (none)")
        return
    for item in timeline.recommended:
        window = item.window
        span = (
            f"{display_elapsed_time(window.start_seconds)}-"
            f"{display_elapsed_time(window.end_seconds)}"
        )
        tier = color_txt(str(window.tier).upper(), "black", TIER_COLORS[window.tier], 7)
        print(
            f"  {span.ljust(11)} {tier} {str(window.density).rjust(3)}%  "
            f"words={window.vocabulary_count} grammar={window.grammar_count}  "
            f"{item.description}"
        )
