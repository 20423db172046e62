"""Lexical and structural matching of transcript segments.

Vocabulary is matched token by token against a :class:`LexiconIndex`; grammar
is matched by scanning raw segment text with every compiled pattern of a
:class:`GrammarPatternSet`. Both matchers are pure per segment, so a
transcript may be fanned out across worker threads and merged back in
segment order.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from kotoba.domain import GrammarMatch, PatternFault, TranscriptSegment, VocabularyMatch
from kotoba.errors import AnalysisInputError
from kotoba.lexicon.grammar import GrammarPatternSet
from kotoba.lexicon.index import LexiconIndex
from kotoba.utils.logger import get_logger
from kotoba.utils.tokenizer import Tokenizer, tokenize_text

ProgressCallback = Callable[[int, int], None]

logger = get_logger(__name__)


@dataclass(frozen=True)
class SegmentMatches:
    """Matches found in one transcript segment."""

    vocabulary: list[VocabularyMatch]
    grammar: list[GrammarMatch]
    faults: list[PatternFault] = field(default_factory=list)


@dataclass(frozen=True)
class TranscriptMatches:
    """Matches for a whole transcript, in segment order."""

    vocabulary: list[VocabularyMatch]
    grammar: list[GrammarMatch]
    faults: list[PatternFault]


def match_vocabulary(
    segment: TranscriptSegment,
    lexicon_index: LexiconIndex,
    tokenizer: Tokenizer,
    *,
    segment_index: int = 0,
) -> list[VocabularyMatch]:
    """Returns every token of ``segment`` that is a registered surface form.

    Token offsets are located by searching the segment text from the end of the
    previously consumed token, so repeated identical tokens resolve to
    successive positions. A token that cannot be located from the cursor is
    placed at the cursor and the cursor stays put.
    """
    text = segment.text
    matches: list[VocabularyMatch] = []
    cursor = 0
    for token in tokenize_text(tokenizer, text):
        found_at = text.find(token, cursor)
        if found_at < 0:
            position = cursor
        else:
            position = found_at
            cursor = found_at + len(token)

        entry = lexicon_index.lookup(token)
        if entry is None:
            continue
        matches.append(
            VocabularyMatch(
                entry_id=entry.entry_id,
                matched_text=token,
                position=position,
                segment_index=segment_index,
                start_seconds=segment.start_seconds,
                end_seconds=segment.end_seconds,
                segment_text=text,
            )
        )
    return matches


def match_grammar(
    segment: TranscriptSegment,
    pattern_set: GrammarPatternSet,
    *,
    segment_index: int = 0,
    faults: list[PatternFault] | None = None,
) -> list[GrammarMatch]:
    """Returns every non-overlapping grammar-pattern hit in ``segment``.

    Patterns are scanned in catalog order. Zero-length hits carry no surface
    text and are not reported. A pattern that raises while scanning is skipped
    for this segment and reported through the log and ``faults``.
    """
    text = segment.text
    matches: list[GrammarMatch] = []
    if not text:
        return matches
    for item in pattern_set.compiled:
        pattern_id = item.pattern.pattern_id
        try:
            hits = [
                (hit.group(0), hit.start())
                for hit in item.compiled.finditer(text)
                if hit.end() > hit.start()
            ]
        except Exception as err:
            logger.warning(
                "Grammar pattern %r failed on segment %s: %s",
                pattern_id,
                segment_index,
                err,
                exc_info=True,
            )
            if faults is not None:
                faults.append(
                    PatternFault(
                        pattern_id=pattern_id,
                        stage="scan",
                        message=str(err),
                        segment_index=segment_index,
                    )
                )
            continue
        for matched_text, position in hits:
            matches.append(
                GrammarMatch(
                    pattern_id=pattern_id,
                    matched_text=matched_text,
                    position=position,
                    segment_index=segment_index,
                    start_seconds=segment.start_seconds,
                    end_seconds=segment.end_seconds,
                    segment_text=text,
                )
            )
    return matches


def match_segment(
    segment: TranscriptSegment,
    lexicon_index: LexiconIndex,
    pattern_set: GrammarPatternSet,
    tokenizer: Tokenizer,
    *,
    segment_index: int = 0,
) -> SegmentMatches:
    """Runs both matchers over one segment."""
    faults: list[PatternFault] = []
    vocabulary = match_vocabulary(
        segment, lexicon_index, tokenizer, segment_index=segment_index
    )
    grammar = match_grammar(
        segment, pattern_set, segment_index=segment_index, faults=faults
    )
    return SegmentMatches(vocabulary=vocabulary, grammar=grammar, faults=faults)


def match_transcript(
    segments: Sequence[TranscriptSegment] | None,
    lexicon_index: LexiconIndex,
    pattern_set: GrammarPatternSet,
    tokenizer: Tokenizer,
    *,
    max_workers: int = 1,
    on_progress: ProgressCallback | None = None,
) -> TranscriptMatches:
    """Matches every segment and merges results in transcript order.

    Args:
        segments: Ordered transcript segments. An empty sequence is valid.
        lexicon_index: Surface-form lookup for vocabulary.
        pattern_set: Compiled grammar patterns.
        tokenizer: Word segmentation callable.
        max_workers: Thread fan-out; ``1`` runs sequentially.
        on_progress: Optional observer called with ``(done, total)``.

    Returns:
        Vocabulary matches, grammar matches and scan faults.

    Raises:
        AnalysisInputError: If ``segments`` is ``None``.
    """
    if segments is None:
        raise AnalysisInputError("A transcript is required for matching.")
    total = len(segments)

    def _run(indexed: tuple[int, TranscriptSegment]) -> SegmentMatches:
        index, segment = indexed
        return match_segment(
            segment, lexicon_index, pattern_set, tokenizer, segment_index=index
        )

    vocabulary: list[VocabularyMatch] = []
    grammar: list[GrammarMatch] = []
    faults: list[PatternFault] = []

    def _merge(done: int, result: SegmentMatches) -> None:
        vocabulary.extend(result.vocabulary)
        grammar.extend(result.grammar)
        faults.extend(result.faults)
        if on_progress is not None:
            on_progress(done, total)

    indexed_segments = list(enumerate(segments))
    if max_workers <= 1 or total <= 1:
        for done, item in enumerate(indexed_segments, start=1):
            _merge(done, _run(item))
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            for done, result in enumerate(executor.map(_run, indexed_segments), start=1):
                _merge(done, result)

    logger.debug(
        "Matched %s segments: %s vocabulary hit(s), %s grammar hit(s).",
        total,
        len(vocabulary),
        len(grammar),
    )
    return TranscriptMatches(vocabulary=vocabulary, grammar=grammar, faults=faults)
