"""Compiled grammar-pattern catalog shared across matching runs."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from types import MappingProxyType

from kotoba.domain import GrammarPattern, ItemId, PatternFault
from kotoba.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CompiledPattern:
    """A grammar pattern paired with its compiled regular expression."""

    pattern: GrammarPattern
    compiled: re.Pattern[str]


class GrammarPatternSet:
    """Ordered, read-only set of grammar patterns compiled once at build time."""

    def __init__(
        self,
        compiled: tuple[CompiledPattern, ...],
        patterns: tuple[GrammarPattern, ...],
        faults: tuple[PatternFault, ...] = (),
    ) -> None:
        self._compiled = compiled
        self._patterns = patterns
        self._by_id = MappingProxyType({item.pattern_id: item for item in patterns})
        self.faults = faults

    @classmethod
    def build(cls, patterns: Iterable[GrammarPattern]) -> GrammarPatternSet:
        """Compiles every pattern; invalid regexes are logged and skipped."""
        materialized = tuple(patterns)
        compiled: list[CompiledPattern] = []
        faults: list[PatternFault] = []
        seen_ids: set[ItemId] = set()
        for pattern in materialized:
            if pattern.pattern_id in seen_ids:
                raise ValueError(f"Duplicate grammar pattern id {pattern.pattern_id!r}.")
            seen_ids.add(pattern.pattern_id)
            try:
                regex = re.compile(pattern.regex)
            except re.error as err:
                logger.warning(
                    "Skipping grammar pattern %r (%s): invalid regex %r: %s",
                    pattern.pattern_id,
                    pattern.name,
                    pattern.regex,
                    err,
                )
                faults.append(
                    PatternFault(
                        pattern_id=pattern.pattern_id,
                        stage="compile",
                        message=str(err),
                    )
                )
                continue
            compiled.append(CompiledPattern(pattern=pattern, compiled=regex))
        return cls(tuple(compiled), materialized, faults=tuple(faults))

    @property
    def compiled(self) -> tuple[CompiledPattern, ...]:
        """Patterns that compiled successfully, in catalog order."""
        return self._compiled

    @property
    def patterns(self) -> tuple[GrammarPattern, ...]:
        return self._patterns

    def pattern(self, pattern_id: ItemId) -> GrammarPattern | None:
        return self._by_id.get(pattern_id)

    def __len__(self) -> int:
        return len(self._compiled)
