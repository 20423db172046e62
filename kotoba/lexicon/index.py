"""Exact surface-form lookup over a reference vocabulary list."""

from __future__ import annotations

from collections.abc import Iterable
from types import MappingProxyType

from kotoba.domain import ItemId, VocabularyEntry
from kotoba.utils.logger import get_logger

logger = get_logger(__name__)


class LexiconIndex:
    """Maps every written form, reading and variant to its vocabulary entry.

    Keys are registered in entry order and the first registration of a surface
    string wins, so homographs shared by several entries always resolve to the
    earliest entry in the reference list.
    """

    def __init__(
        self,
        surface_map: dict[str, VocabularyEntry],
        entries: tuple[VocabularyEntry, ...],
        collision_count: int = 0,
    ) -> None:
        self._surface_map = MappingProxyType(surface_map)
        self._entries = entries
        self._by_id = MappingProxyType({entry.entry_id: entry for entry in entries})
        self.collision_count = collision_count

    @classmethod
    def build(cls, entries: Iterable[VocabularyEntry]) -> LexiconIndex:
        """Builds the lookup table from reference entries."""
        materialized = tuple(entries)
        surface_map: dict[str, VocabularyEntry] = {}
        seen_ids: set[ItemId] = set()
        collisions = 0
        for entry in materialized:
            if entry.entry_id in seen_ids:
                raise ValueError(f"Duplicate vocabulary id {entry.entry_id!r}.")
            seen_ids.add(entry.entry_id)
            for surface in entry.surface_forms():
                existing = surface_map.get(surface)
                if existing is None:
                    surface_map[surface] = entry
                    continue
                if existing.entry_id != entry.entry_id:
                    collisions += 1
                    logger.debug(
                        "Surface form %r already registered by entry %r; "
                        "keeping it over entry %r.",
                        surface,
                        existing.entry_id,
                        entry.entry_id,
                    )
        if collisions:
            logger.info(
                "Lexicon index built with %s homograph collision(s).", collisions
            )
        return cls(surface_map, materialized, collision_count=collisions)

    def lookup(self, token: str) -> VocabularyEntry | None:
        """Returns the entry whose surface form equals ``token`` exactly."""
        return self._surface_map.get(token)

    def entry(self, entry_id: ItemId) -> VocabularyEntry | None:
        """Returns the entry registered under ``entry_id``."""
        return self._by_id.get(entry_id)

    @property
    def entries(self) -> tuple[VocabularyEntry, ...]:
        return self._entries

    @property
    def surface_count(self) -> int:
        return len(self._surface_map)

    def __contains__(self, token: object) -> bool:
        return token in self._surface_map

    def __len__(self) -> int:
        return len(self._entries)
