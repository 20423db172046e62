"""Loaders for reference vocabulary and grammar-pattern files.

Reference lists may be stored as a JSON array, a JSON object holding the list
under ``vocabulary``/``grammar``/``patterns``, JSON Lines, or YAML. Records
accept both the neutral field names used by :mod:`kotoba.domain` and the
legacy seed-data names (``kanji``, ``hiragana``, ``english``, ``pattern_regex``
and so on).
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import cast

import yaml

from kotoba.domain import GrammarPattern, ItemId, VocabularyEntry
from kotoba.utils.logger import get_logger

logger = get_logger(__name__)

_DEFAULT_GRAMMAR_FILE_NAME = "n5_grammar_patterns.yaml"
_GRAMMAR_CATALOG_SCHEMA_VERSION = 1
_LIST_KEYS: tuple[str, ...] = ("vocabulary", "grammar", "patterns", "items")


class ReferenceDataError(ValueError):
    """Raised when a reference file or record is malformed."""


def _first_present(record: Mapping[str, object], *keys: str) -> object | None:
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return None


def _read_text(
    record: Mapping[str, object],
    *keys: str,
    required: bool = False,
    label: str,
) -> str | None:
    raw = _first_present(record, *keys)
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        if required:
            raise ReferenceDataError(f"{label} is missing required field {keys[0]!r}.")
        return None
    if not isinstance(raw, str):
        raise ReferenceDataError(f"{label} field {keys[0]!r} must be a string.")
    return raw.strip()


def _read_optional_int(
    record: Mapping[str, object], *keys: str, label: str
) -> int | None:
    raw = _first_present(record, *keys)
    if raw is None:
        return None
    if isinstance(raw, bool) or not isinstance(raw, int):
        if isinstance(raw, str) and raw.strip().isdigit():
            return int(raw.strip())
        raise ReferenceDataError(f"{label} field {keys[0]!r} must be an integer.")
    return raw


def _read_id(record: Mapping[str, object], *, index: int, label: str) -> ItemId:
    raw = record.get("id")
    if raw is None:
        return index
    if isinstance(raw, bool) or not isinstance(raw, int | str):
        raise ReferenceDataError(f"{label} field 'id' must be an integer or string.")
    if isinstance(raw, str) and not raw.strip():
        raise ReferenceDataError(f"{label} field 'id' must be non-empty.")
    return raw


def _read_variants(record: Mapping[str, object], *, label: str) -> tuple[str, ...]:
    raw = record.get("variants")
    if raw is None:
        return ()
    if isinstance(raw, str):
        try:
            decoded = json.loads(raw)
        except json.JSONDecodeError:
            logger.debug("%s has undecodable variants %r; ignoring them.", label, raw)
            return ()
        raw = decoded
    if not isinstance(raw, list):
        logger.debug("%s has non-list variants %r; ignoring them.", label, raw)
        return ()
    return tuple(item.strip() for item in raw if isinstance(item, str) and item.strip())


def vocabulary_entry_from_record(
    record: Mapping[str, object], *, index: int = 1
) -> VocabularyEntry:
    """Builds a validated vocabulary entry from one reference record.

    Args:
        record: Mapping using neutral or legacy seed-data field names.
        index: 1-based position used as the id when the record has none.

    Returns:
        The typed vocabulary entry.

    Raises:
        ReferenceDataError: If required fields are missing or mistyped.
    """
    label = f"Vocabulary record #{index}"
    reading = _read_text(record, "reading", "hiragana", required=True, label=label)
    return VocabularyEntry(
        entry_id=_read_id(record, index=index, label=label),
        reading=cast(str, reading),
        gloss=_read_text(record, "gloss", "english", "meaning", label=label) or "",
        written_form=_read_text(record, "written_form", "kanji", label=label),
        part_of_speech=_read_text(record, "part_of_speech", label=label),
        group=_read_text(record, "group", "chapter", label=label),
        variants=_read_variants(record, label=label),
        romaji=_read_text(record, "romaji", label=label),
        jlpt_level=_read_optional_int(record, "jlpt_level", label=label),
    )


def grammar_pattern_from_record(
    record: Mapping[str, object], *, index: int = 1
) -> GrammarPattern:
    """Builds a grammar pattern from one reference record."""
    label = f"Grammar record #{index}"
    name = _read_text(record, "name", "pattern_name", required=True, label=label)
    regex = _read_text(record, "regex", "pattern_regex", required=True, label=label)
    return GrammarPattern(
        pattern_id=_read_id(record, index=index, label=label),
        name=cast(str, name),
        regex=cast(str, regex),
        structure=_read_text(record, "structure", "pattern_structure", label=label),
        explanation=_read_text(
            record, "explanation", "english_explanation", label=label
        ),
        example_source=_read_text(
            record, "example_source", "example_japanese", label=label
        ),
        example_target=_read_text(
            record, "example_target", "example_english", label=label
        ),
        group=_read_text(record, "group", "chapter", label=label),
        rank=_read_optional_int(record, "rank", "difficulty_rank", label=label),
        jlpt_level=_read_optional_int(record, "jlpt_level", label=label),
    )


def _unwrap_list(payload: object, *, path: Path) -> list[object]:
    if isinstance(payload, list):
        return cast(list[object], payload)
    if isinstance(payload, dict):
        for key in _LIST_KEYS:
            value = payload.get(key)
            if isinstance(value, list):
                return cast(list[object], value)
    raise ReferenceDataError(
        f"Reference file {path} must contain a list of records "
        f"(optionally under one of {', '.join(_LIST_KEYS)})."
    )


def _read_jsonl(path: Path) -> list[object]:
    records: list[object] = []
    with path.open("r", encoding="utf-8") as handle:
        for line_number, line in enumerate(handle, start=1):
            raw = line.strip()
            if not raw or raw.startswith("#"):
                continue
            try:
                records.append(json.loads(raw))
            except json.JSONDecodeError as err:
                raise ReferenceDataError(
                    f"Invalid JSON in {path} at line {line_number}: {err}"
                ) from err
    return records


def read_records(path: Path) -> list[Mapping[str, object]]:
    """Reads raw reference records from a JSON, JSONL or YAML file."""
    suffix = path.suffix.lower()
    try:
        if suffix == ".jsonl":
            raw_records = _read_jsonl(path)
        elif suffix in (".yaml", ".yml"):
            with path.open("r", encoding="utf-8") as handle:
                raw_records = _unwrap_list(yaml.safe_load(handle), path=path)
        else:
            with path.open("r", encoding="utf-8") as handle:
                raw_records = _unwrap_list(json.load(handle), path=path)
    except json.JSONDecodeError as err:
        raise ReferenceDataError(f"Invalid JSON in reference file {path}: {err}") from err
    except yaml.YAMLError as err:
        raise ReferenceDataError(f"Invalid YAML in reference file {path}: {err}") from err
    return _as_records(raw_records, path=path)


def _as_records(raw_records: list[object], *, path: Path) -> list[Mapping[str, object]]:
    records: list[Mapping[str, object]] = []
    for position, raw in enumerate(raw_records, start=1):
        if not isinstance(raw, dict):
            raise ReferenceDataError(
                f"Reference file {path} record #{position} must be an object."
            )
        records.append(cast(Mapping[str, object], raw))
    return records


def _ensure_unique_ids(ids: Iterable[ItemId], *, source: str) -> None:
    seen: set[ItemId] = set()
    for item_id in ids:
        if item_id in seen:
            raise ReferenceDataError(f"Duplicate id {item_id!r} in {source}.")
        seen.add(item_id)


def _level_matches(level: int | None, jlpt_level: int | None) -> bool:
    return jlpt_level is None or level is None or level == jlpt_level


def vocabulary_from_records(
    records: Sequence[Mapping[str, object]],
    *,
    jlpt_level: int | None = None,
    source: str = "vocabulary records",
) -> list[VocabularyEntry]:
    """Converts raw records to entries, keeping only the requested JLPT level."""
    entries = [
        vocabulary_entry_from_record(record, index=index)
        for index, record in enumerate(records, start=1)
    ]
    _ensure_unique_ids((entry.entry_id for entry in entries), source=source)
    return [entry for entry in entries if _level_matches(entry.jlpt_level, jlpt_level)]


def grammar_from_records(
    records: Sequence[Mapping[str, object]],
    *,
    jlpt_level: int | None = None,
    source: str = "grammar records",
) -> list[GrammarPattern]:
    """Converts raw records to grammar patterns for the requested JLPT level."""
    patterns = [
        grammar_pattern_from_record(record, index=index)
        for index, record in enumerate(records, start=1)
    ]
    _ensure_unique_ids((pattern.pattern_id for pattern in patterns), source=source)
    return [
        pattern for pattern in patterns if _level_matches(pattern.jlpt_level, jlpt_level)
    ]


def load_vocabulary(
    path: Path, *, jlpt_level: int | None = None
) -> list[VocabularyEntry]:
    """Loads reference vocabulary from ``path``."""
    entries = vocabulary_from_records(
        read_records(path), jlpt_level=jlpt_level, source=str(path)
    )
    logger.info("Loaded %s vocabulary entries from %s.", len(entries), path)
    return entries


def load_grammar_patterns(
    path: Path, *, jlpt_level: int | None = None
) -> list[GrammarPattern]:
    """Loads reference grammar patterns from ``path``."""
    patterns = grammar_from_records(
        read_records(path), jlpt_level=jlpt_level, source=str(path)
    )
    logger.info("Loaded %s grammar patterns from %s.", len(patterns), path)
    return patterns


def _default_grammar_file() -> Path:
    return Path(__file__).with_name(_DEFAULT_GRAMMAR_FILE_NAME)


def load_default_grammar_patterns() -> list[GrammarPattern]:
    """Loads the bundled N5 grammar-pattern catalog."""
    path = _default_grammar_file()
    try:
        with path.open("r", encoding="utf-8") as catalog_file:
            payload = yaml.safe_load(catalog_file)
    except FileNotFoundError as err:
        raise ReferenceDataError(f"Grammar catalog not found at {path}.") from err
    except yaml.YAMLError as err:
        raise ReferenceDataError(f"Invalid YAML in grammar catalog {path}: {err}") from err
    if not isinstance(payload, dict):
        raise ReferenceDataError(
            "Grammar catalog must be a mapping with 'schema_version' and 'patterns'."
        )
    if payload.get("schema_version") != _GRAMMAR_CATALOG_SCHEMA_VERSION:
        raise ReferenceDataError(
            f"Unsupported grammar catalog schema version "
            f"{payload.get('schema_version')!r}; "
            f"expected {_GRAMMAR_CATALOG_SCHEMA_VERSION}."
        )
    return grammar_from_records(
        _as_records(_unwrap_list(payload, path=path), path=path),
        source=str(path),
    )
