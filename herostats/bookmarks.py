"""Bookmark records — data model, field normalization, store outcomes."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Canonical camelCase first, then the original backend's JSON tags,
# then its exported Go field names.
_FIELD_ALIASES = {
    "id": ("id", "ID"),
    "nickname": ("nickname", "Nickname"),
    "save_time": ("saveTime", "save_time", "SaveTime"),
    "last_used": ("lastUsed", "last_used", "LastUsed"),
}


@dataclass
class BookmarkRecord:
    id: str
    nickname: str
    save_time: int = 0
    last_used: int = 0

    def to_dict(self) -> dict:
        """Persisted layout shared by every store."""
        return {
            "id": self.id,
            "nickname": self.nickname,
            "saveTime": self.save_time,
            "lastUsed": self.last_used,
        }


def _pick(raw: dict, field: str):
    for key in _FIELD_ALIASES[field]:
        value = raw.get(key)
        if value is not None and value != "":
            return value
    return None


def _as_int(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def normalize_record(raw: dict) -> BookmarkRecord | None:
    """Build a BookmarkRecord from a loosely-typed mapping.

    Returns None when the mapping has no usable id or nickname.
    """
    if not isinstance(raw, dict):
        return None
    player_id = _pick(raw, "id")
    nickname = _pick(raw, "nickname")
    if player_id is None or nickname is None:
        return None
    player_id = str(player_id).strip()
    nickname = str(nickname).strip()
    if not player_id or not nickname:
        return None
    return BookmarkRecord(
        id=player_id,
        nickname=nickname,
        save_time=_as_int(_pick(raw, "save_time")),
        last_used=_as_int(_pick(raw, "last_used")),
    )


def normalize_records(items: Iterable) -> list[BookmarkRecord]:
    """Normalize a decoded JSON array, skipping unusable entries."""
    records = []
    for item in items:
        record = normalize_record(item)
        if record is None:
            logger.warning("Skipping malformed bookmark entry: %r", item)
            continue
        records.append(record)
    return dedupe_records(records)


def dedupe_records(records: Iterable[BookmarkRecord]) -> list[BookmarkRecord]:
    """Collapse duplicate ids: first position wins, last value wins."""
    by_id: dict[str, BookmarkRecord] = {}
    for record in records:
        by_id[record.id] = record
    return list(by_id.values())


def upsert(records: list[BookmarkRecord], record: BookmarkRecord) -> list[BookmarkRecord]:
    """Return a copy of records with record replacing the same id in place."""
    result = list(records)
    for i, existing in enumerate(result):
        if existing.id == record.id:
            result[i] = record
            return result
    result.append(record)
    return result


def find(records: Iterable[BookmarkRecord], player_id: str) -> BookmarkRecord | None:
    for record in records:
        if record.id == player_id:
            return record
    return None


@dataclass(frozen=True)
class Ok:
    """A store answered with these records."""
    records: tuple[BookmarkRecord, ...] = ()


@dataclass(frozen=True)
class Unavailable:
    """A store call failed."""
    reason: str = ""


Outcome = Ok | Unavailable


def resolve_listing(primary: Outcome, fallback: Outcome) -> tuple[list[BookmarkRecord], bool]:
    """Decide which records List returns and whether to mirror them.

    Returns (records, mirror). mirror is True only when the primary
    answered with a non-empty set, which then overwrites the fallback.
    """
    if isinstance(primary, Ok) and primary.records:
        return list(primary.records), True
    if isinstance(fallback, Ok):
        return list(fallback.records), False
    return [], False
