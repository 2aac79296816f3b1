"""Bookmark manager — primary store with a write-through fallback cache."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

from herostats.bookmarks import (
    BookmarkRecord,
    Ok,
    Outcome,
    Unavailable,
    find,
    resolve_listing,
    upsert,
)
from herostats.config import AppConfig
from herostats.errors import StoreError, ValidationError
from herostats.stores import (
    BookmarkStore,
    JsonFileStore,
    LocalStorageCache,
    MemoryCache,
    SqliteStore,
)

logger = logging.getLogger(__name__)


def _outcome(read: Callable[[], list[BookmarkRecord]]) -> Outcome:
    try:
        return Ok(tuple(read()))
    except StoreError as e:
        return Unavailable(str(e))


class BookmarkManager:
    """Saved players across a primary store and a fallback cache.

    The primary store is the source of truth when it answers with a
    non-empty set; the fallback cache mirrors it and takes over when the
    primary fails or is empty. One lock serializes every operation across
    both stores.
    """

    def __init__(self, primary: BookmarkStore, fallback: BookmarkStore,
                 clock: Callable[[], float] = time.time):
        self._primary = primary
        self._fallback = fallback
        self._clock = clock
        self._lock = threading.Lock()

    def _now(self) -> int:
        return int(self._clock())

    def _reconcile(self) -> None:
        """Reconciliation only happens as a side effect of list()."""

    def _mirror(self, records: list[BookmarkRecord]) -> None:
        try:
            self._fallback.replace_all(records)
        except StoreError as e:
            logger.error("Could not mirror %d bookmarks to fallback cache: %s", len(records), e)

    @staticmethod
    def _build(existing: BookmarkRecord | None, player_id: str,
               nickname: str, now: int) -> BookmarkRecord:
        if existing is None:
            return BookmarkRecord(id=player_id, nickname=nickname, save_time=now, last_used=now)
        return BookmarkRecord(
            id=player_id,
            nickname=nickname,
            save_time=existing.save_time,
            last_used=max(existing.last_used, now),
        )

    def save(self, player_id: str, nickname: str) -> bool:
        """Create or update a bookmark.

        Raises ValidationError for a blank id or nickname. Returns False
        only when both the primary store and the fallback cache failed.
        """
        player_id = (player_id or "").strip()
        nickname = (nickname or "").strip()
        if not player_id:
            raise ValidationError("player id must not be empty")
        if not nickname:
            raise ValidationError("nickname must not be empty")

        with self._lock:
            self._reconcile()
            now = self._now()
            try:
                stored = self._primary.get_all()
                records = stored or self._cached_records()
                record = self._build(find(records, player_id), player_id, nickname, now)
                records = upsert(records, record)
                if stored:
                    self._primary.put(record)
                else:
                    # An empty primary takes over what list() was showing from the cache.
                    self._primary.replace_all(records)
            except StoreError as e:
                logger.warning("Primary store save failed for %s, using fallback cache: %s",
                               player_id, e)
                return self._save_fallback(player_id, nickname, now)

            self._mirror(records)
            logger.debug("Saved bookmark %s (%s)", player_id, nickname)
            return True

    def _cached_records(self) -> list[BookmarkRecord]:
        try:
            return self._fallback.get_all()
        except StoreError as e:
            logger.warning("Fallback cache unreadable while seeding primary store: %s", e)
            return []

    def _save_fallback(self, player_id: str, nickname: str, now: int) -> bool:
        try:
            existing = find(self._fallback.get_all(), player_id)
            self._fallback.put(self._build(existing, player_id, nickname, now))
        except StoreError as e:
            logger.error("Fallback cache save failed for %s: %s", player_id, e)
            return False
        return True

    def list(self) -> list[BookmarkRecord]:
        """Return all bookmarks; never raises, worst case an empty list."""
        with self._lock:
            self._reconcile()
            primary = _outcome(self._primary.get_all)
            fallback: Outcome = Unavailable("not consulted")
            if isinstance(primary, Unavailable):
                logger.warning("Primary store unavailable, reading fallback cache: %s",
                               primary.reason)
                fallback = _outcome(self._fallback.get_all)
            elif not primary.records:
                fallback = _outcome(self._fallback.get_all)

            records, mirror = resolve_listing(primary, fallback)
            if mirror:
                self._mirror(records)
            elif isinstance(fallback, Unavailable):
                logger.error("Fallback cache unavailable: %s", fallback.reason)
            return records

    def remove(self, player_id: str) -> bool:
        """Delete a bookmark; False when the id was not present."""
        with self._lock:
            self._reconcile()
            try:
                removed = self._primary.delete(player_id)
                records = self._primary.get_all()
            except StoreError as e:
                logger.warning("Primary store delete failed for %s, using fallback cache: %s",
                               player_id, e)
                return self._remove_fallback(player_id)

            if removed or records:
                self._mirror(records)
                return removed
            # An empty primary is not authoritative; the cache is what list() shows.
            return self._remove_fallback(player_id)

    def _remove_fallback(self, player_id: str) -> bool:
        try:
            return self._fallback.delete(player_id)
        except StoreError as e:
            logger.error("Fallback cache delete failed for %s: %s", player_id, e)
            return False

    def select(self, player_id: str) -> BookmarkRecord | None:
        """Mark a bookmark as used now and return it, or None if unknown."""
        with self._lock:
            self._reconcile()
            now = self._now()
            try:
                records = self._primary.get_all()
                record = find(records, player_id)
                if record is not None:
                    record = self._build(record, record.id, record.nickname, now)
                    self._primary.put(record)
                    self._mirror(upsert(records, record))
                    return record
                if records:
                    return None
            except StoreError as e:
                logger.warning("Primary store select failed for %s, using fallback cache: %s",
                               player_id, e)
            return self._select_fallback(player_id, now)

    def _select_fallback(self, player_id: str, now: int) -> BookmarkRecord | None:
        try:
            record = find(self._fallback.get_all(), player_id)
            if record is None:
                return None
            record = self._build(record, record.id, record.nickname, now)
            self._fallback.put(record)
        except StoreError as e:
            logger.error("Fallback cache select failed for %s: %s", player_id, e)
            return None
        return record

    def get(self, player_id: str) -> BookmarkRecord | None:
        return find(self.list(), player_id)


def build_manager(config: AppConfig) -> BookmarkManager:
    """Wire the configured primary store and fallback cache."""
    storage = config.storage
    if storage.primary == "sqlite":
        primary = SqliteStore(storage.primary_path, timeout=storage.sqlite_timeout)
    else:
        primary = JsonFileStore(storage.primary_path)
    if storage.fallback_path:
        fallback = LocalStorageCache(storage.fallback_path)
    else:
        fallback = MemoryCache()
    return BookmarkManager(primary, fallback)
