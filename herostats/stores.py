"""Bookmark backing stores — JSON file, SQLite, local-storage cache.

Every store speaks the same four calls (get_all, put, delete, replace_all)
and raises a StoreError subclass when it cannot answer. Records are kept in
insertion order; put replaces an existing id in place.
"""

from __future__ import annotations

import json
import logging
import os
import sqlite3
import tempfile
import threading
from pathlib import Path
from typing import Protocol

from herostats.bookmarks import BookmarkRecord, normalize_records, upsert
from herostats.errors import FallbackUnavailable, PrimaryUnavailable

logger = logging.getLogger(__name__)

LEGACY_PATHS = (
    Path("saved_players.json"),
    Path("data") / "saved_players.json",
)
LOCAL_STORAGE_KEY = "savedPlayers"


class BookmarkStore(Protocol):
    def get_all(self) -> list[BookmarkRecord]: ...

    def put(self, record: BookmarkRecord) -> None: ...

    def delete(self, player_id: str) -> bool: ...

    def replace_all(self, records: list[BookmarkRecord]) -> None: ...


def _atomic_write(path: Path, text: str) -> None:
    """Write text to path via a temp file so readers never see a partial file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp, path)
    except BaseException:
        try:
            os.unlink(tmp)
        except FileNotFoundError:
            pass
        raise


def _dump_records(records: list[BookmarkRecord]) -> str:
    return json.dumps([r.to_dict() for r in records], indent=2, ensure_ascii=False)


class JsonFileStore:
    """Primary store: a JSON array of records on disk.

    Reads the first existing file among the configured path and the legacy
    locations; always writes to the configured path.
    """

    def __init__(self, path: Path | str, legacy_paths: tuple[Path, ...] = LEGACY_PATHS):
        self.path = Path(path).expanduser()
        self.legacy_paths = tuple(Path(p) for p in legacy_paths)
        self._lock = threading.Lock()

    def _candidates(self) -> list[Path]:
        seen = []
        for p in (self.path, *self.legacy_paths):
            if p not in seen:
                seen.append(p)
        return seen

    def _read(self) -> list[BookmarkRecord]:
        for candidate in self._candidates():
            try:
                with open(candidate, encoding="utf-8") as f:
                    data = json.load(f)
            except FileNotFoundError:
                continue
            except (OSError, ValueError) as e:
                raise PrimaryUnavailable(f"cannot read {candidate}: {e}") from e
            if data is None:
                return []
            if not isinstance(data, list):
                raise PrimaryUnavailable(f"{candidate} does not hold a JSON array")
            logger.debug("Loaded %d bookmarks from %s", len(data), candidate)
            return normalize_records(data)
        return []

    def _write(self, records: list[BookmarkRecord]) -> None:
        try:
            _atomic_write(self.path, _dump_records(records))
        except OSError as e:
            raise PrimaryUnavailable(f"cannot write {self.path}: {e}") from e

    def get_all(self) -> list[BookmarkRecord]:
        with self._lock:
            return self._read()

    def put(self, record: BookmarkRecord) -> None:
        with self._lock:
            self._write(upsert(self._read(), record))

    def delete(self, player_id: str) -> bool:
        with self._lock:
            records = self._read()
            remaining = [r for r in records if r.id != player_id]
            if len(remaining) == len(records):
                return False
            self._write(remaining)
            return True

    def replace_all(self, records: list[BookmarkRecord]) -> None:
        with self._lock:
            self._write(list(records))


class SqliteStore:
    """Primary store backed by an embedded SQLite database."""

    def __init__(self, path: Path | str, timeout: float = 5.0):
        self.path = Path(path).expanduser()
        self.timeout = timeout
        self._initialized = False

    def _connect(self) -> sqlite3.Connection:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.path, timeout=self.timeout)
        except (OSError, sqlite3.Error) as e:
            raise PrimaryUnavailable(f"cannot open {self.path}: {e}") from e
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA journal_mode=WAL;")
            conn.execute("PRAGMA synchronous=NORMAL;")
            if not self._initialized:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS bookmarks (
                        seq INTEGER PRIMARY KEY AUTOINCREMENT,
                        id TEXT NOT NULL UNIQUE,
                        nickname TEXT NOT NULL,
                        save_time INTEGER NOT NULL,
                        last_used INTEGER NOT NULL
                    )
                    """
                )
                conn.commit()
                self._initialized = True
        except sqlite3.Error as e:
            conn.close()
            raise PrimaryUnavailable(f"cannot initialise {self.path}: {e}") from e
        return conn

    def _run(self, fn):
        conn = self._connect()
        try:
            result = fn(conn)
            conn.commit()
            return result
        except sqlite3.Error as e:
            conn.rollback()
            raise PrimaryUnavailable(f"sqlite error on {self.path}: {e}") from e
        finally:
            conn.close()

    def get_all(self) -> list[BookmarkRecord]:
        rows = self._run(lambda conn: conn.execute(
            "SELECT id, nickname, save_time, last_used FROM bookmarks ORDER BY seq"
        ).fetchall())
        return normalize_records(dict(row) for row in rows)

    def put(self, record: BookmarkRecord) -> None:
        self._run(lambda conn: conn.execute(
            """
            INSERT INTO bookmarks (id, nickname, save_time, last_used)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                nickname = excluded.nickname,
                save_time = excluded.save_time,
                last_used = excluded.last_used
            """,
            (record.id, record.nickname, record.save_time, record.last_used),
        ))

    def delete(self, player_id: str) -> bool:
        removed = self._run(lambda conn: conn.execute(
            "DELETE FROM bookmarks WHERE id = ?", (player_id,)
        ).rowcount)
        return removed > 0

    def replace_all(self, records: list[BookmarkRecord]) -> None:
        def _replace(conn):
            conn.execute("DELETE FROM bookmarks")
            conn.executemany(
                "INSERT INTO bookmarks (id, nickname, save_time, last_used) VALUES (?, ?, ?, ?)",
                [(r.id, r.nickname, r.save_time, r.last_used) for r in records],
            )
        self._run(_replace)


class LocalStorageCache:
    """Fallback cache modelled on browser localStorage.

    The file holds a JSON object of string values; the bookmark set lives
    under one key as a JSON-encoded array.
    """

    def __init__(self, path: Path | str, key: str = LOCAL_STORAGE_KEY):
        self.path = Path(path).expanduser()
        self.key = key
        self._lock = threading.Lock()

    def _load_storage(self) -> dict:
        try:
            with open(self.path, encoding="utf-8") as f:
                storage = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            raise FallbackUnavailable(f"cannot read {self.path}: {e}") from e
        if not isinstance(storage, dict):
            raise FallbackUnavailable(f"{self.path} does not hold a JSON object")
        return storage

    def get_item(self, key: str) -> str | None:
        with self._lock:
            return self._load_storage().get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            storage = self._load_storage()
            storage[key] = value
            try:
                _atomic_write(self.path, json.dumps(storage, indent=2, ensure_ascii=False))
            except OSError as e:
                raise FallbackUnavailable(f"cannot write {self.path}: {e}") from e

    def get_all(self) -> list[BookmarkRecord]:
        raw = self.get_item(self.key)
        if not raw:
            return []
        if not isinstance(raw, str):
            raise FallbackUnavailable(f"{self.key!r} entry in {self.path} is not a string")
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise FallbackUnavailable(f"corrupt {self.key!r} entry in {self.path}") from e
        if not isinstance(data, list):
            raise FallbackUnavailable(f"{self.key!r} entry in {self.path} is not an array")
        return normalize_records(data)

    def replace_all(self, records: list[BookmarkRecord]) -> None:
        self.set_item(self.key, json.dumps([r.to_dict() for r in records], ensure_ascii=False))

    def put(self, record: BookmarkRecord) -> None:
        self.replace_all(upsert(self.get_all(), record))

    def delete(self, player_id: str) -> bool:
        records = self.get_all()
        remaining = [r for r in records if r.id != player_id]
        if len(remaining) == len(records):
            return False
        self.replace_all(remaining)
        return True


class MemoryCache:
    """Process-local fallback cache."""

    def __init__(self, records: list[BookmarkRecord] | None = None):
        self._records: list[BookmarkRecord] = list(records or [])
        self._lock = threading.Lock()

    def get_all(self) -> list[BookmarkRecord]:
        with self._lock:
            return [BookmarkRecord(**vars(r)) for r in self._records]

    def put(self, record: BookmarkRecord) -> None:
        with self._lock:
            self._records = upsert(self._records, BookmarkRecord(**vars(record)))

    def delete(self, player_id: str) -> bool:
        with self._lock:
            before = len(self._records)
            self._records = [r for r in self._records if r.id != player_id]
            return len(self._records) < before

    def replace_all(self, records: list[BookmarkRecord]) -> None:
        with self._lock:
            self._records = [BookmarkRecord(**vars(r)) for r in records]
