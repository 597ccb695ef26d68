"""
Key-value persistence for GameVerse.

Contract:
- Synchronous get/set/remove of string blobs under string keys.
- Any backend failure surfaces as StorageError (never sqlite3.Error, OSError...).
- SQLite is the durable backend; InMemoryStorage is for tests and
  storage-less hosts.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional
import logging
import sqlite3

logger = logging.getLogger(__name__)

DB_PATH = Path("data") / "gameverse.db"


class StorageError(Exception):
    """Persistence backend failed (quota, I/O, corrupt database...)."""


class KeyValueStorage(ABC):
    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored string, or None when the key is absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete key; absent keys are ignored."""


class InMemoryStorage(KeyValueStorage):
    """
    Dict-backed storage.

    max_bytes emulates a browser storage quota: a write that would push the
    total size over the limit raises StorageError and leaves data untouched.
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None, max_bytes: Optional[int] = None):
        self._data: Dict[str, str] = dict(initial or {})
        self.max_bytes = max_bytes

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.max_bytes is not None:
            projected = sum(len(k) + len(v) for k, v in self._data.items() if k != key)
            projected += len(key) + len(value)
            if projected > self.max_bytes:
                raise StorageError(f"quota exceeded writing {key} ({projected} > {self.max_bytes} bytes)")
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self):
        return list(self._data)


class SqliteStorage(KeyValueStorage):
    def __init__(self, db_path: Path = DB_PATH):
        self.db_path = Path(db_path)
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._init_db()
        except (OSError, sqlite3.Error) as e:
            raise StorageError(f"cannot open {self.db_path}: {e}") from e

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA synchronous=NORMAL")
        return conn

    def _init_db(self) -> None:
        conn = self._connect()
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS kv (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated TEXT NOT NULL
            )
            """
        )
        conn.commit()
        conn.close()

    def get(self, key: str) -> Optional[str]:
        try:
            conn = self._connect()
            try:
                row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StorageError(f"read {key} failed: {e}") from e
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        ts = datetime.now().isoformat(timespec="seconds")
        try:
            conn = self._connect()
            try:
                conn.execute(
                    "INSERT INTO kv(key, value, updated) VALUES(?, ?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated = excluded.updated",
                    (key, value, ts),
                )
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StorageError(f"write {key} failed: {e}") from e

    def remove(self, key: str) -> None:
        try:
            conn = self._connect()
            try:
                conn.execute("DELETE FROM kv WHERE key = ?", (key,))
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StorageError(f"delete {key} failed: {e}") from e


def create_storage(config) -> KeyValueStorage:
    """Build the backend named by storage.backend ("sqlite" | "memory")."""
    backend = config.get("storage.backend", "sqlite")
    if backend == "memory":
        return InMemoryStorage()
    if backend == "sqlite":
        return SqliteStorage(Path(config.get("storage.db_path", str(DB_PATH))))
    raise ValueError(f"unknown storage backend: {backend}")
