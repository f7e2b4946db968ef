from __future__ import annotations

import logging
import os
import sqlite3
from abc import ABC, abstractmethod
from contextlib import contextmanager
from threading import RLock
from typing import Dict, Generator, Optional

from .settings import Settings

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class StoreReadError(Exception):
    """Raised when a backend cannot be opened or read."""


# PUBLIC_INTERFACE
class StoreWriteError(Exception):
    """Raised when a backend cannot durably store a value."""


# PUBLIC_INTERFACE
class KeyValueStore(ABC):
    """Durable string key-value store owned by this process."""

    name: str = "abstract"

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Return the raw value stored under key, or None if absent.

        Raises:
            StoreReadError: if the backend cannot be read.
        """

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Store value under key, overwriting any previous value.

        Raises:
            StoreWriteError: if the value could not be written.
        """


class InMemoryKeyValueStore(KeyValueStore):
    """
    Process-local store; contents are lost on exit. Suitable for tests.
    """

    name = "memory"

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._lock = RLock()
        self._items: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._items[key] = value


class SQLiteKeyValueStore(KeyValueStore):
    """
    Single-table SQLite store; one row per key.
    """

    name = "sqlite"
    _TABLE = "kv"

    def __init__(self, db_path: str) -> None:
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        try:
            self._init_db()
        except sqlite3.Error as e:
            raise StoreReadError(f"could not open {db_path}") from e
        logger.debug("SQLite key-value store ready at %s", db_path)

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(self._db_path)
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {self._TABLE} (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )

    def get(self, key: str) -> Optional[str]:
        try:
            with self._conn() as conn:
                row = conn.execute(f"SELECT value FROM {self._TABLE} WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as e:
            raise StoreReadError(f"could not read key {key!r} from {self._db_path}") from e
        return None if row is None else row[0]

    def set(self, key: str, value: str) -> None:
        try:
            with self._conn() as conn:
                conn.execute(
                    f"""
                    INSERT INTO {self._TABLE} (key, value) VALUES (?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value
                    """,
                    (key, value),
                )
        except sqlite3.Error as e:
            raise StoreWriteError(f"could not write key {key!r} to {self._db_path}") from e


# PUBLIC_INTERFACE
def get_kv_store(settings: Settings) -> KeyValueStore:
    """
    Return the configured backing store.
    - memory: InMemoryKeyValueStore
    - sqlite: SQLiteKeyValueStore at settings.sqlite_db_path

    An unreadable sqlite file is left untouched and the board falls back to
    memory for this session.
    """
    if settings.persistence_backend == "sqlite":
        try:
            return SQLiteKeyValueStore(settings.sqlite_db_path)
        except StoreReadError:
            logger.exception("Cannot open %s; starting empty with in-memory storage", settings.sqlite_db_path)
    return InMemoryKeyValueStore()
