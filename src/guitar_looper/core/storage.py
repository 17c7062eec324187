"""
Persistent key/value storage for Guitar Looper.

Values are opaque strings (callers serialize to JSON). The SQLite store keeps
one row per key; every write replaces the whole value.
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Protocol

from .config import get_data_dir
from .errors import StorageError


class KeyValueStore(Protocol):
    """Minimal persistent key/value contract."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


def get_database_path() -> Path:
    """Get the path to the SQLite database file."""
    return get_data_dir() / "guitar-looper.db"


class SqliteKeyValueStore:
    """Key/value store backed by a single SQLite table."""

    def __init__(self, db_path: Optional[Path] = None) -> None:
        self.db_path = Path(db_path) if db_path else get_database_path()
        self._initialized = False

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        """Open a connection, creating the schema on first use."""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.db_path, timeout=10.0)
        except (sqlite3.Error, OSError) as e:
            raise StorageError(f"Cannot open {self.db_path}: {e}") from e

        try:
            if not self._initialized:
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS kv_store (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL,
                        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    )
                """)
                conn.commit()
                self._initialized = True
            yield conn
        except sqlite3.Error as e:
            raise StorageError(f"Storage operation failed: {e}") from e
        finally:
            conn.close()

    def get(self, key: str) -> Optional[str]:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT value FROM kv_store WHERE key = ?", (key,)
            ).fetchone()
            return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        with self._connection() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO kv_store (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                """,
                (key, value),
            )
            conn.commit()

    def remove(self, key: str) -> None:
        with self._connection() as conn:
            conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            conn.commit()


class MemoryKeyValueStore:
    """In-process store, used when nothing should touch disk."""

    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)
