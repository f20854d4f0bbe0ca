"""Durable key-value storage backends for persisted preferences."""

from __future__ import annotations

import os
import re
import sqlite3
import tempfile
from abc import ABC, abstractmethod
from datetime import UTC, datetime
from pathlib import Path

from lawmasters.exceptions import StorageError, StorageReadError, StorageWriteError

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]")

# Opening a database file can also fail on the filesystem (missing or
# read-only parent directory), which surfaces as OSError.
_SQLITE_ERRORS = (sqlite3.Error, OSError)


class KeyValueStorage(ABC):
    """String-to-string storage, the shape of a browser's localStorage."""

    @abstractmethod
    def get_item(self, key: str) -> str | None:
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        pass


class MemoryStorage(KeyValueStorage):
    """Process-local storage; contents are lost when the process exits."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._items)


class JSONFileStorage(KeyValueStorage):
    """Stores each key as its own file inside a directory.

    Writes go to a temporary file that is renamed over the target so a
    crash mid-write never leaves a truncated payload behind.
    """

    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, key: str) -> Path:
        return self._directory / f"{_UNSAFE_KEY_CHARS.sub('_', key)}.json"

    def get_item(self, key: str) -> str | None:
        try:
            return self.path_for(key).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StorageReadError(key, str(e)) from e

    def set_item(self, key: str, value: str) -> None:
        path = self.path_for(key)
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._directory, prefix=".tmp-", suffix=".json"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(value)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageWriteError(key, str(e)) from e

    def remove_item(self, key: str) -> None:
        try:
            self.path_for(key).unlink(missing_ok=True)
        except OSError as e:
            raise StorageWriteError(key, str(e)) from e


class SQLiteStorage(KeyValueStorage):
    """SQLite-backed storage with a single key/value table."""

    def __init__(
        self, path: str | Path = ":memory:", check_same_thread: bool = True
    ) -> None:
        self._path = str(path)
        self._check_same_thread = check_same_thread
        self._connection: sqlite3.Connection | None = None

    def get_connection(self) -> sqlite3.Connection:
        """Get or create the database connection."""
        if self._connection is None:
            if self._path != ":memory:":
                Path(self._path).parent.mkdir(parents=True, exist_ok=True)
            self._connection = sqlite3.connect(
                self._path, check_same_thread=self._check_same_thread
            )
            self._connection.row_factory = sqlite3.Row
        return self._connection

    def initialize(self) -> None:
        """Create the key/value table.

        Raises:
            StorageError: If the database cannot be opened or written.
        """
        try:
            conn = self.get_connection()
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );
                """
            )
            conn.commit()
        except _SQLITE_ERRORS as e:
            raise StorageError(
                f"Could not initialize sqlite storage at {self._path}: {e}",
                context={"path": self._path, "reason": str(e)},
            ) from e

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    def get_item(self, key: str) -> str | None:
        try:
            row = (
                self.get_connection()
                .execute("SELECT value FROM kv_store WHERE key = ?", (key,))
                .fetchone()
            )
        except _SQLITE_ERRORS as e:
            raise StorageReadError(key, str(e)) from e
        return row["value"] if row else None

    def set_item(self, key: str, value: str) -> None:
        try:
            conn = self.get_connection()
            conn.execute(
                """
                INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, value, datetime.now(UTC).isoformat()),
            )
            conn.commit()
        except _SQLITE_ERRORS as e:
            raise StorageWriteError(key, str(e)) from e

    def remove_item(self, key: str) -> None:
        try:
            conn = self.get_connection()
            conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            conn.commit()
        except _SQLITE_ERRORS as e:
            raise StorageWriteError(key, str(e)) from e
