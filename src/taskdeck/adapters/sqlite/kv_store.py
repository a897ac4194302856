"""SQLite implementation of KeyValueStore."""

from __future__ import annotations

import sqlite3
from datetime import UTC, datetime
from pathlib import Path

from taskdeck.adapters.sqlite.connection import execute_with_retry, open_connection
from taskdeck.models import PersistenceError
from taskdeck.repositories import KeyValueStore


class SqliteKeyValueStore(KeyValueStore):
    """Key-value store backed by a single SQLite table."""

    def __init__(self, db_path: str | Path | None = None):
        """Initialize SQLite key-value store.

        Args:
            db_path: Optional database file path. If None, uses default location.
        """
        self.db_path = db_path
        self._connection: sqlite3.Connection | None = None

    @property
    def connection(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._connection is None:
            try:
                self._connection = open_connection(self.db_path)
            except (sqlite3.Error, OSError) as e:
                raise PersistenceError(f"Cannot open database: {e}") from e
        return self._connection

    def get(self, key: str) -> str | None:
        try:
            row = execute_with_retry(
                self.connection, "SELECT value FROM kv_store WHERE key = ?", (key,)
            ).fetchone()
        except sqlite3.Error as e:
            raise PersistenceError(f"Cannot read key {key!r}: {e}") from e
        return None if row is None else row["value"]

    def set(self, key: str, value: str) -> None:
        try:
            execute_with_retry(
                self.connection,
                """
                INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, value, datetime.now(UTC).isoformat()),
            )
            self.connection.commit()
        except sqlite3.Error as e:
            raise PersistenceError(f"Cannot write key {key!r}: {e}") from e

    def delete(self, key: str) -> None:
        try:
            execute_with_retry(
                self.connection, "DELETE FROM kv_store WHERE key = ?", (key,)
            )
            self.connection.commit()
        except sqlite3.Error as e:
            raise PersistenceError(f"Cannot delete key {key!r}: {e}") from e

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None
