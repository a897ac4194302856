"""Database connection management for the SQLite key-value backend.

Provides connection setup (WAL mode, owner-only file permissions, schema
creation) and a retry helper for "database is locked" errors.
"""

from __future__ import annotations

import os
import sqlite3
import time
from pathlib import Path

from platformdirs import user_data_dir

DEFAULT_DB_NAME = "taskdeck.db"

SCHEMA = """
CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""


def default_db_path() -> Path:
    return Path(user_data_dir("taskdeck")) / DEFAULT_DB_NAME


def open_connection(db_path: str | Path | None = None) -> sqlite3.Connection:
    """Open and configure a connection to the taskdeck database.

    Args:
        db_path: Path to database file. If None, uses default location.

    Returns:
        sqlite3.Connection with the schema in place
    """
    db_path = default_db_path() if db_path is None else Path(db_path)

    # Create data directory if it doesn't exist
    db_path.parent.mkdir(parents=True, exist_ok=True)

    # Check if database file exists (for first-time init detection)
    is_new_database = not db_path.exists()

    connection = sqlite3.connect(str(db_path), timeout=30.0)
    connection.row_factory = sqlite3.Row
    connection.execute("PRAGMA journal_mode = WAL")

    # Set file permissions (owner read/write only)
    if is_new_database:
        os.chmod(db_path, 0o600)

    connection.execute(SCHEMA)
    connection.commit()
    return connection


def execute_with_retry(
    connection: sqlite3.Connection,
    sql: str,
    params: tuple | dict | None = None,
    max_retries: int = 3,
) -> sqlite3.Cursor:
    """Execute SQL with retry logic for database locked errors.

    Args:
        connection: Database connection
        sql: SQL statement to execute
        params: Parameters for SQL statement
        max_retries: Maximum number of retry attempts

    Returns:
        Cursor after successful execution

    Raises:
        sqlite3.OperationalError: If database remains locked after retries
    """
    for attempt in range(max_retries):
        try:
            if params:
                return connection.execute(sql, params)
            return connection.execute(sql)
        except sqlite3.OperationalError as e:
            if "database is locked" in str(e) and attempt < max_retries - 1:
                # Exponential backoff: 0.1s, 0.2s, 0.4s
                time.sleep(0.1 * (2**attempt))
                continue
            raise

    raise sqlite3.OperationalError("Max retries exceeded")
