"""SQLite adapter module - Local database storage implementation."""

from taskdeck.adapters.sqlite.connection import open_connection
from taskdeck.adapters.sqlite.kv_store import SqliteKeyValueStore

__all__ = [
    "SqliteKeyValueStore",
    "open_connection",
]
