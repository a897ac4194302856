"""Adapters module - Storage implementations for the repository interfaces.

This package contains concrete implementations (adapters):
- memory: In-process dictionary storage
- json_file: One JSON file per key under the data directory
- sqlite: Local SQLite database storage
- task_storage: Task collection (de)serialization over any key-value store
"""

from .json_file import JsonFileKeyValueStore
from .memory import InMemoryKeyValueStore
from .sqlite import SqliteKeyValueStore
from .task_storage import TASKS_STORAGE_KEY, TaskStorageAdapter, default_tasks

__all__ = [
    # Key-value stores
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "SqliteKeyValueStore",
    # Task persistence
    "TaskStorageAdapter",
    "TASKS_STORAGE_KEY",
    "default_tasks",
]
