"""In-memory key-value store.

Nothing survives the process; used by the ``memory`` backend and in tests.
"""

from __future__ import annotations

from taskdeck.repositories import KeyValueStore


class InMemoryKeyValueStore(KeyValueStore):
    """Dictionary-backed key-value store."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)
