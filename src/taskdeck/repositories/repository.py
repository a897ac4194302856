"""Repository abstraction layer for taskdeck.

This module defines the abstract base classes (interfaces) for persistence,
following the Ports & Adapters pattern. The task store depends only on these
interfaces; concrete adapters live in ``taskdeck.adapters``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from taskdeck.models import Task


class KeyValueStore(ABC):
    """Durable string key-value storage.

    Values are opaque strings; callers own their serialization.
    """

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the value stored under *key*, or None if absent.

        Raises:
            PersistenceError: If the backend cannot be read
        """
        raise NotImplementedError("KeyValueStore.get() must be implemented by adapter")

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store *value* under *key*, replacing any previous value.

        Raises:
            PersistenceError: If the backend cannot be written
        """
        raise NotImplementedError("KeyValueStore.set() must be implemented by adapter")

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove *key*; removing an absent key is not an error.

        Raises:
            PersistenceError: If the backend cannot be written
        """
        raise NotImplementedError(
            "KeyValueStore.delete() must be implemented by adapter"
        )


class TaskRepository(ABC):
    """Abstract base class for loading and saving the task collection."""

    @abstractmethod
    def load(self) -> list[Task]:
        """Load the persisted task collection.

        Never raises: unreadable or corrupt data yields the seed dataset.

        Returns:
            List of Task objects with timestamps reconstructed
        """
        raise NotImplementedError("TaskRepository.load() must be implemented by adapter")

    @abstractmethod
    def save(self, tasks: Sequence[Task]) -> None:
        """Persist the whole task collection.

        Args:
            tasks: Every task in the canonical collection

        Raises:
            PersistenceError: If the write fails
        """
        raise NotImplementedError("TaskRepository.save() must be implemented by adapter")
