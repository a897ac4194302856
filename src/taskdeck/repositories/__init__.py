"""Repository interfaces for taskdeck."""

from .repository import KeyValueStore, TaskRepository

__all__ = ["KeyValueStore", "TaskRepository"]
