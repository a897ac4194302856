"""taskdeck domain models.

This package contains the Pydantic models that represent tasks, filters and
configuration, plus the exception hierarchy shared by every layer.
"""

from .config_models import AppConfig, OutputConfig, StorageConfig, Theme, UIConfig
from .exceptions import NotFoundError, PersistenceError, TaskDeckError, ValidationError
from .task import (
    PRIORITIES,
    Subtask,
    Task,
    TaskChanges,
    TaskFilter,
    TaskPriority,
    TaskStats,
    TaskStatus,
)

__all__ = [
    # Task models
    "Task",
    "Subtask",
    "TaskChanges",
    "TaskFilter",
    "TaskStats",
    "TaskPriority",
    "TaskStatus",
    "PRIORITIES",
    # Config models
    "AppConfig",
    "StorageConfig",
    "UIConfig",
    "OutputConfig",
    "Theme",
    # Errors
    "TaskDeckError",
    "ValidationError",
    "NotFoundError",
    "PersistenceError",
]
