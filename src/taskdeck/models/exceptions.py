"""Exceptions raised by the task-state engine."""


class TaskDeckError(Exception):
    """Base exception for taskdeck errors."""


class ValidationError(TaskDeckError, ValueError):
    """Caller supplied invalid input (empty title, malformed reorder, ...)."""


class NotFoundError(TaskDeckError, LookupError):
    """Operation referenced a task id that does not exist."""

    def __init__(self, task_id: int):
        super().__init__(f"Task {task_id} not found")
        self.task_id = task_id


class PersistenceError(TaskDeckError):
    """The durable store could not be read or written."""
