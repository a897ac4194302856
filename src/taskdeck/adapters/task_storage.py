"""Persistence adapter for the task collection.

Serializes the collection as a JSON array under a single key of a
``KeyValueStore`` and rebuilds typed ``Task`` objects on load. Record layout
uses camelCase keys (``dueDate``, ``createdAt``, ``updatedAt``) and
ISO-8601 timestamps.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Sequence
from datetime import datetime, timedelta
from typing import Any

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from taskdeck.models import PersistenceError, Subtask, Task
from taskdeck.repositories import KeyValueStore, TaskRepository
from taskdeck.utils.datetime_utils import now_local

logger = logging.getLogger(__name__)

TASKS_STORAGE_KEY = "task_manager_tasks"

_TASK_LIST = TypeAdapter(list[Task])


class CorruptPayloadError(ValueError):
    """Stored payload is not a valid task collection."""


def default_tasks(now: datetime | None = None) -> list[Task]:
    """Return the seed dataset shown on first run or after corruption."""
    if now is None:
        now = now_local()
    return [
        Task(
            id=1,
            title="Learn Angular Signals",
            description="Master the new reactive primitives in Angular",
            completed=False,
            priority="high",
            tags=["learning", "angular"],
            subtasks=[
                Subtask(id=1, title="Read documentation", completed=True),
                Subtask(id=2, title="Build example app", completed=False),
            ],
            order=0,
            due_date=now + timedelta(days=7),
            created_at=now,
            updated_at=now,
        ),
        Task(
            id=2,
            title="Build Task Manager",
            description="Create a production-ready task management app",
            completed=True,
            priority="medium",
            tags=["project", "angular"],
            subtasks=[],
            order=1,
            created_at=now,
            updated_at=now,
        ),
    ]


def _normalize_record(raw: Any) -> dict[str, Any]:
    """Fill defaults for fields older payloads may omit or null out."""
    if not isinstance(raw, dict):
        raise CorruptPayloadError(f"task record must be an object, got {type(raw).__name__}")
    record = dict(raw)
    if record.get("tags") is None:
        record["tags"] = []
    if record.get("subtasks") is None:
        record["subtasks"] = []
    if record.get("order") is None:
        record["order"] = 0
    if record.get("description") is None:
        record["description"] = ""
    if record.get("dueDate") in ("", None):
        record.pop("dueDate", None)
    return record


def _densify_order(tasks: list[Task]) -> list[Task]:
    """Reassign 0..N-1 order if stored order values collide.

    Relative sequence is kept: ties are broken by position in the payload.
    """
    orders = [task.order for task in tasks]
    if len(orders) == len(set(orders)):
        return tasks
    logger.info("duplicate order values in stored tasks; renumbering")
    ranked = sorted(enumerate(tasks), key=lambda pair: (pair[1].order, pair[0]))
    for index, (_, task) in enumerate(ranked):
        task.order = index
    return tasks


def decode_tasks(payload: str) -> list[Task]:
    """Decode a stored payload into tasks.

    Raises:
        CorruptPayloadError: If the payload is not a valid task collection
    """
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise CorruptPayloadError(f"invalid JSON: {e}") from e
    if not isinstance(data, list):
        raise CorruptPayloadError("payload must be a JSON array")

    try:
        tasks = _TASK_LIST.validate_python([_normalize_record(r) for r in data])
    except PydanticValidationError as e:
        raise CorruptPayloadError(str(e)) from e

    ids = [task.id for task in tasks]
    if len(ids) != len(set(ids)):
        raise CorruptPayloadError("duplicate task ids")
    return _densify_order(tasks)


def encode_tasks(tasks: Sequence[Task]) -> str:
    return _TASK_LIST.dump_json(list(tasks), by_alias=True).decode("utf-8")


class TaskStorageAdapter(TaskRepository):
    """Loads and saves the task collection through a key-value store."""

    def __init__(
        self,
        store: KeyValueStore,
        *,
        key: str = TASKS_STORAGE_KEY,
        seed: Callable[[], list[Task]] = default_tasks,
    ):
        """Initialize the adapter.

        Args:
            store: Backend holding the serialized collection
            key: Storage key for the task array
            seed: Factory for the fallback dataset
        """
        self.store = store
        self.key = key
        self._seed = seed

    def load(self) -> list[Task]:
        try:
            payload = self.store.get(self.key)
        except PersistenceError:
            logger.warning("cannot read stored tasks; using seed data", exc_info=True)
            return self._seed()

        if not payload:
            logger.debug("no stored tasks under %r; using seed data", self.key)
            return self._seed()

        try:
            tasks = decode_tasks(payload)
        except CorruptPayloadError as e:
            logger.warning("stored tasks are corrupt (%s); using seed data", e)
            return self._seed()

        logger.debug("loaded %d tasks", len(tasks))
        return tasks

    def save(self, tasks: Sequence[Task]) -> None:
        payload = encode_tasks(tasks)
        try:
            self.store.set(self.key, payload)
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"Cannot save tasks: {e}") from e
        logger.debug("saved %d tasks", len(tasks))
