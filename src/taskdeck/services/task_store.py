"""Task store - the reactive task-state engine.

The store owns the canonical task collection and the active filter. Every
mutating operation follows the same two steps:

1. validate, then swap in fully built replacement ``Task`` objects, so the
   collection is never observed half-mutated;
2. persist the whole collection through the injected ``TaskRepository``.

Derived views (filtered list, counts, tags, analytics) are recomputed from
the canonical collection on every read, so they can never be stale. Callers
only ever receive deep copies of tasks.

Not-found policy: any operation naming a task id that does not exist raises
``NotFoundError`` and changes nothing. ``get_by_id`` returns ``None``
instead. Unknown *subtask* ids are silent no-ops.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import datetime
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from taskdeck.models import (
    NotFoundError,
    PersistenceError,
    Subtask,
    Task,
    TaskChanges,
    TaskFilter,
    TaskPriority,
    TaskStats,
    ValidationError,
)
from taskdeck.repositories import TaskRepository
from taskdeck.services import task_views
from taskdeck.utils.datetime_utils import now_local
from taskdeck.utils.id_generator import MonotonicIdGenerator

logger = logging.getLogger(__name__)


def _validation_message(error: PydanticValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item.get("loc", ()))
        message = item.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or str(error)


class TaskStore:
    """Canonical task collection with mutations and derived views."""

    def __init__(
        self,
        repository: TaskRepository,
        *,
        id_generator: MonotonicIdGenerator | None = None,
        clock: Callable[[], datetime] = now_local,
    ):
        """Initialize the store and load the persisted collection.

        Args:
            repository: Persistence adapter used for load and save
            id_generator: Source of fresh task and subtask ids
            clock: Returns the current time as an aware datetime
        """
        self.repository = repository
        self._clock = clock
        self._ids = id_generator or MonotonicIdGenerator()
        self._tasks: list[Task] = list(repository.load())
        self._filter = TaskFilter()
        self.last_persistence_error: PersistenceError | None = None

        self._ids.observe(task.id for task in self._tasks)
        self._ids.observe(s.id for task in self._tasks for s in task.subtasks)
        logger.debug("task store ready with %d tasks", len(self._tasks))

    # ---- internal helpers ----

    def _index_of(self, task_id: int) -> int:
        for index, task in enumerate(self._tasks):
            if task.id == task_id:
                return index
        raise NotFoundError(task_id)

    def _derive(self, task: Task, now: datetime | None = None, **changes: Any) -> Task:
        """Build a validated replacement for *task* with *changes* applied."""
        data = task.model_dump()
        data.update(changes)
        data["id"] = task.id
        data["created_at"] = task.created_at
        data["updated_at"] = now or self._clock()
        try:
            return Task.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(_validation_message(e)) from e

    def _commit(self, index: int, replacement: Task) -> Task:
        self._tasks[index] = replacement
        self._persist()
        return replacement.model_copy(deep=True)

    def _persist(self) -> bool:
        """Save the canonical collection; failures never undo the mutation."""
        try:
            self.repository.save(self._tasks)
        except PersistenceError as e:
            logger.warning("failed to persist %d tasks: %s", len(self._tasks), e)
            self.last_persistence_error = e
            return False
        self.last_persistence_error = None
        return True

    @staticmethod
    def _snapshot(tasks: Iterable[Task]) -> list[Task]:
        return [task.model_copy(deep=True) for task in tasks]

    # ---- queries ----

    def get_by_id(self, task_id: int) -> Task | None:
        """Return a copy of the task, or None. Ignores the active filter."""
        for task in self._tasks:
            if task.id == task_id:
                return task.model_copy(deep=True)
        return None

    # ---- task mutations ----

    def add(
        self,
        title: str,
        priority: TaskPriority = "medium",
        *,
        description: str | None = None,
        tags: Sequence[str] | None = None,
        due_date: datetime | None = None,
        subtasks: Sequence[Subtask | str] | None = None,
    ) -> Task:
        """Create a task at the end of the display order.

        Args:
            title: Display title; must not be blank
            priority: "high", "medium" or "low"
            description: Optional detailed description
            tags: Initial tags; stripped, duplicates dropped, blanks rejected
            due_date: Optional due timestamp
            subtasks: Initial subtasks, as Subtask objects or plain titles

        Returns:
            Copy of the created Task

        Raises:
            ValidationError: If the title is blank or a field is invalid
        """
        if not title or not title.strip():
            raise ValidationError("Task title cannot be empty")

        items = list(subtasks or [])
        self._ids.observe(item.id for item in items if isinstance(item, Subtask))

        now = self._clock()
        max_order = max((task.order for task in self._tasks), default=-1)
        try:
            built_subtasks = [
                item.model_copy()
                if isinstance(item, Subtask)
                else Subtask(id=self._ids.next_id(), title=item)
                for item in items
            ]
            task = Task(
                id=self._ids.next_id(),
                title=title,
                description=description or "",
                completed=False,
                priority=priority,
                tags=list(tags or []),
                due_date=due_date,
                subtasks=built_subtasks,
                order=max_order + 1,
                created_at=now,
                updated_at=now,
            )
        except PydanticValidationError as e:
            raise ValidationError(_validation_message(e)) from e

        self._tasks.append(task)
        logger.debug("added task id=%s order=%s", task.id, task.order)
        self._persist()
        return task.model_copy(deep=True)

    def update(self, task_id: int, changes: TaskChanges | Mapping[str, Any]) -> Task:
        """Apply only the supplied fields to a task.

        Raises:
            NotFoundError: If no task has *task_id*
            ValidationError: If *changes* is invalid or names id, created_at
                or order
        """
        if not isinstance(changes, TaskChanges):
            try:
                changes = TaskChanges.model_validate(dict(changes))
            except PydanticValidationError as e:
                raise ValidationError(_validation_message(e)) from e

        index = self._index_of(task_id)
        if changes.subtasks is not None:
            self._ids.observe(subtask.id for subtask in changes.subtasks)
        replacement = self._derive(self._tasks[index], **changes.applied_fields())
        logger.debug("updated task id=%s fields=%s", task_id, sorted(changes.applied_fields()))
        return self._commit(index, replacement)

    def toggle_completed(self, task_id: int) -> Task:
        index = self._index_of(task_id)
        current = self._tasks[index]
        replacement = self._derive(current, completed=not current.completed)
        logger.debug("toggled task id=%s completed=%s", task_id, replacement.completed)
        return self._commit(index, replacement)

    def delete(self, task_id: int) -> Task:
        """Remove a task permanently. Remaining order values keep their gaps.

        Returns:
            The removed task
        """
        index = self._index_of(task_id)
        removed = self._tasks.pop(index)
        logger.debug("deleted task id=%s", task_id)
        self._persist()
        return removed

    def reorder(self, sequence: Sequence[int | Task]) -> list[Task]:
        """Assign ``order = position`` following *sequence*.

        Args:
            sequence: Every current task (or task id) exactly once, in the
                new display order

        Returns:
            Copies of all tasks in their new order

        Raises:
            ValidationError: If *sequence* is not a permutation of the current ids
        """
        ids = [item.id if isinstance(item, Task) else item for item in sequence]
        current_ids = {task.id for task in self._tasks}
        if len(ids) != len(self._tasks):
            raise ValidationError(
                f"Reorder needs all {len(self._tasks)} tasks, got {len(ids)}"
            )
        if len(set(ids)) != len(ids):
            raise ValidationError("Reorder sequence contains duplicate ids")
        unknown = set(ids) - current_ids
        if unknown:
            raise ValidationError(f"Reorder sequence has unknown ids: {sorted(unknown)}")

        now = self._clock()
        by_id = {task.id: task for task in self._tasks}
        reordered = [
            self._derive(by_id[task_id], now=now, order=position)
            for position, task_id in enumerate(ids)
        ]
        self._tasks = reordered
        logger.debug("reordered %d tasks", len(reordered))
        self._persist()
        return self._snapshot(reordered)

    # ---- subtasks ----

    def add_subtask(self, task_id: int, title: str) -> Subtask:
        """Append a subtask to a task.

        Raises:
            NotFoundError: If no task has *task_id*
            ValidationError: If the title is blank
        """
        if not title or not title.strip():
            raise ValidationError("Subtask title cannot be empty")
        index = self._index_of(task_id)
        current = self._tasks[index]
        subtask = Subtask(id=self._ids.next_id(), title=title.strip())
        self._commit(
            index, self._derive(current, subtasks=[*current.subtasks, subtask])
        )
        return subtask.model_copy()

    def toggle_subtask(self, task_id: int, subtask_id: int) -> Task:
        """Flip a subtask's completion. Unknown subtask ids change nothing."""
        index = self._index_of(task_id)
        current = self._tasks[index]
        if current.get_subtask(subtask_id) is None:
            return current.model_copy(deep=True)
        subtasks = [
            s.model_copy(update={"completed": not s.completed}) if s.id == subtask_id else s
            for s in current.subtasks
        ]
        return self._commit(index, self._derive(current, subtasks=subtasks))

    def delete_subtask(self, task_id: int, subtask_id: int) -> Task:
        """Remove a subtask. Unknown subtask ids change nothing."""
        index = self._index_of(task_id)
        current = self._tasks[index]
        if current.get_subtask(subtask_id) is None:
            return current.model_copy(deep=True)
        subtasks = [s for s in current.subtasks if s.id != subtask_id]
        return self._commit(index, self._derive(current, subtasks=subtasks))

    # ---- tags ----

    @staticmethod
    def _clean_tag(tag: str) -> str:
        if not tag or not tag.strip():
            raise ValidationError("Tag cannot be empty")
        return tag.strip()

    def add_tag(self, task_id: int, tag: str) -> Task:
        """Add a tag; adding one the task already has is a no-op."""
        tag = self._clean_tag(tag)
        index = self._index_of(task_id)
        current = self._tasks[index]
        if tag in current.tags:
            return current.model_copy(deep=True)
        return self._commit(index, self._derive(current, tags=[*current.tags, tag]))

    def remove_tag(self, task_id: int, tag: str) -> Task:
        """Remove a tag; removing one the task lacks is a no-op."""
        tag = self._clean_tag(tag)
        index = self._index_of(task_id)
        current = self._tasks[index]
        if tag not in current.tags:
            return current.model_copy(deep=True)
        tags = [t for t in current.tags if t != tag]
        return self._commit(index, self._derive(current, tags=tags))

    # ---- filter ----

    @property
    def filter(self) -> TaskFilter:
        return self._filter.model_copy(deep=True)

    def set_filter(self, task_filter: TaskFilter | Mapping[str, Any] | None) -> TaskFilter:
        """Replace the active filter."""
        if task_filter is None:
            task_filter = TaskFilter()
        elif not isinstance(task_filter, TaskFilter):
            try:
                task_filter = TaskFilter.model_validate(dict(task_filter))
            except PydanticValidationError as e:
                raise ValidationError(_validation_message(e)) from e
        self._filter = task_filter.model_copy(deep=True)
        return self.filter

    def update_filter(self, **partial: Any) -> TaskFilter:
        """Merge *partial* (snake_case or camelCase keys) into the active filter."""
        try:
            supplied = TaskFilter.model_validate(partial).model_dump(exclude_unset=True)
        except PydanticValidationError as e:
            raise ValidationError(_validation_message(e)) from e
        merged = self._filter.model_dump()
        merged.update(supplied)
        return self.set_filter(merged)

    def clear_filter(self) -> TaskFilter:
        return self.set_filter(None)

    # ---- derived views ----

    def _filtered(self, now: datetime) -> list[Task]:
        return task_views.apply_filter(self._tasks, self._filter, now)

    @property
    def all_tasks(self) -> list[Task]:
        """Every task, sorted by order, ignoring the filter."""
        return self._snapshot(task_views.sort_by_order(self._tasks))

    @property
    def filtered_tasks(self) -> list[Task]:
        return self._snapshot(self._filtered(self._clock()))

    @property
    def completed_tasks(self) -> list[Task]:
        return [task for task in self.filtered_tasks if task.completed]

    @property
    def pending_tasks(self) -> list[Task]:
        return [task for task in self.filtered_tasks if not task.completed]

    @property
    def overdue_tasks(self) -> list[Task]:
        now = self._clock()
        return self._snapshot(task_views.overdue_tasks(self._filtered(now), now))

    @property
    def completion_percentage(self) -> int:
        return task_views.completion_percentage(self._filtered(self._clock()))

    @property
    def priority_counts(self) -> dict[TaskPriority, int]:
        """Incomplete filtered tasks per priority."""
        return task_views.priority_counts(self._filtered(self._clock()))

    @property
    def high_priority_count(self) -> int:
        return self.priority_counts["high"]

    @property
    def medium_priority_count(self) -> int:
        return self.priority_counts["medium"]

    @property
    def low_priority_count(self) -> int:
        return self.priority_counts["low"]

    @property
    def all_tags(self) -> list[str]:
        return task_views.collect_tags(self._tasks)

    @property
    def completed_today(self) -> int:
        return task_views.completed_on_day(self._tasks, self._clock())

    @property
    def completed_this_week(self) -> int:
        return task_views.completed_within(self._tasks, self._clock(), days=7)

    @property
    def completed_this_month(self) -> int:
        return task_views.completed_within(self._tasks, self._clock(), days=30)

    def stats(self) -> TaskStats:
        """Every aggregate view computed against a single reference time."""
        now = self._clock()
        filtered = self._filtered(now)
        counts = task_views.priority_counts(filtered)
        completed = sum(1 for task in filtered if task.completed)
        return TaskStats(
            total=len(self._tasks),
            filtered=len(filtered),
            completed=completed,
            pending=len(filtered) - completed,
            overdue=len(task_views.overdue_tasks(filtered, now)),
            completion_percentage=task_views.completion_percentage(filtered),
            high_priority=counts["high"],
            medium_priority=counts["medium"],
            low_priority=counts["low"],
            completed_today=task_views.completed_on_day(self._tasks, now),
            completed_this_week=task_views.completed_within(self._tasks, now, days=7),
            completed_this_month=task_views.completed_within(self._tasks, now, days=30),
        )
