"""Derived views over a task collection.

Every function here is pure: it reads a sequence of tasks (plus a filter and
a reference time where needed) and returns a fresh value. The task store
calls them on every read so views can never lag behind a mutation.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime

from taskdeck.models import PRIORITIES, Task, TaskFilter, TaskPriority
from taskdeck.utils.datetime_utils import is_same_local_day, within_trailing_window


def sort_by_order(tasks: Iterable[Task]) -> list[Task]:
    return sorted(tasks, key=lambda task: task.order)


def matches_search(task: Task, query: str) -> bool:
    """Case-insensitive substring match against title, description or any tag."""
    needle = query.lower()
    return (
        needle in task.title.lower()
        or needle in (task.description or "").lower()
        or any(needle in tag.lower() for tag in task.tags)
    )


def matches_filter(task: Task, task_filter: TaskFilter, now: datetime) -> bool:
    """Return True if *task* satisfies every constraint set on *task_filter*."""
    if task_filter.status == "completed" and not task.completed:
        return False
    if task_filter.status == "pending" and task.completed:
        return False

    if task_filter.priority is not None and task.priority != task_filter.priority:
        return False

    if task_filter.tags and not any(tag in task.tags for tag in task_filter.tags):
        return False

    query = task_filter.search_query
    if query and query.strip() and not matches_search(task, query):
        return False

    if task_filter.show_overdue and not task.is_overdue(now):
        return False

    return True


def apply_filter(
    tasks: Iterable[Task], task_filter: TaskFilter, now: datetime
) -> list[Task]:
    """Filter *tasks* and sort the result by ascending order."""
    return sort_by_order(t for t in tasks if matches_filter(t, task_filter, now))


def completion_percentage(tasks: Sequence[Task]) -> int:
    """Percentage of completed tasks, rounded half up; 0 for an empty list."""
    total = len(tasks)
    if total == 0:
        return 0
    completed = sum(1 for task in tasks if task.completed)
    return (200 * completed + total) // (2 * total)


def overdue_tasks(tasks: Iterable[Task], now: datetime) -> list[Task]:
    return [task for task in tasks if task.is_overdue(now)]


def priority_counts(tasks: Iterable[Task]) -> dict[TaskPriority, int]:
    """Count incomplete tasks per priority."""
    counts: dict[TaskPriority, int] = {priority: 0 for priority in PRIORITIES}
    for task in tasks:
        if not task.completed:
            counts[task.priority] += 1
    return counts


def collect_tags(tasks: Iterable[Task]) -> list[str]:
    """Every tag in use, deduplicated and sorted."""
    return sorted({tag for task in tasks for tag in task.tags})


def completed_on_day(tasks: Iterable[Task], now: datetime) -> int:
    """Completed tasks last updated on the same local calendar day as *now*."""
    return sum(
        1 for task in tasks if task.completed and is_same_local_day(task.updated_at, now)
    )


def completed_within(tasks: Iterable[Task], now: datetime, days: int) -> int:
    """Completed tasks last updated within the trailing *days* x 24h."""
    return sum(
        1
        for task in tasks
        if task.completed and within_trailing_window(task.updated_at, now, days)
    )
