"""Task data models."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

TaskPriority = Literal["high", "medium", "low"]
TaskStatus = Literal["pending", "completed"]

PRIORITIES: tuple[TaskPriority, ...] = ("high", "medium", "low")


def ensure_aware(value: datetime | None) -> datetime | None:
    """Interpret a naive datetime as local time."""
    if value is None or value.tzinfo is not None:
        return value
    return value.astimezone()


def clean_title(value: str) -> str:
    if not value or not value.strip():
        raise ValueError("title cannot be empty")
    return value.strip()


def clean_tags(tags: list[str]) -> list[str]:
    """Strip tags and drop duplicates, keeping the first occurrence of each.

    Raises:
        ValueError: If a tag is blank
    """
    stripped = []
    for tag in tags:
        if not tag or not tag.strip():
            raise ValueError("tags cannot be empty")
        stripped.append(tag.strip())
    return list(dict.fromkeys(stripped))


class Subtask(BaseModel):
    """A checklist item owned by a single task.

    Attributes:
        id: Identifier, unique within the parent task
        title: Display title
        completed: Completion status
    """

    id: int
    title: str
    completed: bool = False

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return clean_title(v)


class Task(BaseModel):
    """Task model representing a complete task entity.

    Attributes:
        id: Unique identifier, immutable after creation
        title: Non-empty display title
        description: Optional detailed description
        completed: Completion status
        priority: Priority level ("high", "medium", "low")
        tags: Tag names, unique, in insertion order
        due_date: Optional due timestamp
        subtasks: Ordered subtasks owned by this task
        order: Position in the canonical display sequence
        created_at: Creation timestamp
        updated_at: Last mutation timestamp
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
    )

    id: int
    title: str
    description: str = ""
    completed: bool = False
    priority: TaskPriority = "medium"
    tags: list[str] = Field(default_factory=list)
    due_date: datetime | None = None
    subtasks: list[Subtask] = Field(default_factory=list)
    order: int = 0
    created_at: datetime
    updated_at: datetime

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return clean_title(v)

    @field_validator("description", mode="before")
    @classmethod
    def default_description(cls, v: str | None) -> str:
        return v or ""

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: list[str]) -> list[str]:
        return clean_tags(v)

    @field_validator("due_date", "created_at", "updated_at")
    @classmethod
    def validate_timestamps(cls, v: datetime | None) -> datetime | None:
        return ensure_aware(v)

    @model_validator(mode="after")
    def check_subtask_ids(self) -> Task:
        ids = [subtask.id for subtask in self.subtasks]
        if len(ids) != len(set(ids)):
            raise ValueError("subtask ids must be unique within a task")
        return self

    def is_overdue(self, now: datetime) -> bool:
        """Return True if incomplete and due strictly before *now*."""
        return (
            not self.completed
            and self.due_date is not None
            and self.due_date < now
        )

    def get_subtask(self, subtask_id: int) -> Subtask | None:
        for subtask in self.subtasks:
            if subtask.id == subtask_id:
                return subtask
        return None


class TaskChanges(BaseModel):
    """Partial update for an existing task.

    All fields are optional - only fields that were explicitly provided are
    applied. ``id``, ``created_at`` and ``order`` are absent: order only
    changes through reordering.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    title: str | None = None
    description: str | None = None
    completed: bool | None = None
    priority: TaskPriority | None = None
    tags: list[str] | None = None
    due_date: datetime | None = None
    subtasks: list[Subtask] | None = None

    def applied_fields(self) -> dict:
        """Return only the fields the caller supplied."""
        return self.model_dump(exclude_unset=True)


class TaskFilter(BaseModel):
    """Predicate configuration for the filtered task view.

    Attributes:
        status: "pending" or "completed"
        priority: Exact priority match
        tags: Match tasks having any of these tags
        search_query: Case-insensitive substring over title, description, tags
        show_overdue: Only overdue tasks when True
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    tags: list[str] | None = None
    search_query: str | None = None
    show_overdue: bool = False

    def is_empty(self) -> bool:
        return (
            self.status is None
            and self.priority is None
            and not self.tags
            and not (self.search_query and self.search_query.strip())
            and not self.show_overdue
        )


class TaskStats(BaseModel):
    """Snapshot of every aggregate view, computed at one instant."""

    total: int
    filtered: int
    completed: int
    pending: int
    overdue: int
    completion_percentage: int
    high_priority: int
    medium_priority: int
    low_priority: int
    completed_today: int
    completed_this_week: int
    completed_this_month: int
