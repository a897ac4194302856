"""Helpers shared by command modules."""

from __future__ import annotations

from datetime import datetime
from typing import Any

import typer

from taskdeck.services import AppServices, TaskStore
from taskdeck.utils import exit_codes
from taskdeck.utils.datetime_utils import parse_due_date
from taskdeck.utils.ui.formatters import format_warning

from .decorators import AppError


def get_services(ctx: typer.Context) -> AppServices:
    """Return the services built by the root callback."""
    services = ctx.obj
    if not isinstance(services, AppServices):
        raise AppError("taskdeck services are not initialised")
    return services


def warn_if_unsaved(store: TaskStore) -> None:
    """Tell the user when the last mutation could not be written to disk."""
    if store.last_persistence_error is not None:
        format_warning(
            f"Change applied but not saved: {store.last_persistence_error}"
        )


def parse_due_option(value: str | None) -> datetime | None:
    if value is None:
        return None
    try:
        return parse_due_date(value)
    except ValueError as e:
        raise AppError(
            f"Invalid due date {value!r}; use YYYY-MM-DD or YYYY-MM-DDTHH:MM",
            exit_codes.ERROR_INVALID_ARGS,
        ) from e


def build_filter(
    status: str | None = None,
    priority: str | None = None,
    tags: list[str] | None = None,
    search: str | None = None,
    overdue: bool = False,
) -> dict[str, Any]:
    """Translate command-line options into TaskFilter fields."""
    return {
        "status": status,
        "priority": priority,
        "tags": tags or None,
        "search_query": search,
        "show_overdue": overdue,
    }
