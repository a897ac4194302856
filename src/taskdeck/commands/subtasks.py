"""Subtask commands."""

from typing import Annotated

import typer

from taskdeck.utils.ui.formatters import format_success, format_task_detail

from .decorators import command_wrapper
from .utils import get_services, warn_if_unsaved

app = typer.Typer(help="Subtask commands", no_args_is_help=True)


@app.command("add")
@command_wrapper
def add_subtask(
    ctx: typer.Context,
    task_id: Annotated[int, typer.Argument(help="Parent task ID")],
    title: Annotated[str, typer.Argument(help="Subtask title")],
) -> None:
    """Add a subtask to a task."""
    store = get_services(ctx).task_store
    subtask = store.add_subtask(task_id, title)
    format_success(f"Subtask created: #{subtask.id} {subtask.title}")
    warn_if_unsaved(store)


@app.command("toggle")
@command_wrapper
def toggle_subtask(
    ctx: typer.Context,
    task_id: Annotated[int, typer.Argument(help="Parent task ID")],
    subtask_id: Annotated[int, typer.Argument(help="Subtask ID")],
) -> None:
    """Toggle a subtask's completion."""
    store = get_services(ctx).task_store
    format_task_detail(store.toggle_subtask(task_id, subtask_id))
    warn_if_unsaved(store)


@app.command("delete")
@command_wrapper
def delete_subtask(
    ctx: typer.Context,
    task_id: Annotated[int, typer.Argument(help="Parent task ID")],
    subtask_id: Annotated[int, typer.Argument(help="Subtask ID")],
) -> None:
    """Delete a subtask."""
    store = get_services(ctx).task_store
    format_task_detail(store.delete_subtask(task_id, subtask_id))
    warn_if_unsaved(store)
