"""Task management commands."""

from typing import Annotated, Any

import typer

from taskdeck.utils import exit_codes
from taskdeck.utils.ui.console import get_console
from taskdeck.utils.ui.formatters import (
    format_output,
    format_success,
    format_task_detail,
    format_tasks_table,
    task_to_dict,
)

from .decorators import AppError, command_wrapper
from .utils import build_filter, get_services, parse_due_option, warn_if_unsaved

app = typer.Typer(help="Task management commands", no_args_is_help=True)
console = get_console()


@app.command("add")
@command_wrapper
def add_task(
    ctx: typer.Context,
    title: Annotated[str, typer.Argument(help="Task title")],
    priority: Annotated[
        str | None,
        typer.Option("--priority", "-p", help="high, medium or low"),
    ] = None,
    description: Annotated[
        str | None, typer.Option("--description", "-d", help="Detailed description")
    ] = None,
    tags: Annotated[
        list[str] | None, typer.Option("--tag", "-t", help="Tag (repeatable)")
    ] = None,
    due: Annotated[
        str | None, typer.Option("--due", help="Due date (YYYY-MM-DD[THH:MM])")
    ] = None,
    subtasks: Annotated[
        list[str] | None, typer.Option("--subtask", "-s", help="Subtask title (repeatable)")
    ] = None,
    output: Annotated[
        str, typer.Option("--output", "-o", help="Output format")
    ] = "pretty",
) -> None:
    """Create a new task."""
    services = get_services(ctx)
    store = services.task_store
    task = store.add(
        title,
        priority or services.config_service.config.ui.default_priority,
        description=description,
        tags=tags,
        due_date=parse_due_option(due),
        subtasks=subtasks,
    )
    if output == "pretty":
        format_success(f"Task created: #{task.id} {task.title}")
    else:
        format_output(task_to_dict(task), output)
    warn_if_unsaved(store)


@app.command("list")
@command_wrapper
def list_tasks(
    ctx: typer.Context,
    status: Annotated[
        str | None, typer.Option("--status", help="pending or completed")
    ] = None,
    priority: Annotated[
        str | None, typer.Option("--priority", "-p", help="high, medium or low")
    ] = None,
    tags: Annotated[
        list[str] | None, typer.Option("--tag", "-t", help="Match any of these tags")
    ] = None,
    search: Annotated[
        str | None, typer.Option("--search", help="Search title, description and tags")
    ] = None,
    overdue: Annotated[
        bool, typer.Option("--overdue", help="Only overdue tasks")
    ] = False,
    output: Annotated[
        str | None, typer.Option("--output", "-o", help="pretty, json or yaml")
    ] = None,
) -> None:
    """List tasks in display order."""
    services = get_services(ctx)
    store = services.task_store
    store.set_filter(build_filter(status, priority, tags, search, overdue))
    output = output or services.config_service.config.output.format

    tasks = store.filtered_tasks
    if output == "pretty":
        format_tasks_table(tasks, theme=services.theme_service.theme)
        console.print(
            f"[dim]{len(tasks)} of {len(store.all_tasks)} tasks · "
            f"{store.completion_percentage}% complete[/dim]"
        )
    else:
        format_output({"tasks": [task_to_dict(t) for t in tasks]}, output)


@app.command("show")
@command_wrapper
def show_task(
    ctx: typer.Context,
    task_id: Annotated[int, typer.Argument(help="Task ID")],
    output: Annotated[
        str, typer.Option("--output", "-o", help="Output format")
    ] = "pretty",
) -> None:
    """Show one task with its subtasks."""
    store = get_services(ctx).task_store
    task = store.get_by_id(task_id)
    if task is None:
        raise AppError(f"Task {task_id} not found", exit_codes.ERROR_NOT_FOUND)
    if output == "pretty":
        format_task_detail(task)
    else:
        format_output(task_to_dict(task), output)


@app.command("edit")
@command_wrapper
def edit_task(
    ctx: typer.Context,
    task_id: Annotated[int, typer.Argument(help="Task ID")],
    title: Annotated[str | None, typer.Option("--title", help="New title")] = None,
    description: Annotated[
        str | None, typer.Option("--description", "-d", help="New description")
    ] = None,
    priority: Annotated[
        str | None, typer.Option("--priority", "-p", help="high, medium or low")
    ] = None,
    due: Annotated[
        str | None, typer.Option("--due", help="New due date (YYYY-MM-DD[THH:MM])")
    ] = None,
    clear_due: Annotated[
        bool, typer.Option("--clear-due", help="Remove the due date")
    ] = False,
) -> None:
    """Edit fields of a task."""
    if due is not None and clear_due:
        raise AppError(
            "--due and --clear-due cannot be combined", exit_codes.ERROR_INVALID_ARGS
        )

    changes: dict[str, Any] = {}
    if title is not None:
        changes["title"] = title
    if description is not None:
        changes["description"] = description
    if priority is not None:
        changes["priority"] = priority
    if due is not None:
        changes["due_date"] = parse_due_option(due)
    if clear_due:
        changes["due_date"] = None
    if not changes:
        raise AppError("Nothing to change", exit_codes.ERROR_INVALID_ARGS)

    store = get_services(ctx).task_store
    task = store.update(task_id, changes)
    format_success(f"Task updated: #{task.id} {task.title}")
    warn_if_unsaved(store)


@app.command("done")
@command_wrapper
def toggle_task(
    ctx: typer.Context,
    task_ids: Annotated[list[int], typer.Argument(help="Task ID(s) to toggle")],
) -> None:
    """Toggle tasks between pending and completed."""
    store = get_services(ctx).task_store
    for task_id in task_ids:
        task = store.toggle_completed(task_id)
        state = "completed" if task.completed else "reopened"
        format_success(f"Task {state}: #{task.id} {task.title}")
    warn_if_unsaved(store)


@app.command("delete")
@command_wrapper
def delete_task(
    ctx: typer.Context,
    task_id: Annotated[int, typer.Argument(help="Task ID")],
    yes: Annotated[
        bool, typer.Option("--yes", "-y", help="Skip confirmation prompt")
    ] = False,
) -> None:
    """Delete a task permanently."""
    store = get_services(ctx).task_store
    task = store.get_by_id(task_id)
    if task is None:
        raise AppError(f"Task {task_id} not found", exit_codes.ERROR_NOT_FOUND)
    if not yes and not typer.confirm(f"Delete '{task.title}'?", default=False):
        console.print("[yellow]Cancelled.[/yellow]")
        return
    store.delete(task_id)
    format_success(f"Task deleted: #{task.id} {task.title}")
    warn_if_unsaved(store)


@app.command("move")
@command_wrapper
def move_tasks(
    ctx: typer.Context,
    task_ids: Annotated[
        list[int],
        typer.Argument(help="All task IDs in the new order, or one ID with --to"),
    ],
    to: Annotated[
        int | None,
        typer.Option("--to", help="Move a single task to this 0-based position"),
    ] = None,
) -> None:
    """Reorder tasks."""
    store = get_services(ctx).task_store
    if to is not None:
        if len(task_ids) != 1:
            raise AppError(
                "--to takes exactly one task ID", exit_codes.ERROR_INVALID_ARGS
            )
        moving = task_ids[0]
        sequence = [t.id for t in store.all_tasks if t.id != moving]
        if len(sequence) == len(store.all_tasks):
            raise AppError(f"Task {moving} not found", exit_codes.ERROR_NOT_FOUND)
        position = max(0, min(to, len(sequence)))
        sequence.insert(position, moving)
        task_ids = sequence

    tasks = store.reorder(task_ids)
    format_success("New order: " + ", ".join(f"#{t.id}" for t in tasks))
    warn_if_unsaved(store)
