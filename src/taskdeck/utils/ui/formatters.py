"""Output formatters for different formats."""

from __future__ import annotations

import json
from collections.abc import Sequence
from datetime import datetime
from typing import Any

import yaml
from rich.table import Table

from taskdeck.models import Task, TaskStats, Theme
from taskdeck.utils.datetime_utils import now_local
from taskdeck.utils.ui.console import get_console

console = get_console()

PRIORITY_STYLES = {"high": "bold red", "medium": "yellow", "low": "dim"}
HEADER_STYLES: dict[str, str] = {"light": "bold magenta", "dark": "bold cyan"}


def format_output(data: Any, output_format: str = "pretty") -> None:
    """Print *data* as JSON or YAML; "pretty" falls back to a key/value table."""
    if output_format == "json":
        print(json.dumps(data, indent=2, default=str))
    elif output_format == "yaml":
        print(yaml.safe_dump(data, default_flow_style=False, sort_keys=False))
    elif isinstance(data, dict):
        format_single_item(data)
    else:
        console.print(data)


def task_to_dict(task: Task) -> dict[str, Any]:
    """JSON-ready representation of a task, in the persisted layout."""
    return task.model_dump(mode="json", by_alias=True)


def format_single_item(item: dict) -> None:
    """Format a single item as key-value pairs."""
    table = Table(show_header=False, box=None)
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="white")

    for key, value in item.items():
        formatted_key = key.replace("_", " ").title()
        if isinstance(value, bool):
            formatted_value = "✓" if value else "✗"
        elif isinstance(value, list):
            formatted_value = ", ".join(str(v) for v in value)
        elif value is None:
            formatted_value = "-"
        else:
            formatted_value = str(value)
        table.add_row(formatted_key, formatted_value)

    console.print(table)


def format_error(message: str) -> None:
    """Format and display an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def format_success(message: str) -> None:
    """Format and display a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def format_warning(message: str) -> None:
    """Format and display a warning message."""
    console.print(f"[bold yellow]Warning:[/bold yellow] {message}")


def format_info(message: str) -> None:
    """Format and display an info message."""
    console.print(f"[bold blue]Info:[/bold blue] {message}")


def format_due_date(date: datetime | None, now: datetime | None = None) -> str:
    """Format due date in compact format: HH:MM DD/MM DayOfWeek."""
    if date is None:
        return ""
    if now is None:
        now = now_local()
    date = date.astimezone()

    time_str = date.strftime("%H:%M")
    day_str = date.strftime("%d/%m")
    day_of_week = date.strftime("%a")

    # Add year if different from current year
    if date.year != now.year:
        day_str = date.strftime("%d/%m/%Y")

    return f"{time_str} {day_str} {day_of_week}"


def get_progress_bar(percentage: float) -> str:
    """Get a progress bar representation."""
    filled = int(percentage / 10)
    empty = 10 - filled
    return "▓" * filled + "░" * empty


def get_completion_color(percentage: float) -> str:
    """Get color based on completion percentage."""
    if percentage >= 80:
        return "green"
    if percentage >= 40:
        return "yellow"
    return "red"


def format_tasks_table(
    tasks: Sequence[Task], theme: Theme = "light", now: datetime | None = None
) -> None:
    """Render tasks as a table in display order."""
    if not tasks:
        console.print("[yellow]No tasks found[/yellow]")
        return
    if now is None:
        now = now_local()

    table = Table(show_header=True, header_style=HEADER_STYLES[theme])
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("✓", no_wrap=True)
    table.add_column("Title")
    table.add_column("Priority", no_wrap=True)
    table.add_column("Tags")
    table.add_column("Due", no_wrap=True)
    table.add_column("Subtasks", no_wrap=True)

    for task in tasks:
        done_subtasks = sum(1 for s in task.subtasks if s.completed)
        due = format_due_date(task.due_date, now)
        if task.is_overdue(now):
            due = f"[bold red]{due}[/bold red]"
        title = f"[strike]{task.title}[/strike]" if task.completed else task.title
        table.add_row(
            str(task.id),
            "✓" if task.completed else "✗",
            title,
            f"[{PRIORITY_STYLES[task.priority]}]{task.priority}[/]",
            ", ".join(task.tags),
            due,
            f"{done_subtasks}/{len(task.subtasks)}" if task.subtasks else "",
        )

    console.print(table)


def format_task_detail(task: Task, now: datetime | None = None) -> None:
    """Render one task with its subtasks."""
    if now is None:
        now = now_local()
    status = "[green]completed[/green]" if task.completed else "pending"
    if task.is_overdue(now):
        status = "[bold red]overdue[/bold red]"

    console.print(f"[bold]{task.title}[/bold] [dim]#{task.id}[/dim]")
    if task.description:
        console.print(task.description)
    console.print(f"Status: {status}")
    console.print(f"Priority: [{PRIORITY_STYLES[task.priority]}]{task.priority}[/]")
    if task.tags:
        console.print(f"Tags: {', '.join(task.tags)}")
    if task.due_date:
        console.print(f"Due: {format_due_date(task.due_date, now)}")
    if task.subtasks:
        console.print("Subtasks:")
        for subtask in task.subtasks:
            mark = "[green]✓[/green]" if subtask.completed else "○"
            console.print(f"  {mark} {subtask.title} [dim]#{subtask.id}[/dim]")


def format_stats(stats: TaskStats) -> None:
    """Render the completion summary."""
    pct = stats.completion_percentage
    color = get_completion_color(pct)
    console.print(
        f"Completion: [{color}]{get_progress_bar(pct)} {pct}%[/{color}]"
        f" ({stats.completed}/{stats.filtered} tasks)"
    )
    console.print(f"Overdue: {stats.overdue}")
    console.print(
        f"Open by priority: high {stats.high_priority}"
        f" / medium {stats.medium_priority} / low {stats.low_priority}"
    )
    console.print(
        f"Completed today: {stats.completed_today}"
        f" · this week: {stats.completed_this_week}"
        f" · this month: {stats.completed_this_month}"
    )
