"""Tag management commands."""

from typing import Annotated

import typer

from taskdeck.utils.ui.console import get_console
from taskdeck.utils.ui.formatters import format_output, format_success

from .decorators import command_wrapper
from .utils import get_services, warn_if_unsaved

app = typer.Typer(help="Tag management commands", no_args_is_help=True)
console = get_console()


@app.command("add")
@command_wrapper
def add_tag(
    ctx: typer.Context,
    task_id: Annotated[int, typer.Argument(help="Task ID")],
    tag: Annotated[str, typer.Argument(help="Tag name")],
) -> None:
    """Add a tag to a task."""
    store = get_services(ctx).task_store
    task = store.add_tag(task_id, tag)
    format_success(f"#{task.id} tags: {', '.join(task.tags)}")
    warn_if_unsaved(store)


@app.command("remove")
@command_wrapper
def remove_tag(
    ctx: typer.Context,
    task_id: Annotated[int, typer.Argument(help="Task ID")],
    tag: Annotated[str, typer.Argument(help="Tag name")],
) -> None:
    """Remove a tag from a task."""
    store = get_services(ctx).task_store
    task = store.remove_tag(task_id, tag)
    format_success(f"#{task.id} tags: {', '.join(task.tags) or '-'}")
    warn_if_unsaved(store)


@app.command("list")
@command_wrapper
def list_tags(
    ctx: typer.Context,
    output: Annotated[
        str, typer.Option("--output", "-o", help="Output format")
    ] = "pretty",
) -> None:
    """List every tag in use."""
    tags = get_services(ctx).task_store.all_tags
    if output != "pretty":
        format_output({"tags": tags}, output)
        return
    if not tags:
        console.print("[yellow]No tags in use[/yellow]")
        return
    for tag in tags:
        console.print(f"• {tag}")
