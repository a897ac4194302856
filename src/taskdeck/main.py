"""Main entry point for taskdeck."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from taskdeck import __version__
from taskdeck.commands import config, subtasks, tags, tasks, theme
from taskdeck.commands.decorators import command_wrapper
from taskdeck.commands.utils import build_filter, get_services
from taskdeck.services import ConfigService, create_services
from taskdeck.utils.ui.formatters import format_output, format_stats

app = typer.Typer(
    name="taskdeck",
    help="A personal task manager with priorities, tags, subtasks and due dates",
    no_args_is_help=True,
)

console = Console()


@app.callback()
def main_callback(
    ctx: typer.Context,
    config_dir: Annotated[
        Path | None,
        typer.Option(
            "--config-dir",
            envvar="TASKDECK_CONFIG_DIR",
            help="Directory holding config.json",
        ),
    ] = None,
) -> None:
    """Build the shared services once per invocation."""
    if ctx.obj is None:
        ctx.obj = create_services(ConfigService(config_dir))


# Add subcommands
app.add_typer(tasks.app, name="tasks", help="Task management commands")
app.add_typer(tags.app, name="tag", help="Tag management commands")
app.add_typer(subtasks.app, name="subtask", help="Subtask commands")
app.add_typer(theme.app, name="theme", help="Theme preference")
app.add_typer(config.app, name="config", help="Configuration management")


# Add top-level commands
@app.command()
@command_wrapper
def stats(
    ctx: typer.Context,
    status: Annotated[
        str | None, typer.Option("--status", help="pending or completed")
    ] = None,
    priority: Annotated[
        str | None, typer.Option("--priority", "-p", help="high, medium or low")
    ] = None,
    tag: Annotated[
        list[str] | None, typer.Option("--tag", "-t", help="Match any of these tags")
    ] = None,
    search: Annotated[
        str | None, typer.Option("--search", help="Search title, description and tags")
    ] = None,
    overdue: Annotated[
        bool, typer.Option("--overdue", help="Only overdue tasks")
    ] = False,
    output: Annotated[
        str, typer.Option("--output", "-o", help="pretty, json or yaml")
    ] = "pretty",
) -> None:
    """Show completion and priority statistics."""
    store = get_services(ctx).task_store
    store.set_filter(build_filter(status, priority, tag, search, overdue))
    summary = store.stats()
    if output == "pretty":
        format_stats(summary)
    else:
        format_output(summary.model_dump(), output)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold]taskdeck[/bold] version [cyan]{__version__}[/cyan]")


# Main entry point
def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
