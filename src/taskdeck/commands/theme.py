"""Theme preference commands."""

from typing import Annotated

import typer

from taskdeck.utils.ui.console import get_console
from taskdeck.utils.ui.formatters import format_success

from .decorators import command_wrapper
from .utils import get_services

app = typer.Typer(help="Theme preference", no_args_is_help=True)
console = get_console()


@app.command("show")
@command_wrapper
def show_theme(ctx: typer.Context) -> None:
    """Show the current theme."""
    console.print(get_services(ctx).theme_service.theme)


@app.command("set")
@command_wrapper
def set_theme(
    ctx: typer.Context,
    theme: Annotated[str, typer.Argument(help="light or dark")],
) -> None:
    """Set the theme."""
    format_success(f"Theme set to {get_services(ctx).theme_service.set_theme(theme)}")


@app.command("toggle")
@command_wrapper
def toggle_theme(ctx: typer.Context) -> None:
    """Switch between light and dark."""
    format_success(f"Theme set to {get_services(ctx).theme_service.toggle_theme()}")
