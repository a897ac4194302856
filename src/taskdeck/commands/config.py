"""Configuration commands."""

from typing import Annotated

import typer

from taskdeck.utils import exit_codes
from taskdeck.utils.ui.formatters import format_output, format_success

from .decorators import AppError, command_wrapper
from .utils import get_services

app = typer.Typer(help="Configuration management", no_args_is_help=True)


@app.command("show")
@command_wrapper
def show_config(
    ctx: typer.Context,
    output: Annotated[
        str, typer.Option("--output", "-o", help="Output format")
    ] = "json",
) -> None:
    """Show the whole configuration."""
    config_service = get_services(ctx).config_service
    format_output(config_service.config.model_dump(), output)


@app.command("get")
@command_wrapper
def get_config(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="Dot-separated key, e.g. storage.backend")],
) -> None:
    """Get a configuration value."""
    config_service = get_services(ctx).config_service
    try:
        value = config_service.get(key)
    except KeyError as e:
        raise AppError(f"Unknown config key: {key}", exit_codes.ERROR_INVALID_ARGS) from e
    typer.echo(value.model_dump_json(indent=2) if hasattr(value, "model_dump_json") else value)


@app.command("set")
@command_wrapper
def set_config(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="Dot-separated key")],
    value: Annotated[str, typer.Argument(help="New value")],
) -> None:
    """Set a configuration value. Storage changes apply on the next run."""
    config_service = get_services(ctx).config_service
    try:
        config_service.set(key, value)
    except KeyError as e:
        raise AppError(f"Unknown config key: {key}", exit_codes.ERROR_INVALID_ARGS) from e
    format_success(f"{key} = {config_service.get(key)}")


@app.command("reset")
@command_wrapper
def reset_config(
    ctx: typer.Context,
    key: Annotated[
        str | None, typer.Argument(help="Key to reset; omit to reset everything")
    ] = None,
) -> None:
    """Reset configuration to defaults."""
    config_service = get_services(ctx).config_service
    try:
        config_service.reset(key)
    except KeyError as e:
        raise AppError(f"Unknown config key: {key}", exit_codes.ERROR_INVALID_ARGS) from e
    format_success(f"Reset {key or 'all settings'} to defaults")
