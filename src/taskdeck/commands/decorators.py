"""Decorators for command functions."""

import functools
import time
import traceback
from collections.abc import Callable

import typer

from taskdeck.models import NotFoundError, PersistenceError, ValidationError
from taskdeck.utils import exit_codes
from taskdeck.utils.logger import get_logger
from taskdeck.utils.ui.formatters import format_error


class AppError(Exception):
    """Custom application error with exit code."""

    def __init__(self, message: str, exit_code: int = exit_codes.ERROR_GENERAL):
        super().__init__(message)
        self.exit_code = exit_code


def _to_app_error(error: Exception) -> AppError | None:
    """Map domain errors to CLI errors with semantic exit codes."""
    if isinstance(error, AppError):
        return error
    if isinstance(error, ValidationError):
        return AppError(str(error), exit_codes.ERROR_INVALID_ARGS)
    if isinstance(error, NotFoundError):
        return AppError(str(error), exit_codes.ERROR_NOT_FOUND)
    if isinstance(error, PersistenceError):
        return AppError(str(error), exit_codes.ERROR_PERSISTENCE)
    return None


def command_wrapper(func: Callable):
    """Decorator to wrap command functions with logging and error mapping."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = get_logger()
        cmd = func.__name__
        start = time.monotonic()
        logger.info("command started: %s", cmd)
        try:
            result = func(*args, **kwargs)
            elapsed = time.monotonic() - start
            logger.info("command completed: %s (%.3fs)", cmd, elapsed)
            return result

        except typer.Exit:
            # Re-raise Typer's own exits (like --help or explicit Exit(0))
            raise

        except Exception as e:
            elapsed = time.monotonic() - start
            app_error = _to_app_error(e)
            if app_error is not None:
                logger.error("command failed: %s (%.3fs) - %s", cmd, elapsed, str(e))
                format_error(str(app_error))
                raise typer.Exit(code=app_error.exit_code) from e

            logger.error(
                "command failed: %s (%.3fs) - %s\n%s",
                cmd,
                elapsed,
                str(e),
                traceback.format_exc(),
            )
            # Generic fallback for unexpected crashes
            format_error(f"An unexpected error occurred: {str(e)}")
            raise typer.Exit(code=exit_codes.ERROR_GENERAL) from e

    return wrapper
