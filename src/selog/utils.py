"""Shared utilities for the CLI implementation."""

from __future__ import annotations

import logging
import sys
from typing import NoReturn

import click
from rich.console import Console
from rich.style import Style
from rich.theme import Theme

SUCCESS_PREFIX = "\033[92;1m✔\033[0m "
ERROR_PREFIX = "\033[31m✘\033[0m "
INFO_PREFIX = "\033[94;1mi\033[0m "
WARNING_PREFIX = "○ "
DEBUG_PREFIX = "\033[95m◆\033[0m "
BOLD = "\033[1m"
RESET = "\033[0m"

_LOGGER = logging.getLogger("selog")

_THEME = Theme(
    {
        "markdown.code": Style(bold=True, color="cyan"),
        "markdown.code_block": Style(color="cyan"),
        "markdown.h1": Style(bold=True, color="green"),
    }
)

stdout_console = Console(theme=_THEME)


def configure_logging(debug: bool = False) -> logging.Logger:
    """Configure the shared logger used across the CLI."""
    level = logging.DEBUG if debug else logging.INFO
    _LOGGER.setLevel(level)
    while _LOGGER.handlers:
        handler = _LOGGER.handlers.pop()
        handler.close()
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.setLevel(level)
    _LOGGER.addHandler(handler)
    _LOGGER.propagate = False
    return _LOGGER


def _log(prefix: str, message: str, level: int) -> None:
    for line in message.splitlines() or [""]:
        _LOGGER.log(level, f"{prefix}{line}" if line else prefix.rstrip())


def log_info(message: str) -> None:
    """Log an informational message with the standardized prefix."""
    _log(INFO_PREFIX, message, logging.INFO)


def log_success(message: str) -> None:
    """Log a success message with the standardized prefix."""
    _log(SUCCESS_PREFIX, message, logging.INFO)


def log_error(message: str) -> None:
    """Log an error message with the standardized prefix."""
    _log(ERROR_PREFIX, message, logging.ERROR)


def log_warning(message: str) -> None:
    """Log a warning message with the standardized prefix."""
    _log(WARNING_PREFIX, message, logging.WARNING)


def log_debug(message: str) -> None:
    """Log a debug message with the standardized prefix."""
    _log(DEBUG_PREFIX, message, logging.DEBUG)


def abort_on_user_interrupt(exc: BaseException | None = None) -> NoReturn:
    """Log a standardized cancellation message and exit the command."""

    log_error("operation cancelled by user (Ctrl+C).")
    raise click.exceptions.Exit(130) from exc


def format_bold(text: str) -> str:
    """Return text wrapped in ANSI bold styling."""
    return f"{BOLD}{text}{RESET}"


def emit_output(content: str, *, newline: bool = True) -> None:
    """Emit raw command output to stdout for machine consumption."""
    click.echo(content, nl=newline, err=False)
