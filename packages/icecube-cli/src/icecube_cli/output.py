"""Console output for icecube-cli.

Command results go to stdout through a shared Rich console. Log events
from icecube-core go to stderr through structlog, so they never mix into
command output. NO_COLOR turns colors off for both; --no-color for the
console.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog
from rich.console import Console

_force_no_color = os.environ.get("NO_COLOR") is not None


def create_console(no_color: bool = False) -> Console:
    """Create the console used for command output.

    Args:
        no_color: Disable colors (NO_COLOR disables them as well).
    """
    plain = no_color or _force_no_color
    return Console(force_terminal=False if plain else None, no_color=plain)


console = create_console()


def set_no_color(no_color: bool) -> None:
    """Replace the shared console, turning colors on or off."""
    global console
    console = create_console(no_color=no_color)


def _status(symbol: str, style: str, message: str, **kwargs: Any) -> None:
    console.print(f"[{style}]{symbol}[/{style}] {message}", **kwargs)


def success(message: str, **kwargs: Any) -> None:
    """Print a message prefixed with a green check mark.

    Example:
        >>> success("default: Compiled 3 component(s)")
        ✓ default: Compiled 3 component(s)
    """
    _status("✓", "green", message, **kwargs)


def error(message: str, **kwargs: Any) -> None:
    """Print a message prefixed with a red cross."""
    _status("✗", "red", message, **kwargs)


def warning(message: str, **kwargs: Any) -> None:
    """Print a message prefixed with a yellow warning sign."""
    _status("⚠", "yellow", message, **kwargs)


def info(message: str, **kwargs: Any) -> None:
    """Print a plain message."""
    console.print(message, **kwargs)


def configure_logging(verbose: bool = False) -> None:
    """Send structlog events to stderr.

    Args:
        verbose: Show debug events. Otherwise only warnings and errors
            are shown.
    """
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=not _force_no_color),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if verbose else logging.WARNING
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
