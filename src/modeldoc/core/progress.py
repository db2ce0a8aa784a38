"""Console feedback for the CLI: one-line status messages and a spinner.

Status lines go to stderr through one shared rich console. While a spinner
is live, log records bound for the terminal are dropped (file outputs keep
them) so they cannot tear through the spinner line. Muting is process-wide
because directory runs log from worker threads.

Usage::

    status("Generating documentation for models in: app/Models", style="none")
    with spinner("Documenting models"):
        documenter.generate_for_directory()
    status("App\\Models\\User.", style="success", indent=2)
"""

from __future__ import annotations

import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from rich.console import Console

from modeldoc.core.logging import get_logger

_PREFIXES = {
    "success": "[green]✓[/green] ",
    "error": "[red]✗[/red] ",
    "warning": "[yellow]![/yellow] ",
    "info": "  ",
    "none": "",
}

_console = Console(stderr=True)
_muted = threading.Event()


def get_console() -> Console:
    return _console


def set_console(console: Console) -> Console:
    """Swap the shared console and return the previous one."""
    global _console
    previous, _console = _console, console
    return previous


def is_console_suppressed() -> bool:
    return _muted.is_set()


@contextmanager
def suppress_console_logs() -> Iterator[None]:
    """Mute terminal log output for the duration of the block."""
    already_muted = _muted.is_set()
    _muted.set()
    try:
        yield
    finally:
        if not already_muted:
            _muted.clear()


def _is_tty() -> bool:
    isatty = getattr(sys.stderr, "isatty", None)
    return bool(isatty and isatty())


def status(message: str, *, style: str = "info", indent: int = 0) -> None:
    """Print one status line. ``message`` may carry rich markup; escape user text."""
    _console.print(f"{' ' * indent}{_PREFIXES.get(style, '')}{message}", highlight=False)
    get_logger("progress").debug("status", message=message, style=style)


@contextmanager
def spinner(message: str, *, indent: int = 0) -> Iterator[None]:
    """Show a spinner on a terminal; a no-op when stderr is redirected."""
    if not _is_tty():
        yield
        return

    with (
        suppress_console_logs(),
        _console.status(f"{' ' * indent}[cyan]{message}[/cyan]", spinner="dots"),
    ):
        yield
