"""CLI helpers."""

from pathlib import Path

import click

PROJECT_MARKERS = ("composer.json", "artisan")


def find_project_root(start_path: Path | None = None) -> Path:
    """Nearest directory at or above ``start_path`` holding a Laravel marker.

    Markers are ``composer.json`` and ``artisan``. Defaults to the current
    working directory.

    Raises:
        click.ClickException: When no ancestor has a marker.
    """
    start = (start_path or Path.cwd()).resolve()
    for candidate in (start, *start.parents):
        if any((candidate / marker).exists() for marker in PROJECT_MARKERS):
            return candidate

    raise click.ClickException(
        f"Not inside a Laravel project: {start}\n"
        "Run modeldoc from a directory containing composer.json, or pass --root."
    )
