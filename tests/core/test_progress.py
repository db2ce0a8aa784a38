"""Tests for core/progress.py module.

Covers:
- _is_tty() function
- status() function
- spinner() context manager
- suppress_console_logs() context manager
- ConsoleSuppressingFilter class
- set_console() swapping
"""

from __future__ import annotations

import logging
import sys
import threading
from collections.abc import Iterator
from io import StringIO

import pytest
from rich.console import Console

from modeldoc.core.logging import ConsoleSuppressingFilter
from modeldoc.core.progress import (
    _PREFIXES,
    _is_tty,
    get_console,
    is_console_suppressed,
    set_console,
    spinner,
    status,
    suppress_console_logs,
)


@pytest.fixture
def captured_console() -> Iterator[StringIO]:
    buffer = StringIO()
    previous = set_console(Console(file=buffer, force_terminal=False, width=200))
    try:
        yield buffer
    finally:
        set_console(previous)


class TestIsTty:
    """Tests for _is_tty function."""

    def test_returns_bool(self) -> None:
        assert isinstance(_is_tty(), bool)

    def test_false_for_stringio(self) -> None:
        """Returns False for non-TTY stderr."""
        original = sys.stderr
        try:
            sys.stderr = StringIO()
            assert _is_tty() is False
        finally:
            sys.stderr = original


class TestStyles:
    """Tests for _PREFIXES constant."""

    def test_has_expected_styles(self) -> None:
        assert set(_PREFIXES.keys()) == {"success", "error", "info", "warning", "none"}

    def test_success_style(self) -> None:
        assert "✓" in _PREFIXES["success"]

    def test_error_style(self) -> None:
        assert "✗" in _PREFIXES["error"]


class TestStatus:
    """Tests for status function."""

    def test_success_prefix(self, captured_console: StringIO) -> None:
        status("Successfully processed App\\Models\\User.", style="success")

        assert captured_console.getvalue() == "✓ Successfully processed App\\Models\\User.\n"

    def test_indent(self, captured_console: StringIO) -> None:
        status("- App\\Models\\Post", style="none", indent=2)

        assert captured_console.getvalue() == "  - App\\Models\\Post\n"

    def test_unknown_style_has_no_prefix(self, captured_console: StringIO) -> None:
        status("plain", style="bogus")

        assert captured_console.getvalue() == "plain\n"


class TestSetConsole:
    def test_returns_previous_console(self) -> None:
        original = get_console()
        replacement = Console(file=StringIO())

        previous = set_console(replacement)
        try:
            assert previous is original
            assert get_console() is replacement
        finally:
            set_console(original)


class TestSpinner:
    """Tests for spinner context manager."""

    def test_non_tty_yields_without_output(self, captured_console: StringIO) -> None:
        original = sys.stderr
        try:
            sys.stderr = StringIO()
            with spinner("Comparing docblocks"):
                pass
        finally:
            sys.stderr = original

        assert captured_console.getvalue() == ""


class TestConsoleSuppression:
    """Tests for suppress_console_logs and ConsoleSuppressingFilter."""

    def test_not_suppressed_by_default(self) -> None:
        assert is_console_suppressed() is False

    def test_suppressed_inside_block(self) -> None:
        with suppress_console_logs():
            assert is_console_suppressed() is True
        assert is_console_suppressed() is False

    def test_filter_blocks_while_suppressed(self) -> None:
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
        log_filter = ConsoleSuppressingFilter()

        assert log_filter.filter(record) is True
        with suppress_console_logs():
            assert log_filter.filter(record) is False

    def test_nested_block_keeps_outer_suppression(self) -> None:
        with suppress_console_logs():
            with suppress_console_logs():
                assert is_console_suppressed() is True
            assert is_console_suppressed() is True
        assert is_console_suppressed() is False

    def test_suppression_visible_from_worker_threads(self) -> None:
        seen: list[bool] = []
        with suppress_console_logs():
            worker = threading.Thread(target=lambda: seen.append(is_console_suppressed()))
            worker.start()
            worker.join()

        assert seen == [True]
