"""structlog setup for modeldoc.

Records from structlog and from libraries that log through stdlib
``logging`` (SQLAlchemy) share one processor chain and are rendered once per
configured output. Each CLI invocation gets a run id that is stamped on every
line so a log file shared by several runs can be split apart again.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from pathlib import Path
from typing import TYPE_CHECKING, Any
from uuid import uuid4

import structlog

if TYPE_CHECKING:
    from modeldoc.config.models import LoggingConfig, LogOutputConfig

_run_id: ContextVar[str | None] = ContextVar("modeldoc_run_id", default=None)

# First file output of the active configuration
_log_file: Path | None = None

_CONSOLE_DESTINATIONS = {"stderr": lambda: sys.stderr, "stdout": lambda: sys.stdout}

# Library loggers that are chatty below WARNING
_QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool")


def set_run_id(run_id: str | None = None) -> str:
    """Start a run; every log line emitted afterwards carries ``run_id``."""
    value = run_id or uuid4().hex[:12]
    _run_id.set(value)
    return value


def get_run_id() -> str | None:
    return _run_id.get()


def clear_run_id() -> None:
    _run_id.set(None)


def get_log_file_path() -> Path | None:
    return _log_file


def _stamp_run_id(
    _logger: structlog.types.WrappedLogger,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    run_id = _run_id.get()
    if run_id is not None:
        event_dict.setdefault("run_id", run_id)
    return event_dict


def _level_number(name: str | None, fallback: int) -> int:
    if not name:
        return fallback
    value = logging.getLevelName(name.upper())
    return value if isinstance(value, int) else fallback


class ConsoleSuppressingFilter(logging.Filter):
    """Drops console records while a spinner owns the terminal.

    Only stream handlers get this filter; file outputs keep every record.
    """

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: ARG002
        # progress imports this module, so look it up at call time
        from modeldoc.core.progress import is_console_suppressed

        return not is_console_suppressed()


def _open_handler(output: LogOutputConfig) -> tuple[logging.Handler, bool]:
    """Handler for one output, and whether it writes to the terminal."""
    stream = _CONSOLE_DESTINATIONS.get(output.destination)
    if stream is not None:
        handler: logging.Handler = logging.StreamHandler(stream())
        handler.addFilter(ConsoleSuppressingFilter())
        return handler, True

    path = Path(output.destination)
    path.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(path, mode="a", encoding="utf-8"), False


def _renderer(output: LogOutputConfig, is_console: bool) -> structlog.types.Processor:
    if output.format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=is_console and sys.stderr.isatty(),
        pad_event_to=0,
        pad_level=False,
    )


def configure_logging(
    *,
    config: LoggingConfig | None = None,
    json_format: bool = False,
    level: str = "INFO",
) -> None:
    """(Re)configure logging. Safe to call more than once per process.

    Args:
        config: Full logging configuration. When given, ``json_format`` and
            ``level`` are ignored.
        json_format: Render the single stderr output as JSON lines.
        level: Root level for the single stderr output.
    """
    global _log_file
    from modeldoc.config.models import LoggingConfig, LogOutputConfig

    if config is None:
        config = LoggingConfig(
            level=level,
            outputs=[LogOutputConfig(format="json" if json_format else "console")],
        )

    root_level = _level_number(config.level, logging.INFO)
    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", key="timestamp"),
        _stamp_run_id,  # type: ignore[list-item]
    ]

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(root_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Reconfiguration must reach loggers created before it
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(root_level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _log_file = None
    for output in config.outputs:
        handler, is_console = _open_handler(output)
        if not is_console and _log_file is None:
            _log_file = Path(output.destination)
        handler.setLevel(_level_number(output.level, root_level))
        handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=_renderer(output, is_console),
                foreign_pre_chain=pre_chain,
            )
        )
        root.addHandler(handler)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    logger = structlog.get_logger()
    return logger.bind(logger=name) if name else logger  # type: ignore[no-any-return]
