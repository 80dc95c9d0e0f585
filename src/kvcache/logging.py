"""
Structured logging for kvcache.

Cache operations log through ContextLogger, which attaches the active cache
namespace and operation (set with log_context()) plus any keyword fields.
Nothing is configured on import: the library only emits records under the
"kvcache" logger. setup_logging() is for applications such as the CLI and
routes those records to a rich console and, optionally, a JSON Lines file.
"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Generator

from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

ROOT_LOGGER_NAME = "kvcache"

_context_var: ContextVar[dict[str, str]] = ContextVar("kvcache_log_context", default={})

# Console styles for context fields, in display order
_CONTEXT_STYLES = {"namespace": "cyan", "operation": "magenta"}


def current_context() -> dict[str, str]:
    """Namespace and operation active in the current context."""
    return dict(_context_var.get())


@contextmanager
def log_context(
    namespace: str | None = None,
    operation: str | None = None,
) -> Generator[None, None, None]:
    """Scope a namespace and/or operation onto every record logged inside.

    Nested contexts inherit the outer values they do not override.
    """
    context = current_context()
    if namespace is not None:
        context["namespace"] = namespace
    if operation is not None:
        context["operation"] = operation

    token = _context_var.set(context)
    try:
        yield
    finally:
        _context_var.reset(token)


class JSONFormatter(logging.Formatter):
    """One JSON object per line, with context and extra fields."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **current_context(),
        }

        if hasattr(record, "extra"):
            log_obj["extra"] = record.extra

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_obj, default=str)


class ContextRichHandler(RichHandler):
    """Rich handler that shows the active namespace and operation after the level."""

    def get_level_text(self, record: logging.LogRecord) -> Text:
        level_text = super().get_level_text(record)
        context = current_context()

        for field, style in _CONTEXT_STYLES.items():
            if field in context:
                level_text.append(" ")
                level_text.append(context[field], style=style)

        return level_text


class ContextLogger:
    """Logger wrapper that collects keyword arguments into ``extra``.

    Example:
        logger.debug("Evicted entries", namespace="ns", keys=["a"])
    """

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def _log(self, level: int, msg: str, *args: Any, exc_info: bool = False, **fields: Any) -> None:
        if not self._logger.isEnabledFor(level):
            return
        extra = {**current_context(), **fields}
        self._logger.log(level, msg, *args, exc_info=exc_info, extra={"extra": extra})

    def debug(self, msg: str, *args: Any, **fields: Any) -> None:
        self._log(logging.DEBUG, msg, *args, **fields)

    def info(self, msg: str, *args: Any, **fields: Any) -> None:
        self._log(logging.INFO, msg, *args, **fields)

    def warning(self, msg: str, *args: Any, **fields: Any) -> None:
        self._log(logging.WARNING, msg, *args, **fields)

    def exception(self, msg: str, *args: Any, **fields: Any) -> None:
        """Log at ERROR with the active exception's traceback."""
        self._log(logging.ERROR, msg, *args, exc_info=True, **fields)


def setup_logging(
    log_level: str = "WARNING",
    log_file: Path | None = None,
    console_output: bool = True,
) -> None:
    """Route kvcache records to a rich console and/or a JSON Lines file.

    Replaces any handlers installed by a previous call.

    Args:
        log_level: Level for the kvcache logger and the console.
        log_file: JSON Lines file receiving every record that passes
            log_level. None disables file output.
        console_output: Whether to log to stderr through rich.
    """
    level = getattr(logging, log_level.upper())

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)
    for handler in root_logger.handlers:
        handler.close()
    root_logger.handlers.clear()

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)

    if console_output:
        rich_handler = ContextRichHandler(
            console=Console(stderr=True),
            show_time=True,
            show_path=False,
            rich_tracebacks=True,
        )
        rich_handler.setLevel(level)
        root_logger.addHandler(rich_handler)

    root_logger.propagate = False

    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


def get_logger(name: str) -> ContextLogger:
    """Get a context-aware logger under the kvcache hierarchy."""
    if not name.startswith(ROOT_LOGGER_NAME):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return ContextLogger(logging.getLogger(name))
