"""Logging setup for the Kandinsky client and CLI.

Text logs by default, or one JSON object per line when ``structured`` is set.
Extra fields passed with ``extra=`` or through ``get_logger(**context)`` end up
in the JSON ``context`` object.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

from kandinsky.core.config.models import LoggingConfig

# Attributes every LogRecord has; anything else was attached as extra context.
_RECORD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}

_NOISY_LOGGERS = ("httpx", "httpcore", "asyncio")
_DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class StructuredJSONFormatter(logging.Formatter):
    """Render records as JSON lines.

    Format:
    {
        "level": "INFO",
        "message": "Task 3c7e... done after 3 status checks",
        "timestamp": "2026-01-29T12:00:00.000000+00:00",
        "context": {"logger_name": "...", "module": "...", "function": "...", "line": 42, ...}
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        context: dict[str, Any] = {
            "logger_name": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        context.update(
            (key, value)
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        )
        if record.exc_info and record.exc_info[0] is not None:
            context["error_type"] = record.exc_info[0].__name__
            context["error_message"] = str(record.exc_info[1])
            context["stack_trace"] = self.formatException(record.exc_info)

        return json.dumps(
            {
                "level": record.levelname,
                "message": record.getMessage(),
                "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
                "context": context,
            },
            default=str,
        )


def configure_logging(
    level: str = "INFO",
    format_string: str | None = None,
    filename: str | None = None,
    structured: bool = False,
) -> None:
    """Configure root logging; safe to call again to reconfigure.

    Args:
        level: Level name, case-insensitive
        format_string: Text log format (ignored when structured)
        filename: Log file path; stdout if None
        structured: Emit JSON lines instead of text

    Examples:
        >>> configure_logging(level="DEBUG")
        >>> configure_logging(structured=True, filename="kandinsky.jsonl")
    """
    handler: logging.Handler = (
        logging.FileHandler(filename) if filename else logging.StreamHandler(sys.stdout)
    )
    if structured:
        handler.setFormatter(StructuredJSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(format_string or _DEFAULT_FORMAT))

    logging.basicConfig(level=level.upper(), handlers=[handler], force=True)

    # Transport libraries log every connection at DEBUG.
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.ERROR)


def configure_logging_from_config(config: LoggingConfig, filename: str | None = None) -> None:
    configure_logging(
        level=config.level,
        format_string=config.format,
        filename=filename,
        structured=config.structured,
    )


def get_logger(name: str, **context: Any) -> logging.Logger | logging.LoggerAdapter:
    """Return a logger, wrapped in a LoggerAdapter when context is given.

    Example:
        >>> log = get_logger(__name__, task_uuid=handle.uuid)
    """
    logger = logging.getLogger(name)
    return logging.LoggerAdapter(logger, context) if context else logger
