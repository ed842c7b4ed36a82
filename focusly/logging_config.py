"""
Structured logging for focusly, using structlog wrapping stdlib.

Events are key/value pairs. Values such as dates, instants and timezones
are rendered as ISO strings / zone names, so the same event reads the same
in console and JSON output.

Logs always go to a stream separate from command output (stderr by
default): the CLI prints its JSON results on stdout.

Environment:
    FOCUSLY_LOG_LEVEL   DEBUG, INFO (default), WARNING, ...
    FOCUSLY_LOG_FORMAT  "json" for one JSON object per line

Usage:
    from focusly.logging_config import get_logger, setup_logging

    setup_logging(verbose=args.verbose)
    logger = get_logger(__name__)
    logger.info("overdue_tasks_marked_failed", count=3, at=now)
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import date, datetime, tzinfo
from typing import Any, TextIO

import structlog


def _render_temporal(_logger: Any, _method: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Render date, datetime and tzinfo values as strings."""
    for key, value in event_dict.items():
        if isinstance(value, (date, datetime)):
            event_dict[key] = value.isoformat()
        elif isinstance(value, tzinfo):
            event_dict[key] = str(getattr(value, "key", None) or value)
    return event_dict


def setup_logging(
    level: str | None = None,
    json_output: bool | None = None,
    verbose: bool = False,
    stream: TextIO | None = None,
) -> None:
    """
    Configure structlog and the root logger.

    Args:
        level: Log level name; defaults to FOCUSLY_LOG_LEVEL, then INFO
        json_output: Render JSON lines; defaults to FOCUSLY_LOG_FORMAT=json
        verbose: Force DEBUG, overriding *level*
        stream: Where log lines go; defaults to stderr
    """
    if level is None:
        level = os.environ.get("FOCUSLY_LOG_LEVEL", "INFO")
    if verbose:
        level = "DEBUG"

    if json_output is None:
        json_output = os.environ.get("FOCUSLY_LOG_FORMAT", "").lower() == "json"

    numeric_level = getattr(logging, level.upper(), logging.INFO)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _render_temporal,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_output:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(numeric_level)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


__all__ = ["get_logger", "setup_logging"]
