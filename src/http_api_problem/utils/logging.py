"""Logging helpers for problem events.

Library modules log through :func:`get_logger`, which hands out Structlog
loggers. Applications call :func:`configure_logging` once at startup to
render both Structlog events and standard library records as JSON lines,
with sensitive keys masked at any nesting depth. Problem documents are
logged whole, so extension members such as ``token`` are scrubbed too.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Iterable, Mapping
from typing import Any, Callable

import structlog

from http_api_problem.config.settings import LoggingSettings

MASK = "***"

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_ATTRIBUTES = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }
)


def scrub(value: Any, fields: frozenset[str]) -> Any:
    """Return ``value`` with every mapping key listed in ``fields`` masked.

    Keys compare case-insensitively; ``fields`` must already be lower case.
    """
    if isinstance(value, Mapping):
        return {
            key: MASK if str(key).lower() in fields else scrub(item, fields)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [scrub(item, fields) for item in value]
    return value


def _lowered(fields: Iterable[str] | None) -> frozenset[str]:
    return frozenset(field.lower() for field in fields or ())


def _resolve_level(level: int | str | None) -> int:
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        return resolved if isinstance(resolved, int) else logging.INFO
    if isinstance(level, int):
        return level
    return logging.INFO


class JsonFormatter(logging.Formatter):
    """Formats standard library records as single line JSON objects."""

    def __init__(self, *, scrub_fields: Iterable[str] | None = None) -> None:
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%S%z")
        self._scrub_fields = _lowered(scrub_fields)

    def format(self, record: logging.LogRecord) -> str:
        extra = {
            key: value for key, value in record.__dict__.items() if key not in _RECORD_ATTRIBUTES
        }
        payload: dict[str, Any] = {
            **scrub(extra, self._scrub_fields),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "time": self.formatTime(record, self.datefmt),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, sort_keys=True, default=str)


def scrubbing_processor(
    scrub_fields: Iterable[str] | None,
) -> Callable[[Any, str, dict[str, Any]], dict[str, Any]]:
    """Create a Structlog processor masking sensitive keys in event dicts."""
    fields = _lowered(scrub_fields)

    def processor(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        return scrub(event_dict, fields)

    return processor


def configure_logging(
    level: int | str | None = None,
    *,
    settings: LoggingSettings | None = None,
) -> None:
    """Route Structlog events and standard library records to stdout as JSON.

    Args:
        level: Logging level or level name; ignored when ``settings`` is given.
        settings: Logging settings providing the level and the scrubbed keys.
    """
    scrub_fields: Iterable[str] | None = None
    if settings is not None:
        level = settings.level
        scrub_fields = settings.scrub_fields
    level_value = _resolve_level(level)
    formatter = JsonFormatter(scrub_fields=scrub_fields)

    # pytest's capture handlers stay installed so caplog keeps working.
    handlers: list[logging.Handler] = []
    for existing in logging.getLogger().handlers:
        if type(existing).__module__.startswith("_pytest."):
            existing.setFormatter(formatter)
            handlers.append(existing)
    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(formatter)
    handlers.append(stdout_handler)
    logging.basicConfig(level=level_value, handlers=handlers, force=True)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            scrubbing_processor(scrub_fields),
            structlog.processors.JSONRenderer(sort_keys=True),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level_value),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> Any:
    """Return the Structlog logger used for events emitted under ``name``."""
    return structlog.get_logger(name)


__all__ = ["JsonFormatter", "configure_logging", "get_logger", "scrub", "scrubbing_processor"]
