"""
Structured logging for bulwark.

Boundaries report every failed attempt, recovery and exhausted call as a
structured event (``boundary_attempt_failed``, ``boundary_recovered``,
``boundary_exhausted``). This module configures structlog once for the
process so those events come out as JSON for log aggregation, or as a
readable console stream during development.

Output (JSON format)::

    {
      "@timestamp": "2026-10-18T10:00:00Z",
      "log.level": "warning",
      "service.name": "orders-api",
      "event": "boundary_exhausted",
      "boundary": "user-service",
      "attempts": 3,
      "category": "NETWORK"
    }

Examples:
    >>> from bulwark.core.logging import configure_logging
    >>> configure_logging(level="DEBUG", json_format=False)

    Driven by ``BULWARK_LOG_LEVEL`` / ``BULWARK_LOG_JSON``:

    >>> configure_logging_from_settings()
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

if TYPE_CHECKING:
    from bulwark.core.settings import BulwarkSettings


def _ecs_fields(service: str) -> Processor:
    """Rename to ECS keys (``@timestamp``, ``log.level``) and tag the service."""

    def processor(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service.name", service)
        if "timestamp" in event_dict:
            event_dict["@timestamp"] = event_dict.pop("timestamp")
        if "level" in event_dict:
            event_dict["log.level"] = event_dict.pop("level")
        return event_dict

    return processor


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "bulwark",
) -> None:
    """Configure structlog for boundary events.

    Args:
        level: Minimum level emitted (DEBUG shows every failed attempt)
        json_format: True for JSON, False for console, None for JSON unless stdout is a tty
        service: Value of ``service.name`` in JSON output
    """
    if json_format is None:
        json_format = not sys.stdout.isatty()

    numeric_level = getattr(logging, level.upper())
    processors: list[Processor] = [
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
    ]
    if json_format:
        processors += [_ecs_fields(service), structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=numeric_level)


def configure_logging_from_settings(settings: BulwarkSettings | None = None) -> None:
    """Configure logging from ``BULWARK_LOG_LEVEL`` / ``BULWARK_LOG_JSON``."""
    if settings is None:
        from bulwark.core.settings import BulwarkSettings

        settings = BulwarkSettings()
    configure_logging(level=settings.log_level, json_format=settings.log_json)


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger (usually ``get_logger(__name__)``)."""
    return structlog.get_logger(name)


__all__ = [
    "configure_logging",
    "configure_logging_from_settings",
    "get_logger",
]
