"""
Structured logging for sqlpersist.

Manifesto:
    A persistence layer is where silent failures hurt most: a rollback
    that itself failed must leave a trace even though the caller only
    sees the original error. This module configures structlog so every
    transaction event is a structured record.

    - **Structures:** JSON output for log aggregation
    - **Flexes:** Console output for development, JSON for production
    - **Quiet by default:** Lifecycle events are DEBUG, failures are ERROR

Architecture:
    ::

        configure_logging(level=None, json_format=None, service="sqlpersist")
            ↓  (None → SQLPERSIST_LOG_LEVEL / SQLPERSIST_LOG_FORMAT via get_settings())
        structlog processor chain:
          1. TimeStamper (iso)
          2. merge_contextvars
          3. add_log_level / add_logger_name
          4. StackInfoRenderer / set_exc_info
          5. add_service_metadata
          6. JSONRenderer (log_format="json") or ConsoleRenderer ("console")

Examples:
    >>> from sqlpersist.core.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG", json_format=False)
    >>> logger = get_logger(__name__)
    >>> logger.debug("transaction_begun", manager_id=140221)

Tags:
    logging, structlog, observability, sqlpersist
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from .settings import get_settings

_SERVICE_NAME = "sqlpersist"


def _add_service_metadata(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add service-level metadata to all logs."""
    event_dict.setdefault("service.name", _SERVICE_NAME)
    return event_dict


def configure_logging(
    level: str | None = None,
    json_format: bool | None = None,
    service: str = "sqlpersist",
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR); overrides SQLPERSIST_LOG_LEVEL
        json_format: True for JSON, False for console; overrides SQLPERSIST_LOG_FORMAT
        service: Service name to include in logs
        add_timestamp: Include ISO timestamp in logs
    """
    global _SERVICE_NAME
    _SERVICE_NAME = service

    # Resolve configuration from args or settings
    if level is None or json_format is None:
        settings = get_settings()
        level = level or settings.log_level
        if json_format is None:
            json_format = settings.log_format == "json"

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _add_service_metadata,
    ]

    if add_timestamp:
        shared_processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper()),
    )


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger.

    Args:
        name: Logger name (usually __name__)
    """
    return structlog.get_logger(name)


__all__ = [
    "configure_logging",
    "get_logger",
]
