"""Structured logging configuration.

Events are snake_case names with key/value context, e.g.
``certificate_request_submitted zone_tag=Default request_id=...``. Fields
that can carry credentials are masked before rendering.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, MutableMapping

import structlog

REDACTED = "***"
SENSITIVE_KEYS = frozenset({"api_key", "apikey", "tppl-api-key", "credentials", "password"})


def redact_credentials(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """structlog processor masking credential fields."""
    for key in event_dict:
        if key.lower() in SENSITIVE_KEYS:
            event_dict[key] = REDACTED
    return event_dict


def setup_logging(level: str = "INFO", log_format: str = "json") -> structlog.BoundLogger:
    """Set up structured logging for the connector."""
    log_level = getattr(logging, level.upper())
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        redact_credentials,
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # httpx logs every request line at INFO; the transport logs its own api_request events
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    return get_logger("cert_connector")


def get_logger(name: str | None = None, **context: Any) -> structlog.BoundLogger:
    """Get a logger bound to ``name`` and ``context``."""
    if name:
        context = {"logger": name, **context}
    return structlog.get_logger().bind(**context)
