"""Structured logging configuration with structlog.

Call ``configure_logging`` once from ``create_app``; modules then use
``structlog.get_logger(__name__)`` and log events with key/value context::

    log = structlog.get_logger(__name__)
    log.warning("image_url_unresolvable", path=path)

Development renders colored console lines, every other environment JSON.
"""

from __future__ import annotations

import logging
from uuid import uuid4

import structlog
from structlog.typing import Processor


def _level(name: str) -> int:
    return getattr(logging, (name or "INFO").upper(), logging.INFO)


def configure_logging(*, environment: str = "production", level: str = "INFO") -> None:
    shared: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if environment == "development":
        final: Processor = structlog.dev.ConsoleRenderer(colors=True)
    else:
        final = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=shared + [final],
        wrapper_class=structlog.make_filtering_bound_logger(_level(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def bind_request_context(request_id: str | None = None, **values) -> str:
    """Start a fresh logging context for one request and return its id."""
    rid = request_id or str(uuid4())
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=rid, **values)
    return rid
