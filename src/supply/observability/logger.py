"""Structured JSON logging with walk_id support.

Uses structlog for structured logging with JSON output.
Every log entry emitted while a walk is in progress carries that walk's id.
"""

from __future__ import annotations

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Any

import structlog

# Context var for walk_id propagation
_walk_id: ContextVar[str] = ContextVar("walk_id", default="")

# Root handler installed by setup_logging
_handler: logging.Handler | None = None


def get_walk_id() -> str:
    """Get current walk ID from context ("" outside of a walk)."""
    return _walk_id.get()


def set_walk_id(walk_id: str) -> None:
    """Set walk ID in context."""
    _walk_id.set(walk_id)


def new_walk_id() -> str:
    """Generate and set a new walk ID."""
    wid = uuid.uuid4().hex[:12]
    _walk_id.set(wid)
    return wid


def _add_walk_id(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Structlog processor: add walk_id to entries logged inside a walk."""
    wid = get_walk_id()
    if wid:
        event_dict["walk_id"] = wid
    return event_dict


def setup_logging(
    level: str = "INFO",
    format: str = "json",
) -> None:
    """Configure structured logging for the application.

    Module loggers are plain ``logging`` loggers; their records are rendered
    through the same processor chain as structlog loggers, so both carry
    ``walk_id``.  Calling this again replaces the handler it installed.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        format: "json" for production, "console" for development.
    """
    global _handler

    log_level = getattr(logging, level.upper(), logging.INFO)

    shared: list[Any] = [
        structlog.contextvars.merge_contextvars,
        _add_walk_id,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    renderers: list[Any] = [structlog.stdlib.ProcessorFormatter.remove_processors_meta]
    if format == "json":
        renderers += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        renderers.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=renderers,
        )
    )

    root_logger = logging.getLogger()
    if _handler is not None:
        root_logger.removeHandler(_handler)
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)
    _handler = handler


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger for a module."""
    return structlog.get_logger(name)
