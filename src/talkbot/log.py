"""Structured logging setup using structlog."""

from __future__ import annotations

import logging
import sys
from contextlib import AbstractContextManager

import structlog


def setup_logging(level: str = "INFO", fmt: str = "console") -> None:
    """Configure structlog.

    ``fmt`` selects the final renderer: ``console`` for humans, ``json`` for
    log shippers. Everything goes to stderr.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    renderer: structlog.types.Processor
    if fmt == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a named logger instance."""
    return structlog.get_logger(name)


def bind_turn(bot_id: str, user_id: str, conversation_id: str) -> AbstractContextManager:
    """Attach turn identifiers to every log line emitted inside the block."""
    return structlog.contextvars.bound_contextvars(
        bot_id=bot_id,
        user_id=user_id,
        conversation_id=conversation_id,
    )
