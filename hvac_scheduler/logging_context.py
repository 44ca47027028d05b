"""Interaction ID logging context for tracing one gesture across modules.

Provides an interaction-aware logger that attaches a correlation ID to
every log message, so a single drag, click or wizard submission can be
followed from confirmation prompt through request to reconciliation.

Usage:
    from hvac_scheduler.logging_context import get_interaction_logger, set_interaction_id

    set_interaction_id("GESTURE-1a2b3c")
    logger = get_interaction_logger(__name__)
    logger.info("Moving appointment")  # record.interaction_id == "GESTURE-1a2b3c"
"""

import logging
import uuid
from contextvars import ContextVar

_interaction_id: ContextVar[str] = ContextVar("interaction_id", default="NO_INTERACTION")


def set_interaction_id(interaction_id: str) -> None:
    """Set the correlation ID for the current async context."""
    _interaction_id.set(interaction_id)


def get_interaction_id() -> str:
    """Retrieve the current correlation ID."""
    return _interaction_id.get()


def new_interaction_id(prefix: str) -> str:
    """Generate, set and return a fresh correlation ID like ``MOVE-9f3a1c``."""
    interaction_id = f"{prefix}-{uuid.uuid4().hex[:6]}"
    set_interaction_id(interaction_id)
    return interaction_id


class InteractionIdFilter(logging.Filter):
    """Injects interaction_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.interaction_id = _interaction_id.get()  # type: ignore[attr-defined]
        return True


def get_interaction_logger(name: str) -> logging.Logger:
    """Return a logger with the InteractionIdFilter attached.

    The filter adds ``interaction_id`` to each record so formatters can
    include ``%(interaction_id)s`` in their format string.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, InteractionIdFilter) for f in logger.filters):
        logger.addFilter(InteractionIdFilter())
    return logger
