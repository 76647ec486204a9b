"""structlog setup for kubetriage.

Every line is one JSON object on stderr with ``ts``, ``level``,
``component`` and ``event`` keys. Tracebacks attached with
``logger.exception`` or ``exc_info=True`` are rendered as a structured
``exception`` list, so the fatal lookup failure that ends the process is
still machine-readable.
"""

from __future__ import annotations

import logging
import sys

import structlog


def setup_logging(level: str = "info") -> None:
    """Install the JSON pipeline. *level* is one of debug/info/warning/error."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.dict_tracebacks,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(component: str) -> structlog.stdlib.BoundLogger:
    """Logger whose lines carry ``component=<component>``."""
    return structlog.get_logger(component=component)  # type: ignore[no-any-return]
