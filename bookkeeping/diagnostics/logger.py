"""
Structured Logging

Every significant action (ledger mutation, failed save, receipt scan,
best-effort fallback) is written as a structured log event.

DESIGN DECISION: Library modules only call structlog.get_logger(__name__).
The entry point (the Streamlit app) calls configure_logging() once, so the
processor chain and output format live in one place.
"""

import logging
import sys
from typing import IO, Optional

import structlog

_CONFIGURED = False


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
    stream: Optional[IO[str]] = None,
) -> None:
    """
    Configure structlog and the stdlib root logger.

    Safe to call more than once; only the first call takes effect
    unless reset_logging() is called in between.

    Args:
        level: Minimum level name (DEBUG, INFO, WARNING, ...)
        json_output: Render JSON lines instead of the console renderer
        stream: Where to write (defaults to stderr)
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stderr,
        level=numeric_level,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _CONFIGURED = True


def reset_logging() -> None:
    """Restore structlog defaults (used by tests)."""
    global _CONFIGURED
    structlog.reset_defaults()
    _CONFIGURED = False


def get_logger(name: str):
    """Get a structlog logger for a module."""
    return structlog.get_logger(name)
