"""Logging package."""

from bookkeeping.diagnostics.logger import configure_logging, get_logger, reset_logging

__all__ = ["configure_logging", "get_logger", "reset_logging"]
