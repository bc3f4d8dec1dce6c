"""Logging utilities for labctl."""

from labctl.utils.logging.iso_formatter import ISO8601Formatter
from labctl.utils.logging.log_config import configure_logging, log_event, reset_logging

__all__ = [
    "ISO8601Formatter",
    "configure_logging",
    "log_event",
    "reset_logging",
]
