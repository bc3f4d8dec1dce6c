"""Controller logging configuration.

Owns the labctl logger configuration (handlers, formatters).
Other modules never touch handlers; they call log_event() with a
ControllerEvent and this module decides where it goes:

- stderr: WARNING and above, one readable line per event
- controller.jsonl: INFO and above, one JSON object per event
"""

from __future__ import annotations

__all__ = [
    "configure_logging",
    "log_event",
    "reset_logging",
]

import logging
from pathlib import Path

from labctl.constants import APP_NAME
from labctl.models import ControllerEvent
from labctl.utils.logging.iso_formatter import ISO8601Formatter

_logger = logging.getLogger(APP_NAME)
_logger.setLevel(logging.INFO)
_logger.propagate = False

_file_log_path: Path | None = None


class _ConsoleFormatter(logging.Formatter):
    """Render structured events as `level: message` for the terminal."""

    def format(self, record: logging.LogRecord) -> str:
        if isinstance(record.msg, dict):
            text = record.msg.get("message") or record.msg.get("event", "")
        else:
            text = record.getMessage()
        return f"{record.levelname.lower()}: {text}"


def _install_stderr_only() -> None:
    # The interactive menu owns stdout; only problems reach stderr.
    for handler in list(_logger.handlers):
        _logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(logging.WARNING)
    console.setFormatter(_ConsoleFormatter())
    _logger.addHandler(console)


if not _logger.handlers:
    _install_stderr_only()


def configure_logging(log_path: Path) -> None:
    """Attach the JSONL file handler to the controller logger.

    Only the first successful call has an effect. If the log directory
    cannot be created or the file cannot be opened, a warning goes to
    stderr and the CLI carries on without a file log.

    Args:
        log_path: Path to the JSONL controller log.
    """
    global _file_log_path

    if _file_log_path is not None:
        return

    _install_stderr_only()

    try:
        log_path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
    except OSError as e:
        log_event(
            logging.WARNING,
            ControllerEvent(
                event="file_logging_failed",
                message=f"Controller log unavailable at {log_path}",
                path=str(log_path),
                error_type=type(e).__name__,
                error_message=str(e),
            ),
        )
        return

    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(ISO8601Formatter())
    _logger.addHandler(file_handler)
    _file_log_path = log_path


def reset_logging() -> None:
    """Drop the file handler and restore stderr-only logging."""
    global _file_log_path

    _install_stderr_only()
    _file_log_path = None


def log_event(level: int, event: ControllerEvent) -> None:
    """Log a ControllerEvent at the given level.

    None fields are left out of the record; the formatters add the
    timestamp and level.

    Args:
        level: logging.INFO, logging.WARNING, ...
        event: The event to record.
    """
    _logger.log(level, event.model_dump(exclude_none=True))
