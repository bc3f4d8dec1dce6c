"""JSONL formatter for the controller log."""

from __future__ import annotations

__all__ = ["ISO8601Formatter"]

import json
import logging
from datetime import datetime, timezone


class ISO8601Formatter(logging.Formatter):
    """One JSON object per record, led by an ISO 8601 UTC timestamp.

    Format: YYYY-MM-DDTHH:MM:SS.sssZ
    Example: {"time": "2025-12-04T10:48:37.123Z", "level": "INFO", "event": "server_started", ...}
    """

    def format(self, record: logging.LogRecord) -> str:
        """Serialize a record.

        Dict messages (ControllerEvent dumps) are merged into the entry;
        anything else becomes {"message": ...}. Values json cannot encode
        (paths, for instance) are written with str().
        """
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: dict[str, object] = {
            "time": created.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
        }
        if isinstance(record.msg, dict):
            entry.update(record.msg)
        else:
            entry["message"] = record.getMessage()
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)
