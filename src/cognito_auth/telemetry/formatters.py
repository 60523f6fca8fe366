"""Log formatters for console and JSONL output.

Both accept structured dict messages ({"event": ..., "message": ..., ...})
as well as plain strings.
"""

from __future__ import annotations

__all__ = [
    "ConsoleFormatter",
    "ISO8601Formatter",
    "utc_timestamp",
]

import json
import logging
from datetime import datetime, timezone


def utc_timestamp(created: float) -> str:
    """Epoch seconds as "YYYY-MM-DDTHH:MM:SS.sssZ" (UTC, millisecond precision)."""
    moment = datetime.fromtimestamp(created, tz=timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


class ConsoleFormatter(logging.Formatter):
    """Single-line stderr output, "LEVEL [event]: message"."""

    def format(self, record: logging.LogRecord) -> str:
        payload = record.msg
        if not isinstance(payload, dict):
            return f"{record.levelname}: {record.getMessage()}"

        event = payload.get("event")
        text = payload.get("message") or event or ""
        if event and text != event:
            return f"{record.levelname} [{event}]: {text}"
        return f"{record.levelname}: {text}"


class ISO8601Formatter(logging.Formatter):
    """JSON Lines output with "time" and "level" leading each entry.

    Example line:
        {"time": "2025-12-04T10:48:37.123Z", "level": "WARNING", "event": "...", ...}
    """

    def format(self, record: logging.LogRecord) -> str:
        if isinstance(record.msg, dict):
            payload = record.msg
        else:
            payload = {"message": record.getMessage()}

        entry = {"time": utc_timestamp(record.created), "level": record.levelname}
        entry.update(payload)
        return json.dumps(entry, default=str)
