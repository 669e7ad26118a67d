"""TradeBoost — Structured JSON Logging.

Every module logs through a child of the ``tradeboost`` logger. The JSON
handler is attached once, to that parent, and children propagate to it.
"""

import json
import logging
import sys
from datetime import datetime, timezone

from tradeboost.config import settings

ROOT_LOGGER = "tradeboost"

# Context passed via ``extra=`` that is copied into the log line
EXTRA_FIELDS = ("user_id", "provider", "endpoint", "duration_ms", "status_code")


class JSONFormatter(logging.Formatter):
    """One JSON object per line: timestamp, level, logger, message, context."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            {key: getattr(record, key) for key in EXTRA_FIELDS if hasattr(record, key)}
        )
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def _configure_root() -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER)
    if not any(isinstance(h.formatter, JSONFormatter) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JSONFormatter())
        root.addHandler(handler)
        root.propagate = False
    root.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    return root


def get_logger(name: str) -> logging.Logger:
    """Logger ``tradeboost.<name>``, writing JSON lines to stdout."""
    _configure_root()
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
