"""Logging configuration for the client and CLI."""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

# Attributes present on every LogRecord; anything else came from `extra`.
_RESERVED_ATTRS = set(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Format records as one JSON object per line, including extra fields."""

    def format(self, record: logging.LogRecord) -> str:
        data = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                data[key] = value
        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)
        return json.dumps(data, default=str)


def setup_logging(level: str = "INFO", json_format: bool = False) -> None:
    """Configure the learnworlds logger hierarchy.

    Args:
        level: Log level name
        json_format: Emit JSON lines instead of plain text
    """
    handler = logging.StreamHandler(sys.stderr)
    if json_format:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )

    root = logging.getLogger("learnworlds")
    root.handlers = [handler]
    root.setLevel(level)
    root.propagate = False


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger under the learnworlds namespace."""
    if not name:
        return logging.getLogger("learnworlds")
    if name.startswith("learnworlds"):
        return logging.getLogger(name)
    return logging.getLogger(f"learnworlds.{name}")
