"""JSON-lines logging for the state reset engine.

Engine, gateway and registry records carry their context in an
``extra_fields`` dict (request id, mutation kind, change count, snapshot id,
node names). The formatter flattens those keys into one JSON object per line
next to a fixed envelope.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, TextIO

from pydantic import BaseModel

from state_reset.models.node import NodeDeclaration


def encode_log_value(value: Any) -> Any:
    """Fallback encoder for values json cannot serialize natively.

    Node declarations are logged by name and sets as sorted lists.
    Anything else falls back to repr.
    """
    if isinstance(value, NodeDeclaration):
        return value.name
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (set, frozenset)):
        return sorted(
            (encode_log_value(v) for v in value), key=lambda v: str(v)
        )
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    return repr(value)


class JsonFormatter(logging.Formatter):
    """Logging formatter that outputs one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {}

        extra_fields = getattr(record, "extra_fields", None)
        if isinstance(extra_fields, dict):
            entry.update(extra_fields)

        # The envelope always wins over context keys of the same name
        entry.update(
            timestamp=datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            level=record.levelname,
            logger=record.name,
            message=record.getMessage(),
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=encode_log_value)


def setup_logging(
    level: Optional[str] = None, stream: Optional[TextIO] = None
) -> logging.Handler:
    """Routes all logging through a single JSON-lines handler.

    Args:
        level: Log level override. Defaults to the LOG_LEVEL env var or INFO.
        stream: Where to write. Defaults to stdout.

    Returns:
        The installed handler.
    """
    log_level = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()

    root = logging.getLogger()
    root.setLevel(log_level)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JsonFormatter())

    # Replace earlier handlers so repeated setup doesn't duplicate lines
    for h in root.handlers[:]:
        root.removeHandler(h)
    root.addHandler(handler)
    return handler


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
