"""Structured Logging - JSON log lines carrying tree-operation context.

Invariants:
    - Every line has timestamp, level, logger and message
    - node_id, parent_id, organization_id, operation, node_count and error_code are
      surfaced when a call passes them via `extra=`
    - setup_logging is idempotent: calling it again replaces its own handler

Design Decisions:
    - UUIDs and other non-JSON values are rendered with str(); numbers stay numbers
    - sqlalchemy.engine is pinned to WARNING so DEBUG tree logs stay readable
"""

import json
import logging
from datetime import datetime, timezone

_EXTRA_KEYS = (
    "node_id", "parent_id", "organization_id", "operation",
    "node_count", "error_code",
)
_HANDLER_NAME = "treestore"


def _jsonable(value: object) -> object:
    if isinstance(value, (bool, int, float)):
        return value
    return str(value)


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            (key, _jsonable(getattr(record, key)))
            for key in _EXTRA_KEYS
            if getattr(record, key, None) is not None
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Install the treestore handler on the root logger and return it."""
    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == _HANDLER_NAME]:
        root.removeHandler(existing)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(
        JSONFormatter() if fmt == "json"
        else logging.Formatter("%(asctime)s %(levelname)s %(name)s - %(message)s")
    )
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    return handler
