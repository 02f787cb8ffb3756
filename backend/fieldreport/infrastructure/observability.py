"""Structured Logging: JSON / text formatters that carry storage context.

Invariants:
    - Every record has timestamp, level, logger and message
    - Storage context passed via extra= (project_id, logical_key, physical_key,
      error_code, operation, path, used_bytes) is emitted when present, in both formats
    - setup_logging() installs exactly one application handler, however often it runs

Design Decisions:
    - Stdlib logging only; modules log through logging.getLogger(__name__)
    - sqlalchemy.engine is held at WARNING unless the app itself runs at DEBUG
"""

import logging
import json
from datetime import datetime, timezone

EXTRA_FIELDS: tuple[str, ...] = (
    "project_id", "logical_key", "physical_key", "error_code",
    "operation", "path", "used_bytes",
)

_HANDLER_NAME = "fieldreport"


def _record_extras(record: logging.LogRecord) -> dict:
    return {
        key: record.__dict__[key]
        for key in EXTRA_FIELDS
        if record.__dict__.get(key) is not None
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_record_extras(record),
        }
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


class ContextTextFormatter(logging.Formatter):
    """Human-readable lines with storage context appended as key=value."""

    def __init__(self):
        super().__init__("%(asctime)s %(levelname)s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = _record_extras(record)
        if extras:
            line += " [" + " ".join(f"{k}={v}" for k, v in extras.items()) + "]"
        return line


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Install (or replace) the application handler on the root logger."""
    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            root.removeHandler(existing)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(JSONFormatter() if fmt == "json" else ContextTextFormatter())
    root.addHandler(handler)

    resolved = getattr(logging, level.upper(), logging.INFO)
    root.setLevel(resolved)
    logging.getLogger("sqlalchemy.engine").setLevel(
        resolved if resolved <= logging.DEBUG else logging.WARNING,
    )
    return handler
