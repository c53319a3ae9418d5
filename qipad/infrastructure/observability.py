"""Structured Logging - one JSON line per record for the API and the cleanup command.

Invariants:
    - Every line carries timestamp, level, logger, message and the emitting
      component ("api" or "cleanup")
    - Qipad context fields (user_id, query_key, table, rows, ...) appear only
      when the call site passed them via extra=
    - setup_logging is idempotent: calling it again replaces the handler it
      installed earlier instead of stacking a second one

Design Decisions:
    - Plain stdlib logging with a custom Formatter; LOG_FORMAT=text switches
      to a single-line human format for local runs
"""

import json
import logging
from datetime import datetime, timezone

CONTEXT_FIELDS = (
    "user_id", "path", "method", "status_code", "error_code",
    "query_key", "action", "amount", "table", "rows",
)
_QUIET_LOGGERS = ("httpx", "httpcore")


class JSONFormatter(logging.Formatter):

    def __init__(self, component: str = "api"):
        super().__init__()
        self.component = component

    def format(self, record: logging.LogRecord) -> str:
        line = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "component": self.component,
            "logger": record.name,
            "message": record.getMessage(),
        }
        line.update(
            (key, record.__dict__[key]) for key in CONTEXT_FIELDS
            if record.__dict__.get(key) is not None
        )
        if record.exc_info:
            line["exception"] = self.formatException(record.exc_info)
        return json.dumps(line, ensure_ascii=False, default=str)


class _QipadHandler(logging.StreamHandler):
    """Marker type so setup_logging can find its own handler again."""


def setup_logging(level: str = "INFO", fmt: str = "json", component: str = "api"):
    root = logging.getLogger()
    for existing in [h for h in root.handlers if isinstance(h, _QipadHandler)]:
        root.removeHandler(existing)

    handler = _QipadHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter(component))
    else:
        handler.setFormatter(logging.Formatter(
            f"%(asctime)s %(levelname)s [{component}] %(name)s - %(message)s",
        ))
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    # request lines at INFO would double ApiClient's own failure logging
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
