"""JSON logging utilities for the interview drills service.

Provides:
- `set_request_id` / `get_request_id` for the per-request correlation id
- `JSONFormatter` to render logs as single-line JSON with request context
- `configure_logging` to set up stdout logging with the JSON formatter
"""

import logging, sys, json, time
from contextvars import ContextVar

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)


def set_request_id(rid: str | None) -> None:
    """Set/clear the correlation request id used in log records."""
    _request_id.set(rid)


def get_request_id() -> str | None:
    return _request_id.get()


class JSONFormatter(logging.Formatter):
    """Format log records as compact JSON with timestamp and optional context."""

    def __init__(self, service: str | None = None) -> None:
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        """Serialize a `logging.LogRecord` to a JSON string.

        Includes: level, epoch timestamp (seconds, 3dp), logger name, message,
        the service name, the current `request_id`, any mapping passed as
        `extra={"fields": {...}}`, and exception info when present.
        """
        base = {
            "level": record.levelname,
            "ts": round(time.time(), 3),
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if self.service:
            base["service"] = self.service
        rid = get_request_id()
        if rid:
            base["request_id"] = rid
        fields = getattr(record, "fields", None)
        if isinstance(fields, dict):
            base.update(fields)
        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(base, ensure_ascii=False, default=str)


def configure_logging(level: int | str = "INFO", service: str | None = None) -> logging.Logger:
    """Configure root logging to stdout with the JSON formatter.

    Args:
        level: Logging level as int or string (e.g., logging.INFO or "INFO").
        service: Service name stamped on every record.

    Returns:
        A logger instance named "drills".
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter(service=service))
    logging.basicConfig(level=level, handlers=[handler], force=True)
    return logging.getLogger("drills")
