from __future__ import annotations

from datetime import datetime, timezone
import json
import logging
import sys
from typing import Any

from netdiag.redaction import redact_text


_EXTRA_FIELDS = (
    "event",
    "target",
    "attempt",
    "port",
    "strategy",
    "error_kind",
    "latency_ms",
    "status",
    "check",
)


class RedactingFilter(logging.Filter):
    """Masks credentials in the message and in string `extra` fields."""

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            record.msg = redact_text(record.getMessage())
            record.args = ()
            for field_name in _EXTRA_FIELDS:
                value = getattr(record, field_name, None)
                if isinstance(value, str):
                    setattr(record, field_name, redact_text(value))
        except Exception:
            # Redaction must never drop a record.
            return True
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field_name in _EXTRA_FIELDS:
            value = getattr(record, field_name, None)
            if value is not None:
                payload[field_name] = value
        if record.exc_info:
            payload["exception"] = redact_text(self.formatException(record.exc_info))
        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(level: str = "INFO", stream: Any = None) -> None:
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(JsonFormatter())
    handler.addFilter(RedactingFilter())
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
