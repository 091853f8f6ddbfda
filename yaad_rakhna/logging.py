from __future__ import annotations

import json
import logging

from .config import Settings

# Attributes the skill attaches through ``extra=``; only those set on a record are emitted.
CONTEXT_FIELDS = (
    "conversation_id",
    "user_id",
    "intent",
    "state",
    "tier",
    "operation",
    "latency_ms",
    "error_category",
    "error",
)


class JsonFormatter(logging.Formatter):
    """One JSON object per record, Devanagari kept readable."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - short
        payload = {
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
            "event_type": getattr(record, "event_type", record.getMessage()),
        }
        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                payload[name] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, ensure_ascii=False)


class ContextFormatter(logging.Formatter):
    """Plain lines with the attached context appended as ``key=value`` pairs."""

    def __init__(self) -> None:
        super().__init__("%(asctime)s %(levelname)s %(name)s %(message)s", datefmt="%H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        pairs = [
            f"{name}={getattr(record, name)}"
            for name in CONTEXT_FIELDS
            if getattr(record, name, None) is not None
        ]
        return f"{line} {' '.join(pairs)}" if pairs else line


def configure_logging(level: str | int | None = None, settings: Settings | None = None) -> None:
    """Configure the root logger from ``LOG_LEVEL`` and ``LOG_FORMAT``.

    ``level`` overrides the configured level; ``LOG_FORMAT=json`` switches to
    one JSON object per line.
    """

    settings = settings or Settings()
    handler = logging.StreamHandler()
    if settings.log_format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(ContextFormatter())
    logging.basicConfig(level=level or settings.log_level.upper(), handlers=[handler], force=True)
