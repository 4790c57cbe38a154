"""
Structured logging configuration.

- Development / testing: one coloured line per record
- Production: one JSON object per record
- Level: LOG_LEVEL env variable

Records are tagged with the workshop, pipeline stage and agent they belong
to. Inside a request the request id and workshop id are filled in by
RequestContextFilter; agent threads pass them explicitly via ``extra``.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone

from flask import g, has_request_context, request

REQUEST_KEYS = ("method", "path", "status", "duration_ms", "remote_addr", "request_id")
PIPELINE_KEYS = ("workshop_id", "stage", "agent")

NOISY_LOGGERS = ("urllib3", "werkzeug", "sqlalchemy.engine", "httpx", "httpcore", "anthropic", "openai")


class RequestContextFilter(logging.Filter):
    """Copy request id and workshop id onto records emitted while serving a request."""

    def filter(self, record: logging.LogRecord) -> bool:
        if has_request_context():
            if getattr(record, "request_id", None) is None:
                record.request_id = getattr(g, "request_id", None)
            if getattr(record, "workshop_id", None) is None:
                record.workshop_id = (request.view_args or {}).get("workshop_id")
        return True


class JSONFormatter(logging.Formatter):
    """One JSON document per record, for log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "thread": record.threadName,
        }
        for key in REQUEST_KEYS + PIPELINE_KEYS:
            value = getattr(record, key, None)
            if value is not None:
                entry[key] = value
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class ReadableFormatter(logging.Formatter):
    """Coloured single-line output for a terminal."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        tags = []
        workshop_id = getattr(record, "workshop_id", None)
        if isinstance(workshop_id, str):
            tags.append(f"ws={workshop_id[:8]}")
        for key in ("stage", "agent"):
            value = getattr(record, key, None)
            if value:
                tags.append(str(value))
        tag_str = f" [{' | '.join(tags)}]" if tags else ""

        duration = getattr(record, "duration_ms", None)
        dur_str = f" ({duration:.0f}ms)" if isinstance(duration, (int, float)) else ""

        color = self.LEVEL_COLORS.get(record.levelno, "")
        stamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        line = (
            f"{color}{stamp} {record.levelname:<8}{self.RESET} "
            f"{record.name}{tag_str}: {record.getMessage()}{dur_str}"
        )
        if record.exc_info and record.exc_info[0] is not None:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(app):
    """
    Install the root handler for the app.

    JSON when the app is neither in debug nor testing mode, readable otherwise.
    Safe to call once per create_app(); the previous root handlers are replaced.
    """
    testing = app.config.get("TESTING", False)
    use_json = not app.config.get("DEBUG", False) and not testing

    level_name = os.getenv("LOG_LEVEL", "INFO" if use_json else "DEBUG").upper()
    level = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if use_json else ReadableFormatter())
    handler.addFilter(RequestContextFilter())
    handler.setLevel(level)

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    app.logger.setLevel(level)

    if not testing:
        app.logger.info("Logging configured level=%s format=%s",
                        level_name, "json" if use_json else "readable")
