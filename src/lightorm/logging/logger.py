"""Structured logging for lightorm.

Records are rendered as one JSON object per line. Statement and transaction
records carry ``db.*`` extras (connection name, system, duration, row
count, transaction depth); the formatter folds them into a nested ``db``
object so log pipelines can index them as one field. Configuration stays
declarative through ``logging.config.dictConfig``.
"""

from __future__ import annotations

import json
import logging
import logging.config
from datetime import datetime, timezone
from typing import Any, Dict, FrozenSet, Optional

from opentelemetry import trace

DB_FIELD_PREFIX = "db."

_RESERVED_LOG_RECORD_KEYS: FrozenSet[str] = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"asctime", "message"}


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class CustomJsonFormatter(logging.Formatter):
    """JSON formatter for database logs.

    Output fields:
        - timestamp, level, logger, message
        - db: nested object built from ``db.*`` extras; ``db.connection``
          falls back to the connection bound in the logging context
        - trace_id/span_id of the active OpenTelemetry span (the
          ``lightorm.connection.query`` span for statement records)
        - any other non-standard record attribute, unchanged
        - exception: formatted traceback when the record carries one
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        db_fields: Dict[str, Any] = {}
        for key, value in record.__dict__.items():
            if key in _RESERVED_LOG_RECORD_KEYS:
                continue
            if key.startswith(DB_FIELD_PREFIX):
                db_fields[key[len(DB_FIELD_PREFIX):]] = value
            else:
                payload[key] = value

        bound_connection: Optional[str] = getattr(record, "connection", None)
        if db_fields or bound_connection:
            db_fields.setdefault("connection", bound_connection)
            payload["db"] = db_fields

        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            payload["trace_id"] = trace.format_trace_id(span_context.trace_id)
            payload["span_id"] = trace.format_span_id(span_context.span_id)

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


def setup_logging(level: str = "INFO", sql_echo: bool = False) -> None:
    """Route ``lightorm`` logs to stdout as JSON.

    Only the ``lightorm`` logger tree is configured; application loggers
    are left as they are.

    Args:
        level: Level for the ``lightorm`` loggers (DEBUG shows every statement)
        sql_echo: Also emit SQLAlchemy's own statement log through the same handler
    """
    level = level.upper()

    loggers: Dict[str, Any] = {
        "lightorm": {
            "level": level,
            "handlers": ["lightorm_console"],
            "propagate": False,
        },
    }
    if sql_echo:
        loggers["sqlalchemy.engine"] = {
            "level": "INFO",
            "handlers": ["lightorm_console"],
            "propagate": False,
        }

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "lightorm_json": {"()": "lightorm.logging.logger.CustomJsonFormatter"},
        },
        "filters": {
            "lightorm_context": {"()": "lightorm.logging.filters.ContextFilter"},
        },
        "handlers": {
            "lightorm_console": {
                "class": "logging.StreamHandler",
                "formatter": "lightorm_json",
                "filters": ["lightorm_context"],
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": loggers,
    })
