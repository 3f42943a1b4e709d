"""Logging filters for context injection.

This module provides filters that inject context variables into log records,
enabling correlation of statements with the request and the named
connection that issued them.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Any, Dict, Optional

from lightorm.__version__ import __version__

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
connection_var: ContextVar[Optional[str]] = ContextVar("connection", default=None)

_static_context: Dict[str, Any] = {}


class ContextFilter(logging.Filter):
    """Logging filter that adds context variables to log records.

    Static context (set once per process with :func:`set_logging_context`)
    is added first; per-request values from context variables follow.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """Add context variables to the log record.

        Args:
            record: Log record to enhance

        Returns:
            Always True (doesn't filter out any records)
        """
        for key, value in _static_context.items():
            setattr(record, key, value)

        setattr(record, "request_id", request_id_var.get())
        setattr(record, "connection", connection_var.get())
        setattr(record, "sdk_name", "lightorm")
        setattr(record, "sdk_version", __version__)

        return True


def set_logging_context(
    environment: Optional[str] = None,
    extra: Optional[Dict[str, Any]] = None,
) -> None:
    """Replace the static context attached to every record.

    Args:
        environment: Deployment environment name, omitted when None
        extra: Additional static key/value pairs
    """
    _static_context.clear()
    if environment is not None:
        _static_context["environment"] = environment
    if extra:
        _static_context.update(extra)


def set_request_context(
    request_id: Optional[str] = None,
    connection: Optional[str] = None,
) -> None:
    """Set request context variables."""
    if request_id is not None:
        request_id_var.set(request_id)
    if connection is not None:
        connection_var.set(connection)


def clear_request_context() -> None:
    """Clear all request context variables."""
    request_id_var.set(None)
    connection_var.set(None)
