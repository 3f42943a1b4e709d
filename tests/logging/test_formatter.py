import json
import logging

import pytest
from opentelemetry.sdk.trace import TracerProvider

from lightorm.logging.filters import ContextFilter
from lightorm.logging.logger import CustomJsonFormatter, setup_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="lightorm.connections.base",
        level=logging.DEBUG,
        pathname=__file__,
        lineno=20,
        msg="SQL statement executed",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_emits_json_with_extra_fields():
    payload = json.loads(CustomJsonFormatter().format(_record(row_count=3, connection="default")))

    assert payload["message"] == "SQL statement executed"
    assert payload["level"] == "DEBUG"
    assert payload["logger"] == "lightorm.connections.base"
    assert payload["row_count"] == 3
    assert payload["connection"] == "default"
    assert payload["db"] == {"connection": "default"}
    assert "trace_id" not in payload


def test_formatter_adds_trace_ids_inside_span():
    tracer = TracerProvider().get_tracer("lightorm.tests")

    with tracer.start_as_current_span("query") as span:
        payload = json.loads(CustomJsonFormatter().format(_record()))
        context = span.get_span_context()

    assert payload["trace_id"] == format(context.trace_id, "032x")
    assert payload["span_id"] == format(context.span_id, "016x")


def test_formatter_groups_db_fields():
    record = _record(**{"db.connection": "reporting", "db.duration_ms": 1.25, "db.row_count": 2})

    payload = json.loads(CustomJsonFormatter().format(record))

    assert payload["db"] == {"connection": "reporting", "duration_ms": 1.25, "row_count": 2}
    assert "db.row_count" not in payload


def test_formatter_fills_connection_from_logging_context():
    record = _record(**{"db.row_count": 1})
    record.connection = "audit"

    payload = json.loads(CustomJsonFormatter().format(record))

    assert payload["db"] == {"row_count": 1, "connection": "audit"}


def test_formatter_omits_db_for_unrelated_records():
    payload = json.loads(CustomJsonFormatter().format(_record(env_file=".env")))

    assert "db" not in payload
    assert payload["env_file"] == ".env"


@pytest.fixture
def restore_loggers():
    saved = {}
    for name in ("lightorm", "sqlalchemy.engine"):
        target = logging.getLogger(name)
        saved[name] = (target.level, list(target.handlers), target.propagate)
    yield
    for name, (level, handlers, propagate) in saved.items():
        target = logging.getLogger(name)
        target.setLevel(level)
        target.handlers = handlers
        target.propagate = propagate


def test_setup_logging_configures_lightorm_tree_only(restore_loggers):
    root_handlers = list(logging.getLogger().handlers)

    setup_logging("debug", sql_echo=True)

    package_logger = logging.getLogger("lightorm")
    assert package_logger.level == logging.DEBUG
    assert not package_logger.propagate
    assert isinstance(package_logger.handlers[0].formatter, CustomJsonFormatter)
    assert any(isinstance(f, ContextFilter) for f in package_logger.handlers[0].filters)
    assert logging.getLogger("sqlalchemy.engine").level == logging.INFO
    assert logging.getLogger().handlers == root_handlers
