"""Tests for the structured logging system (ledger_kernel/logging_config.py)."""

import json
import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from io import StringIO

import pytest

from ledger_kernel.exceptions import ClosedPeriodError
from ledger_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)
from ledger_kernel.models.account import AccountKind


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


def _make_handler() -> tuple[logging.Handler, StringIO]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    return handler, stream


def _parse_log(stream: StringIO) -> dict:
    """Parse the first JSON log line from a stream."""
    line = stream.getvalue().strip().split("\n")[0]
    return json.loads(line)


def _parse_all_logs(stream: StringIO) -> list[dict]:
    lines = stream.getvalue().strip().split("\n")
    return [json.loads(line) for line in lines if line]


class TestStructuredFormatter:
    """Tests for JSON log output format."""

    def test_basic_json_output(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("hello")

        record = _parse_log(stream)
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "ledger_kernel.test"
        assert "ts" in record

    def test_extra_fields_serialised(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info(
            "entry_created",
            extra={
                "amount": Decimal("500.00"),
                "entry_date": date(2025, 3, 1),
                "closed_at": datetime(2025, 6, 15, 12, tzinfo=timezone.utc),
                "kind": AccountKind.EXPENSE,
            },
        )

        record = _parse_log(stream)
        assert record["amount"] == "500.00"
        assert record["entry_date"] == "2025-03-01"
        assert record["closed_at"] == "2025-06-15T12:00:00+00:00"
        assert record["kind"] == "EXPENSE"

    def test_context_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        LogContext.set(correlation_id="abc-123", ledger_file="acme.ledger", period_id=3)
        get_logger("test").info("test_msg")

        record = _parse_log(stream)
        assert record["correlation_id"] == "abc-123"
        assert record["ledger_file"] == "acme.ledger"
        assert record["period_id"] == 3

    def test_ledger_exception_payload_extracted(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        try:
            raise ClosedPeriodError(7, "Exercice 2024")
        except ClosedPeriodError:
            get_logger("test").error("period_error", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_type"] == "ClosedPeriodError"
        assert record["exc_code"] == "PERIOD_CLOSED"
        assert record["exc_period_id"] == 7
        assert record["exc_period_name"] == "Exercice 2024"
        assert "traceback" in record

    def test_no_context_fields_when_empty(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("bare_message")

        record = _parse_log(stream)
        assert "correlation_id" not in record
        assert "entry_id" not in record

    def test_level_threshold(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("first")
        logger.warning("second")
        logger.debug("third")

        assert [r["message"] for r in _parse_all_logs(stream)] == ["first", "second"]


class TestLogContext:
    def test_set_and_get(self):
        LogContext.set(correlation_id="x", actor="alice")
        assert LogContext.get_all() == {"correlation_id": "x", "actor": "alice"}

    def test_unknown_fields_ignored(self):
        LogContext.set(correlation_id="x", colour="blue")
        assert LogContext.get_all() == {"correlation_id": "x"}

    def test_clear(self):
        LogContext.set(correlation_id="x")
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_bind_restores_previous_value(self):
        LogContext.set(entry_id=1)
        with LogContext.bind(entry_id=2):
            assert LogContext.get_all()["entry_id"] == 2
        assert LogContext.get_all()["entry_id"] == 1

    def test_bind_restores_none(self):
        with LogContext.bind(period_id=5):
            assert LogContext.get_all()["period_id"] == 5
        assert "period_id" not in LogContext.get_all()


class TestConfigureLogging:
    def test_idempotent(self):
        h1, _ = _make_handler()
        configure_logging(handler=h1)
        h2, _ = _make_handler()
        configure_logging(handler=h2)

        handlers = logging.getLogger("ledger_kernel").handlers
        assert h1 in handlers
        assert h2 not in handlers

    def test_get_logger_returns_child(self):
        assert get_logger("services.journal").name == "ledger_kernel.services.journal"

    def test_logger_hierarchy(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler, level=logging.DEBUG)
        get_logger("deep.nested.module").debug("hierarchy_test")

        record = _parse_log(stream)
        assert record["logger"] == "ledger_kernel.deep.nested.module"
