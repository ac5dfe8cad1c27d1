"""Tests for the structured logging system (suite_kernel/logging_config.py)."""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from suite_kernel.exceptions import FileTooLargeError
from suite_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


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


# ---------------------------------------------------------------------------
# StructuredFormatter tests
# ---------------------------------------------------------------------------


class TestStructuredFormatter:
    """Tests for JSON log output format."""

    def test_basic_json_output(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("hello")

        record = _parse_log(stream)
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "suite.test"
        assert "ts" in record

    def test_extra_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("preview_computed", extra={"valid_count": 2, "error_count": 1})

        record = _parse_log(stream)
        assert record["valid_count"] == 2
        assert record["error_count"] == 1

    def test_context_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        with LogContext.bind(session_id="s-1", entity="contact"):
            get_logger("test").info("test_msg")

        record = _parse_log(stream)
        assert record["session_id"] == "s-1"
        assert record["entity"] == "contact"

    def test_exception_fields(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        try:
            raise ValueError("boom")
        except ValueError:
            get_logger("test").error("failed", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_type"] == "ValueError"
        assert record["exc_message"] == "boom"
        assert "traceback" in record

    def test_suite_exception_fields_extracted(self):
        """Suite exceptions carry .code and structured attributes."""
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        try:
            raise FileTooLargeError("big.csv", 2048, 1024)
        except FileTooLargeError:
            get_logger("test").error("upload_error", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_code"] == "FILE_TOO_LARGE"
        assert record["exc_type"] == "FileTooLargeError"
        assert record["exc_filename"] == "big.csv"
        assert record["exc_size"] == 2048
        assert record["exc_max_size"] == 1024

    def test_no_context_fields_when_empty(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("bare_message")

        record = _parse_log(stream)
        assert "session_id" not in record
        assert "entity" not in record

    def test_non_json_values_serialized(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        uid = uuid4()
        get_logger("test").info(
            "typed_values",
            extra={
                "session": uid,
                "day": date(2025, 1, 15),
                "amount": Decimal("12.50"),
                "fields": frozenset({"email", "name"}),
            },
        )

        record = _parse_log(stream)
        assert record["session"] == str(uid)
        assert record["day"] == "2025-01-15"
        assert record["amount"] == "12.50"
        assert record["fields"] == ["email", "name"]

    def test_unknown_objects_fall_back_to_str(self):
        class Amount:
            def __str__(self):
                return "USD 5"

        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("odd_value", extra={"amount": Amount(), "tags": {Amount()}})

        record = _parse_log(stream)
        assert record["amount"] == "USD 5"
        assert record["tags"] == ["USD 5"]

    def test_valid_json_every_line(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("first")
        logger.warning("second", extra={"k": "v"})
        logger.debug("third")

        logs = _parse_all_logs(stream)
        # default level is INFO, so the debug line is dropped
        assert len(logs) == 2
        for record in logs:
            assert {"ts", "level", "logger", "message"} <= set(record)


# ---------------------------------------------------------------------------
# LogContext tests
# ---------------------------------------------------------------------------


class TestLogContext:
    """Tests for context propagation."""

    def test_get_all_empty_by_default(self):
        assert LogContext.get_all() == {}

    def test_clear(self):
        with LogContext.bind(session_id="x"):
            LogContext.clear()
            assert LogContext.get_all() == {}

    def test_bind_context_manager(self):
        with LogContext.bind(entity="contact"):
            with LogContext.bind(entity="invoice"):
                assert LogContext.get_all()["entity"] == "invoice"
            assert LogContext.get_all()["entity"] == "contact"

    def test_bind_restores_none(self):
        """bind() restores to None if there was no previous value."""
        assert "session_id" not in LogContext.get_all()
        with LogContext.bind(session_id="temp"):
            assert LogContext.get_all()["session_id"] == "temp"
        assert "session_id" not in LogContext.get_all()

    def test_bind_ignores_unknown_fields(self):
        with LogContext.bind(session_id="s", unknown="u"):
            assert LogContext.get_all() == {"session_id": "s"}

    def test_all_fields(self):
        with LogContext.bind(session_id="s", entity="e"):
            assert LogContext.get_all() == {"session_id": "s", "entity": "e"}


# ---------------------------------------------------------------------------
# configure_logging tests
# ---------------------------------------------------------------------------


class TestConfigureLogging:
    """Tests for initialization."""

    def test_idempotent(self):
        h1, _ = _make_handler()
        configure_logging(handler=h1)
        h2, _ = _make_handler()
        configure_logging(handler=h2)  # second call is no-op
        assert len(logging.getLogger("suite").handlers) == 1

    def test_get_logger_returns_child(self):
        assert get_logger("ingestion.import_session").name == "suite.ingestion.import_session"

    def test_logger_hierarchy(self):
        """Child loggers inherit the suite root config."""
        handler, stream = _make_handler()
        configure_logging(handler=handler, level=logging.DEBUG)
        get_logger("deep.nested.module").debug("hierarchy_test")

        record = _parse_log(stream)
        assert record["message"] == "hierarchy_test"
        assert record["logger"] == "suite.deep.nested.module"
