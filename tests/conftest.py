"""
Pytest fixtures for the import pipeline test suite.

Provides:
- Structured logging configured once per session, LogContext cleared per test
- captured_logs: suite log records as parsed JSON dicts
- Small hand-built entity schemas, independent of the packaged YAML
"""

import json
import logging
from io import StringIO

import pytest

from suite_config.schema import EntitySchema, FieldDescriptor, FieldKind
from suite_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG, stream=StringIO())
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture suite logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            session.preview()
            logs = captured_logs()
            assert any(r["message"] == "preview_computed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("suite")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Schema fixtures
# =============================================================================


@pytest.fixture
def contact_schema() -> EntitySchema:
    """Two required text fields, an enum with a default, and a number with a default."""
    return EntitySchema(
        name="contact",
        display_name="Contact",
        fields=(
            FieldDescriptor(key="name", label="Name", required=True, aliases=("full name",)),
            FieldDescriptor(key="email", label="Email", required=True, aliases=("e-mail", "email address")),
            FieldDescriptor(
                key="type",
                label="Type",
                kind=FieldKind.ENUM,
                enum_values=("customer", "vendor", "both"),
                default_value="customer",
            ),
            FieldDescriptor(
                key="outstandingBalance",
                label="Outstanding Balance",
                kind=FieldKind.NUMBER,
                default_value=0,
                aliases=("balance",),
            ),
        ),
        sample_csv="name,email,type,outstandingBalance\nJane,jane@example.com,customer,0",
    )


@pytest.fixture
def expense_schema() -> EntitySchema:
    """Date, number and boolean fields."""
    return EntitySchema(
        name="expense",
        display_name="Expense",
        fields=(
            FieldDescriptor(key="date", label="Date", kind=FieldKind.DATE, required=True),
            FieldDescriptor(key="amount", label="Amount", kind=FieldKind.NUMBER, required=True),
            FieldDescriptor(key="vendorName", label="Vendor", required=True, aliases=("payee",)),
            FieldDescriptor(
                key="recurring",
                label="Recurring",
                kind=FieldKind.BOOLEAN,
                default_value=False,
            ),
        ),
    )
