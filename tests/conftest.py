"""
Pytest fixtures for the billing test suite.

Provides:
- Deterministic clocks pinned to a calendar day
- Student / payment / shift factories
- Structured log capture
"""

import json
import logging
import time
from datetime import date, datetime, timezone
from decimal import Decimal
from io import StringIO
from zoneinfo import ZoneInfo

import pytest

from billing_kernel.domain.clock import DeterministicClock
from billing_kernel.domain.records import FeeChange, Payment, Shift, Student
from billing_kernel.domain.dates import parse_hhmm
from billing_kernel.logging_config import (
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
    configure_logging(level=logging.DEBUG)
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
    Capture billing_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            compute_financials(student, payments, as_of=day)
            logs = captured_logs()
            assert any(r["message"] == "financials_computed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("billing_kernel")
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
# Clock fixtures
# =============================================================================


@pytest.fixture
def clock_on():
    """Factory: ``clock_on(date(2025, 3, 1), hour=9)``."""

    def _make(day: date, hour: int = 12, minute: int = 0) -> DeterministicClock:
        return DeterministicClock.on(day, hour=hour, minute=minute)

    return _make


@pytest.fixture
def deterministic_clock():
    return DeterministicClock(datetime(2025, 3, 15, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def kolkata_local_time(monkeypatch):
    """Pin the process-local timezone to Asia/Kolkata (UTC+05:30)."""
    if not hasattr(time, "tzset"):
        pytest.skip("process timezone cannot be changed on this platform")
    monkeypatch.setenv("TZ", "Asia/Kolkata")
    time.tzset()
    yield ZoneInfo("Asia/Kolkata")
    monkeypatch.undo()
    time.tzset()


# =============================================================================
# Record factories
# =============================================================================


@pytest.fixture
def make_student():
    """Factory for active students with sensible billing defaults."""

    def _make(
        id: str = "stu-1",
        admission_date: date | None = date(2025, 1, 10),
        monthly_fee: str | Decimal = "500",
        fee_changes: list[tuple] = (),
        **overrides,
    ) -> Student:
        changes = tuple(
            FeeChange(date=when, fee=Decimal(str(fee))) for when, fee in fee_changes
        )
        fields = dict(
            id=id,
            admission_date=admission_date,
            monthly_fee=Decimal(str(monthly_fee)),
            fee_changes=changes,
            is_active=True,
        )
        fields.update(overrides)
        return Student(**fields)

    return _make


@pytest.fixture
def make_payment():
    """Factory for payments; amounts given as strings or ints."""
    counter = {"n": 0}

    def _make(
        amount="500",
        discount="0",
        student_id: str = "stu-1",
        paid_on: date | None = None,
    ) -> Payment:
        counter["n"] += 1
        return Payment(
            id=f"pay-{counter['n']}",
            student_id=student_id,
            amount=Decimal(str(amount)),
            discount=Decimal(str(discount)),
            date=paid_on,
        )

    return _make


@pytest.fixture
def standard_shifts() -> list[Shift]:
    """Morning / Evening / Night as shipped in the default policy."""
    return [
        Shift("shift1", "Morning", parse_hhmm("06:00"), parse_hhmm("12:00")),
        Shift("shift2", "Evening", parse_hhmm("12:00"), parse_hhmm("18:00")),
        Shift("shift3", "Night", parse_hhmm("18:00"), parse_hhmm("00:00")),
    ]
