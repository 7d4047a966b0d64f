"""
Tests for the single-field dues predicates.
"""

from datetime import date
from decimal import Decimal

import pytest

from billing_engines.dues import compute_financials
from billing_engines.predicates import (
    get_days_due,
    get_due_amount,
    get_due_since,
    get_overpaid,
    get_paid_until_date,
)


@pytest.fixture
def clock(clock_on):
    return clock_on(date(2025, 4, 15))


class TestProjections:
    """Each predicate matches the corresponding summary field."""

    def test_student_in_arrears(self, make_student, make_payment, clock):
        student = make_student(admission_date=date(2025, 1, 10))
        payments = [make_payment("500")]

        assert get_due_amount(student, payments, clock=clock) == Decimal("1500")
        assert get_paid_until_date(student, payments, clock=clock) == date(2025, 2, 9)
        assert get_days_due(student, payments, clock=clock) == 65
        assert get_due_since(student, payments, clock=clock) == date(2025, 2, 10)
        assert get_overpaid(student, payments, clock=clock) == Decimal("0")

    def test_overpaid_student(self, make_student, make_payment, clock):
        student = make_student(admission_date=date(2025, 4, 1))
        payments = [make_payment("1200")]

        assert get_overpaid(student, payments, clock=clock) == Decimal("700")
        assert get_due_amount(student, payments, clock=clock) == Decimal("0")
        assert get_due_since(student, payments, clock=clock) is None
        assert get_days_due(student, payments, clock=clock) == 0

    def test_agree_with_engine(self, make_student, make_payment, clock):
        student = make_student(fee_changes=[(date(2025, 2, 20), "650")])
        payments = [make_payment("900")]
        summary = compute_financials(student, payments, clock=clock)

        assert get_due_amount(student, payments, clock=clock) == summary.total_dues
        assert get_days_due(student, payments, clock=clock) == summary.days_due


class TestPaidUntilFallback:
    """Unbilled students report their admission date."""

    def test_inactive_student(self, make_student, clock):
        student = make_student(admission_date=date(2025, 1, 10), is_active=False)

        assert get_paid_until_date(student, [], clock=clock) == date(2025, 1, 10)

    def test_zero_fee_student(self, make_student, clock):
        student = make_student(admission_date=date(2025, 2, 1), monthly_fee="0")

        assert get_paid_until_date(student, [], clock=clock) == date(2025, 2, 1)
