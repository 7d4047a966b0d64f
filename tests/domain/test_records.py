"""
Tests for record construction from the host's stored shape.
"""

from datetime import date, datetime, time, timezone
from decimal import Decimal

import pytest

from billing_kernel.domain.records import (
    FeeChange,
    Payment,
    Shift,
    Student,
    index_payments,
)
from billing_kernel.exceptions import (
    InvalidRecordDateError,
    InvalidShiftTimeError,
    RecordError,
)


class TestStudentFromDict:
    """camelCase storage records."""

    def test_full_record(self):
        student = Student.from_dict({
            "id": "s1",
            "name": "Asha",
            "rollNo": 17,
            "admissionDate": "2025-07-29",
            "monthlyFee": "650",
            "isActive": True,
            "assignedSeat": "A4",
            "shift": "shift2",
            "feeChanges": [{"date": "2025-10-22T13:10:32.657Z", "fee": 700}],
            "deactivatedAt": "2026-01-05T09:00:00Z",
        })

        assert student.admission_date == date(2025, 7, 29)
        assert student.monthly_fee == Decimal("650")
        assert student.roll_no == "17"
        assert student.assigned_seat == "A4"
        assert student.fee_changes[0].effective_date == date(2025, 10, 22)
        assert student.fee_changes[0].fee == Decimal("700")
        assert student.deactivated_at == datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)

    def test_admission_timestamp_truncated_to_date(self):
        student = Student.from_dict({"admissionDate": "2025-07-29T22:00:00Z"})

        assert student.admission_date == date(2025, 7, 29)

    def test_missing_fields(self):
        student = Student.from_dict({"id": "s2"})

        assert student.admission_date is None
        assert student.monthly_fee == Decimal("0")
        assert student.fee_changes == ()
        assert student.is_active is False
        assert student.assigned_seat is None

    @pytest.mark.parametrize("stored,expected", [
        ("false", False),
        ("true", True),
        (True, True),
        ("1", False),
    ])
    def test_is_active_from_stored_flag(self, stored, expected):
        """A form-saved "false" must not make the student billable."""
        student = Student.from_dict({"isActive": stored})

        assert student.is_active is expected

    def test_negative_fee_is_zero(self):
        assert Student.from_dict({"monthlyFee": -300}).monthly_fee == Decimal("0")

    def test_undated_fee_change_dropped(self):
        student = Student.from_dict({"feeChanges": [{"fee": 400}, {"date": "2025-02-01", "fee": 450}]})

        assert len(student.fee_changes) == 1
        assert student.fee_changes[0].fee == Decimal("450")

    def test_bad_date_raises(self):
        with pytest.raises(InvalidRecordDateError) as exc_info:
            Student.from_dict({"admissionDate": "29/07/2025"})

        assert exc_info.value.field_name == "admissionDate"
        assert exc_info.value.code == "INVALID_RECORD_DATE"
        assert isinstance(exc_info.value, RecordError)


class TestPayment:

    def test_from_dict(self):
        payment = Payment.from_dict({
            "id": "p1", "studentId": "s1", "amount": 450.5, "discount": "49.5",
            "date": "2025-03-01",
        })

        assert payment.amount == Decimal("450.5")
        assert payment.credit == Decimal("500.0")
        assert payment.date == date(2025, 3, 1)

    @pytest.mark.parametrize("raw", [None, "", "abc", float("nan"), True])
    def test_non_numeric_amount_is_zero(self, raw):
        assert Payment.from_dict({"amount": raw}).amount == Decimal("0")

    def test_index_payments(self):
        payments = [
            Payment(id=1, student_id="a", amount=Decimal("1")),
            Payment(id=2, student_id="b", amount=Decimal("2")),
            Payment(id=3, student_id="a", amount=Decimal("3")),
        ]

        grouped = index_payments(payments)

        assert [p.id for p in grouped["a"]] == [1, 3]
        assert [p.id for p in grouped["b"]] == [2]


class TestShift:

    def test_from_dict(self):
        shift = Shift.from_dict({"id": "n", "name": "Night", "startTime": "18:00", "endTime": "00:00"})

        assert shift.start_time == time(18, 0)
        assert shift.end_time == time(0, 0)
        assert shift.wraps_midnight is True

    def test_invalid_time(self):
        with pytest.raises(InvalidShiftTimeError) as exc_info:
            Shift.from_dict({"id": "m", "startTime": "6am", "endTime": "12:00"})

        assert exc_info.value.shift_id == "m"
        assert exc_info.value.field_name == "startTime"
        assert exc_info.value.value == "6am"


class TestFeeChange:

    def test_effective_date_from_timestamp(self):
        change = FeeChange(date=datetime(2025, 10, 22, 23, 30, tzinfo=timezone.utc), fee=Decimal("1"))

        assert change.effective_date == date(2025, 10, 22)

    def test_from_dict_undated(self):
        assert FeeChange.from_dict({"fee": 100}) is None
