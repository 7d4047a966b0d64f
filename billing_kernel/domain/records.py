"""
Records -- read-only Student, Payment, FeeChange and Shift inputs.

Responsibility:
    Immutable views of the records the host application owns.  The engines
    read these and never mutate them.  ``from_dict`` constructors accept the
    host's camelCase storage shape (``admissionDate``, ``monthlyFee``,
    ``studentId`` ...) and normalize it: amounts to ``Decimal``, dates to
    ``date``/``datetime``.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Failure modes:
    - InvalidRecordDateError when a non-empty date field cannot be parsed.
    - InvalidShiftTimeError when a shift time is not ``HH:MM``.
    Missing fields are not errors: they become None / zero and the dues
    engine degrades to its zero summary.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Iterable, Mapping

from billing_kernel.domain.dates import parse_datetime, parse_hhmm, to_date
from billing_kernel.domain.values import ZERO, coerce_amount, coerce_fee, coerce_flag
from billing_kernel.exceptions import InvalidRecordDateError, InvalidShiftTimeError

RecordId = str | int


def _parse(data: Mapping[str, Any], key: str) -> datetime | date | None:
    value = data.get(key)
    try:
        return parse_datetime(value)
    except (TypeError, ValueError) as exc:
        raise InvalidRecordDateError(key, value) from exc


@dataclass(frozen=True)
class FeeChange:
    """
    "From this moment on, the monthly fee is ``fee``."

    ``date`` keeps whatever precision the host stored (usually a UTC
    timestamp); the engine compares on ``effective_date``.
    """

    date: datetime | date
    fee: Decimal

    @property
    def effective_date(self) -> date:
        return to_date(self.date)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FeeChange | None:
        """Build from ``{"date": ..., "fee": ...}``; None when undated."""
        when = _parse(data, "date")
        if when is None:
            return None
        return cls(date=when, fee=coerce_fee(data.get("fee")))


@dataclass(frozen=True)
class Student:
    """
    A library member as far as billing is concerned.

    Billing fields:
        admission_date: anchor of every billing cycle (date-only).
        monthly_fee: current fee; also the base rate from admission.
        fee_changes: fee timeline entries, oldest first.
        is_active: inactive students are never billed.
        deactivated_at: freezes the evaluation ceiling when set.

    Host fields used by seat and alert surfaces:
        assigned_seat, shift, name, roll_no.
    """

    id: RecordId | None
    admission_date: date | None
    monthly_fee: Decimal = ZERO
    fee_changes: tuple[FeeChange, ...] = ()
    is_active: bool = True
    deactivated_at: datetime | date | None = None
    assigned_seat: str | None = None
    shift: str | None = None
    name: str = ""
    roll_no: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Student:
        changes = []
        for raw in data.get("feeChanges") or ():
            change = FeeChange.from_dict(raw)
            if change is not None:
                changes.append(change)

        return cls(
            id=data.get("id"),
            admission_date=to_date(_parse(data, "admissionDate")),
            monthly_fee=coerce_fee(data.get("monthlyFee")),
            fee_changes=tuple(changes),
            is_active=coerce_flag(data.get("isActive")),
            deactivated_at=_parse(data, "deactivatedAt"),
            assigned_seat=data.get("assignedSeat") or None,
            shift=data.get("shift") or None,
            name=data.get("name") or "",
            roll_no=str(data.get("rollNo") or ""),
        )


@dataclass(frozen=True)
class Payment:
    """
    Money collected from (or forgiven for) a student.

    ``amount`` is cash actually received; ``discount`` is waived but still
    counts toward dues.  Their sum is the payment's credit.
    """

    id: RecordId | None
    student_id: RecordId | None
    amount: Decimal = ZERO
    discount: Decimal = ZERO
    date: datetime | date | None = None

    @property
    def credit(self) -> Decimal:
        return self.amount + self.discount

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Payment:
        return cls(
            id=data.get("id"),
            student_id=data.get("studentId"),
            amount=coerce_amount(data.get("amount")),
            discount=coerce_amount(data.get("discount")),
            date=_parse(data, "date"),
        )


@dataclass(frozen=True)
class Shift:
    """A daily seat time slot; ``start_time > end_time`` wraps midnight."""

    id: str
    name: str
    start_time: time
    end_time: time

    @property
    def wraps_midnight(self) -> bool:
        return self.start_time >= self.end_time

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Shift:
        shift_id = data.get("id")
        times: dict[str, time] = {}
        for key in ("startTime", "endTime"):
            try:
                times[key] = parse_hhmm(data.get(key))
            except ValueError as exc:
                raise InvalidShiftTimeError(shift_id, key, data.get(key)) from exc
        return cls(
            id=shift_id,
            name=data.get("name") or "",
            start_time=times["startTime"],
            end_time=times["endTime"],
        )


def index_payments(payments: Iterable[Payment]) -> dict[RecordId | None, list[Payment]]:
    """Group payments by ``student_id`` for batch evaluation."""
    grouped: dict[RecordId | None, list[Payment]] = {}
    for payment in payments:
        grouped.setdefault(payment.student_id, []).append(payment)
    return grouped
