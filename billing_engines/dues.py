"""
Module: billing_engines.dues
Responsibility:
    The billing-cycle / dues engine.  Given a student (admission date,
    monthly fee, fee timeline, deactivation) and their payments, compute how
    many monthly cycles are paid, the date the student is paid through,
    the outstanding balance or overpayment, and how long the account has
    been in arrears.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import billing_kernel.domain (and sibling engine modules).

Invariants enforced:
    - Purity: the only time source is the injected ``Clock`` (or an explicit
      ``as_of`` date).  Identical inputs always produce identical outputs;
      nothing is memoized between calls.
    - Decimal-only arithmetic for all amounts.
    - At most one of ``total_dues`` and ``overpaid`` is non-zero.
    - Termination: the cycle walk stops after ``max_cycles`` cycles (1200,
      i.e. 100 years) and reports ``cycle_cap_reached`` when it does.

Billing model:
    Cycles recur on the admission day-of-month.  A month too short for the
    anchor day clamps the boundary to its last day; a clamped boundary is
    itself the last paid day of the cycle it closes, otherwise the last
    paid day is the boundary minus one day.  Each cycle is priced at the
    fee in effect on its start date.  Credit (amount + discount over all
    payments) is consumed cycle by cycle to find ``paid_until``; separately,
    every cycle starting on or before the evaluation ceiling is billed.
    Both walks share one pass over the cycle sequence but stop
    independently.

Failure modes:
    - None for structurally valid records.  Missing admission date, zero
      fee or an inactive student yields ``FinancialSummary.zero()``.

Usage:
    from billing_engines.dues import compute_financials
    from billing_kernel.domain.clock import DeterministicClock

    summary = compute_financials(student, payments, clock=DeterministicClock.on(day))
    summary.total_dues, summary.paid_until, summary.days_due
"""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from billing_kernel.domain.clock import Clock, SystemClock
from billing_kernel.domain.dates import (
    ONE_DAY,
    days_inclusive,
    next_anchor_boundary,
    to_date,
)
from billing_kernel.domain.records import FeeChange, Payment, Student
from billing_kernel.domain.values import ZERO
from billing_kernel.logging_config import LogContext, get_logger
from billing_engines.tracer import traced_engine

logger = get_logger("engines.dues")

MAX_BILLING_CYCLES = 1200


# ============================================================================
# Value Objects
# ============================================================================


@dataclass(frozen=True)
class FeeRate:
    """One step of the piecewise-constant fee timeline."""

    effective_date: date
    fee: Decimal


@dataclass(frozen=True)
class FeeTimeline:
    """
    Monthly fee as a function of date.

    Contract:
        Built from a student's fee changes plus a synthetic admission-date
        entry carrying ``monthly_fee``.  Entries are ordered by effective
        date; on equal dates the admission entry comes first and explicit
        changes keep their recorded order, so an explicit change dated on
        the admission day overrides the base rate.
    Guarantees:
        - ``fee_on(d)`` is the fee of the last entry effective on or
          before ``d``; dates before every entry get the earliest fee.
    """

    rates: tuple[FeeRate, ...]
    _dates: tuple[date, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.rates:
            raise ValueError("FeeTimeline needs at least one rate")
        object.__setattr__(self, "_dates", tuple(r.effective_date for r in self.rates))

    @classmethod
    def for_student(cls, student: Student) -> FeeTimeline:
        return cls.build(student.admission_date, student.monthly_fee, student.fee_changes)

    @classmethod
    def build(
        cls,
        admission_date: date,
        monthly_fee: Decimal,
        fee_changes: Iterable[FeeChange] = (),
    ) -> FeeTimeline:
        keyed = [(admission_date, 0, FeeRate(admission_date, monthly_fee))]
        keyed.extend(
            (change.effective_date, 1, FeeRate(change.effective_date, change.fee))
            for change in fee_changes
        )
        # sorted() is stable: same-day explicit changes keep recorded order
        keyed.sort(key=lambda item: (item[0], item[1]))
        return cls(rates=tuple(rate for _, _, rate in keyed))

    def fee_on(self, day: date) -> Decimal:
        idx = bisect_right(self._dates, day)
        return self.rates[max(idx - 1, 0)].fee


@dataclass(frozen=True)
class BillingCycle:
    """
    One anchor-day billing cycle.

    Attributes:
        index: 0 for the admission cycle.
        start: first day of the cycle.
        next_start: first day of the following cycle.
        adjusted: ``next_start`` was clamped to a month end.
        fee: fee in effect on ``start``.
    """

    index: int
    start: date
    next_start: date
    adjusted: bool
    fee: Decimal

    @property
    def paid_through(self) -> date:
        """Last day covered when this cycle is paid."""
        if self.adjusted:
            return self.next_start
        return self.next_start - ONE_DAY


@dataclass(frozen=True)
class FinancialSummary:
    """
    A student's billing position as of the evaluation ceiling.

    Contract:
        Transient derived view, recomputed on every call; never persisted.
    Guarantees:
        - ``total_dues >= 0`` and ``overpaid >= 0``, never both positive.
        - ``due_since`` is set iff ``total_dues > 0``; then
          ``days_due >= 1`` counts ``due_since`` itself as day one.
        - ``amount_paid`` is total credit (amount + discount).
    Diagnostics:
        limit_date: the evaluation ceiling used.
        cycle_cap_reached: the cycle walk was truncated at the safety cap;
            the figures are then a lower bound, not an answer.
    """

    total_dues: Decimal
    paid_until: date | None
    amount_paid: Decimal
    overpaid: Decimal
    due_since: date | None
    days_due: int
    paid_months: int
    limit_date: date | None = None
    cycle_cap_reached: bool = False

    @classmethod
    def zero(cls) -> FinancialSummary:
        """The summary for students that are not billed at all."""
        return cls(
            total_dues=ZERO,
            paid_until=None,
            amount_paid=ZERO,
            overpaid=ZERO,
            due_since=None,
            days_due=0,
            paid_months=0,
        )

    @property
    def is_in_arrears(self) -> bool:
        return self.total_dues > ZERO

    @property
    def is_overpaid(self) -> bool:
        return self.overpaid > ZERO

    def to_dict(self) -> dict[str, Any]:
        """Host-application shape: camelCase keys, ISO dates."""
        return {
            "totalDues": self.total_dues,
            "paidUntil": self.paid_until.isoformat() if self.paid_until else None,
            "amountPaid": self.amount_paid,
            "overpaid": self.overpaid,
            "dueSince": self.due_since.isoformat() if self.due_since else None,
            "daysDue": self.days_due,
            "paidMonths": self.paid_months,
        }


# ============================================================================
# Building blocks
# ============================================================================


def is_billable(student: Student | None) -> bool:
    """Active, with an admission date and a non-zero monthly fee."""
    return bool(
        student is not None
        and student.admission_date is not None
        and student.monthly_fee
        and student.is_active
    )


def total_credit(student: Student, payments: Iterable[Payment]) -> Decimal:
    """Sum of ``amount + discount`` over the student's payments."""
    return sum(
        (p.credit for p in payments if p.student_id == student.id),
        ZERO,
    )


def resolve_limit_date(
    student: Student,
    clock: Clock | None = None,
    as_of: date | None = None,
) -> date:
    """
    The evaluation ceiling.

    A deactivation timestamp freezes the ceiling wherever it lies, even in
    the future.  Otherwise ``as_of`` if given, else the clock's today.
    """
    if student.deactivated_at is not None:
        return to_date(student.deactivated_at)
    if as_of is not None:
        return as_of
    return (clock or SystemClock()).today()


def iter_billing_cycles(
    admission_date: date,
    timeline: FeeTimeline,
) -> Iterator[BillingCycle]:
    """Endless sequence of cycles from admission; callers bound it."""
    anchor_day = admission_date.day
    start = admission_date
    index = 0
    while True:
        boundary = next_anchor_boundary(start, anchor_day)
        yield BillingCycle(
            index=index,
            start=start,
            next_start=boundary.start,
            adjusted=boundary.adjusted,
            fee=timeline.fee_on(start),
        )
        start = boundary.start
        index += 1


# ============================================================================
# Engine
# ============================================================================


@traced_engine("dues", "1.0", fingerprint_fields=("student", "payments", "as_of"))
def compute_financials(
    student: Student | None,
    payments: Iterable[Payment],
    *,
    clock: Clock | None = None,
    as_of: date | None = None,
    max_cycles: int = MAX_BILLING_CYCLES,
) -> FinancialSummary:
    """
    Compute a student's dues position.

    Args:
        student: The student record (None is allowed and yields zero).
        payments: Payments for any students; only this student's count.
        clock: Time source for "today" (defaults to the system clock).
        as_of: Explicit evaluation date; overrides ``clock``.  A
            deactivation timestamp on the student overrides both.
        max_cycles: Safety cap on cycles walked.

    Returns:
        FinancialSummary; ``FinancialSummary.zero()`` for non-billable
        students.
    """
    if not is_billable(student):
        return FinancialSummary.zero()

    limit_date = resolve_limit_date(student, clock, as_of)
    with LogContext.bind(student_id=student.id):
        return _settle(student, payments, limit_date, max_cycles)


def _settle(
    student: Student,
    payments: Iterable[Payment],
    limit_date: date,
    max_cycles: int,
) -> FinancialSummary:
    """Walk the cycles of a billable student up to ``limit_date``."""
    admission_date = student.admission_date
    credit = total_credit(student, payments)
    timeline = FeeTimeline.for_student(student)

    remaining = credit
    paid_months = 0
    paid_until = admission_date - ONE_DAY
    expected = ZERO

    consuming = True
    accruing = True
    cap_reached = False

    for cycle in iter_billing_cycles(admission_date, timeline):
        if not (consuming or accruing):
            break
        if cycle.index >= max_cycles:
            cap_reached = True
            break

        if consuming:
            if cycle.fee <= ZERO or remaining < cycle.fee:
                consuming = False
            else:
                remaining -= cycle.fee
                paid_months += 1
                paid_until = cycle.paid_through

        if accruing:
            if cycle.start > limit_date:
                accruing = False
            else:
                expected += cycle.fee

    if cap_reached:
        logger.warning("cycle_cap_reached", extra={
            "max_cycles": max_cycles,
            "still_consuming": consuming,
            "still_accruing": accruing,
            "credit": str(credit),
            "limit_date": limit_date.isoformat(),
        })

    outstanding = expected - credit
    total_dues = outstanding if outstanding > ZERO else ZERO
    overpaid = -outstanding if outstanding < ZERO else ZERO

    due_since: date | None = None
    days_due = 0
    if total_dues > ZERO:
        candidate = paid_until + ONE_DAY
        if candidate <= limit_date:
            due_since = candidate
            days_due = days_inclusive(candidate, limit_date)
        else:
            # First unpaid day is still ahead of the ceiling: not in arrears
            logger.debug("future_due_date_suppressed", extra={
                "due_since": candidate.isoformat(),
                "limit_date": limit_date.isoformat(),
                "suppressed_dues": str(total_dues),
            })
            total_dues = ZERO

    summary = FinancialSummary(
        total_dues=total_dues,
        paid_until=paid_until,
        amount_paid=credit,
        overpaid=overpaid,
        due_since=due_since,
        days_due=days_due,
        paid_months=paid_months,
        limit_date=limit_date,
        cycle_cap_reached=cap_reached,
    )

    logger.debug("financials_computed", extra={
        "limit_date": limit_date.isoformat(),
        "expected": str(expected),
        "credit": str(credit),
        "total_dues": str(total_dues),
        "overpaid": str(overpaid),
        "paid_months": paid_months,
        "days_due": days_due,
    })

    return summary


def residual_balance_at(
    student: Student,
    payments: Iterable[Payment],
    at: datetime | date,
    *,
    max_cycles: int = MAX_BILLING_CYCLES,
) -> FinancialSummary:
    """
    Settle an account as of a deactivation moment.

    Inactive students are never billed, so their balance must be captured
    when they are deactivated.  This evaluates the student as if still
    active with the ceiling frozen at ``at``.
    """
    frozen = replace(student, is_active=True, deactivated_at=at)
    return compute_financials(frozen, payments, max_cycles=max_cycles)
