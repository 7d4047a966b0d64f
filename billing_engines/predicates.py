"""
Derived dues predicates.

One-field projections of ``compute_financials`` for callers that need a
single figure (sorting, filtering, badges).  Each call recomputes the whole
summary; callers that need several fields should call the engine once.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from decimal import Decimal

from billing_kernel.domain.clock import Clock
from billing_kernel.domain.records import Payment, Student
from billing_engines.dues import compute_financials


def get_due_amount(
    student: Student, payments: Iterable[Payment], *, clock: Clock | None = None
) -> Decimal:
    return compute_financials(student, payments, clock=clock).total_dues


def get_paid_until_date(
    student: Student, payments: Iterable[Payment], *, clock: Clock | None = None
) -> date | None:
    """Paid-through date, falling back to the admission date when unbilled."""
    paid_until = compute_financials(student, payments, clock=clock).paid_until
    if paid_until is None:
        return student.admission_date
    return paid_until


def get_days_due(
    student: Student, payments: Iterable[Payment], *, clock: Clock | None = None
) -> int:
    return compute_financials(student, payments, clock=clock).days_due


def get_overpaid(
    student: Student, payments: Iterable[Payment], *, clock: Clock | None = None
) -> Decimal:
    return compute_financials(student, payments, clock=clock).overpaid


def get_due_since(
    student: Student, payments: Iterable[Payment], *, clock: Clock | None = None
) -> date | None:
    return compute_financials(student, payments, clock=clock).due_since
