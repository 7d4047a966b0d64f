"""
Module: billing_engines.alerts
Responsibility:
    Roll the dues engine up across the whole roster: which students fall
    due in the coming days, which fell due recently, which are long
    overdue, and which have been overdue long enough to deactivate.  Also
    the outstanding-dues overview used for the dashboard and reminder
    lists.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Reads "today" once from the injected clock so that every student in a
    report is evaluated against the same date.

Invariants enforced:
    - Inactive students never appear in any alert list.
    - Thresholds are inclusive: ``days_due >= threshold``.
    - Deterministic ordering: lists are sorted on explicit keys with the
      student id as the final tie-breaker.

Failure modes:
    - ValueError when a threshold or window is negative, or the highlight
      threshold exceeds the deactivation threshold.
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal

from billing_kernel.domain.clock import Clock, SystemClock
from billing_kernel.domain.records import Payment, Student, index_payments
from billing_kernel.domain.values import ZERO
from billing_kernel.logging_config import LogContext, get_logger
from billing_engines.dues import FinancialSummary, compute_financials
from billing_engines.tracer import traced_engine

logger = get_logger("engines.alerts")

DEFAULT_ALERT_WINDOW_DAYS = 7
DEFAULT_HIGHLIGHT_THRESHOLD_DAYS = 90
DEFAULT_DEACTIVATION_THRESHOLD_DAYS = 120


@dataclass(frozen=True)
class StudentDues:
    """A student paired with their summary as of the report date."""

    student: Student
    financials: FinancialSummary

    @property
    def days_left(self) -> int | None:
        """Days from the evaluation ceiling to ``paid_until`` (negative once past)."""
        if self.financials.paid_until is None or self.financials.limit_date is None:
            return None
        return (self.financials.paid_until - self.financials.limit_date).days


@dataclass(frozen=True)
class DuesAlerts:
    """
    Alert lists for one report date.

    Attributes:
        as_of: report date.
        upcoming_due: paid through a day in (as_of, as_of + window],
            soonest first.
        recently_due: paid through a day in [as_of - window, as_of),
            most recent first.
        long_due: days_due >= highlight threshold, longest first.
        auto_deactivate: days_due >= deactivation threshold, longest first.
    """

    as_of: date
    upcoming_due: tuple[StudentDues, ...]
    recently_due: tuple[StudentDues, ...]
    long_due: tuple[StudentDues, ...]
    auto_deactivate: tuple[StudentDues, ...]

    @property
    def deactivation_ids(self) -> tuple:
        return tuple(entry.student.id for entry in self.auto_deactivate)


@dataclass(frozen=True)
class DuesOverview:
    """
    Outstanding dues across active students.

    Attributes:
        as_of: report date.
        total_outstanding: sum of ``total_dues``.
        debtors: students with dues, largest balance first (ties: longer
            overdue first, then id).
    """

    as_of: date
    total_outstanding: Decimal
    debtors: tuple[StudentDues, ...]

    @property
    def debtor_count(self) -> int:
        return len(self.debtors)

    def overdue_at_least(self, days: int) -> tuple[StudentDues, ...]:
        """Debtors overdue ``days`` or more, longest first."""
        matching = [d for d in self.debtors if d.financials.days_due >= days]
        return tuple(sorted(matching, key=_longest_overdue_first))


def _longest_overdue_first(entry: StudentDues) -> tuple[int, str]:
    return (-entry.financials.days_due, str(entry.student.id))


def _validate_thresholds(window_days: int, highlight_days: int, deactivation_days: int) -> None:
    if window_days < 0:
        raise ValueError("window_days cannot be negative")
    if highlight_days < 0 or deactivation_days < 0:
        raise ValueError("thresholds cannot be negative")
    if highlight_days > deactivation_days:
        raise ValueError("highlight threshold cannot exceed deactivation threshold")


def _report_context(report: str, as_of: date):
    """Tie a report's per-student records together unless the host already did."""
    correlation_id = LogContext.get("correlation_id") or f"{report}:{as_of.isoformat()}"
    return LogContext.bind(correlation_id=correlation_id)


def _evaluate(
    students: Iterable[Student],
    payments: Iterable[Payment],
    as_of: date,
) -> list[StudentDues]:
    by_student = index_payments(payments)
    return [
        StudentDues(
            student=student,
            financials=compute_financials(
                student, by_student.get(student.id, ()), as_of=as_of
            ),
        )
        for student in students
        if student.is_active
    ]


def is_deactivation_eligible(
    student: Student,
    payments: Iterable[Payment],
    *,
    threshold_days: int = DEFAULT_DEACTIVATION_THRESHOLD_DAYS,
    clock: Clock | None = None,
) -> bool:
    """Active and overdue for at least ``threshold_days`` days."""
    if not student.is_active:
        return False
    return compute_financials(student, payments, clock=clock).days_due >= threshold_days


@traced_engine("alerts", "1.0", fingerprint_fields=("students", "payments"))
def build_dues_alerts(
    students: Sequence[Student],
    payments: Sequence[Payment],
    *,
    clock: Clock | None = None,
    window_days: int = DEFAULT_ALERT_WINDOW_DAYS,
    highlight_days: int = DEFAULT_HIGHLIGHT_THRESHOLD_DAYS,
    deactivation_days: int = DEFAULT_DEACTIVATION_THRESHOLD_DAYS,
) -> DuesAlerts:
    """
    Build the alert lists for the current day.

    Students frozen by a deactivation timestamp are evaluated at that
    timestamp (as the engine always does), but window membership is
    measured from the report date.
    """
    _validate_thresholds(window_days, highlight_days, deactivation_days)
    t0 = time.monotonic()
    as_of = (clock or SystemClock()).today()
    window = timedelta(days=window_days)

    with _report_context("dues-alerts", as_of):
        evaluated = _evaluate(students, payments, as_of)

        upcoming = []
        recent = []
        long_due = []
        deactivate = []
        for entry in evaluated:
            fin = entry.financials
            if fin.paid_until is not None:
                if as_of < fin.paid_until <= as_of + window:
                    upcoming.append(entry)
                elif as_of - window <= fin.paid_until < as_of:
                    recent.append(entry)
            if fin.days_due >= highlight_days:
                long_due.append(entry)
            if fin.days_due >= deactivation_days:
                deactivate.append(entry)

        upcoming.sort(key=lambda e: (e.financials.paid_until, str(e.student.id)))
        recent.sort(key=lambda e: (-e.financials.paid_until.toordinal(), str(e.student.id)))
        long_due.sort(key=_longest_overdue_first)
        deactivate.sort(key=_longest_overdue_first)

        alerts = DuesAlerts(
            as_of=as_of,
            upcoming_due=tuple(upcoming),
            recently_due=tuple(recent),
            long_due=tuple(long_due),
            auto_deactivate=tuple(deactivate),
        )

        logger.info("dues_alerts_built", extra={
            "as_of": as_of.isoformat(),
            "student_count": len(evaluated),
            "upcoming_count": len(upcoming),
            "recent_count": len(recent),
            "long_due_count": len(long_due),
            "deactivate_count": len(deactivate),
            "duration_ms": round((time.monotonic() - t0) * 1000, 2),
        })
        return alerts


@traced_engine("alerts", "1.0", fingerprint_fields=("students", "payments"))
def summarize_outstanding(
    students: Sequence[Student],
    payments: Sequence[Payment],
    *,
    clock: Clock | None = None,
) -> DuesOverview:
    """Total outstanding dues and the ranked debtor list."""
    as_of = (clock or SystemClock()).today()
    with _report_context("outstanding", as_of):
        debtors = [e for e in _evaluate(students, payments, as_of) if e.financials.is_in_arrears]
        debtors.sort(key=lambda e: (
            -e.financials.total_dues,
            -e.financials.days_due,
            str(e.student.id),
        ))
        total = sum((e.financials.total_dues for e in debtors), ZERO)

        logger.info("outstanding_summarized", extra={
            "as_of": as_of.isoformat(),
            "debtor_count": len(debtors),
            "total_outstanding": str(total),
        })
        return DuesOverview(as_of=as_of, total_outstanding=total, debtors=tuple(debtors))
