"""
Module: billing_engines.seat_status
Responsibility:
    Classify a seat for the seat map: free, occupied by a student whose
    shift has already ended today, or occupied and coloured by the
    occupant's billing position (overpaid / due / paid).

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Reads "now" from the
    injected clock only.

Invariants enforced:
    - Shift completion takes precedence over billing state: a seat is free
      for the day once its occupant's slot is over, whatever they owe.
    - Overpaid takes precedence over due (they are mutually exclusive in
      a well-formed summary, so this only fixes the check order).
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from billing_kernel.domain.clock import Clock, SystemClock
from billing_kernel.domain.dates import minutes_of_day
from billing_kernel.domain.records import Payment, Shift, Student
from billing_kernel.logging_config import LogContext, get_logger
from billing_engines.dues import FinancialSummary, compute_financials

logger = get_logger("engines.seat_status")


class SeatStatus(str, Enum):
    """Seat map states."""

    AVAILABLE = "available"
    SHIFT_DONE = "shift-done"
    OVERPAID = "overpaid"
    DUE = "due"
    PAID = "paid"


@dataclass(frozen=True)
class SeatOccupancy:
    """Result of resolving a seat; ``student`` is None when available."""

    status: SeatStatus
    student: Student | None = None
    financials: FinancialSummary | None = None


def find_shift(shift_id: str | None, shifts: Iterable[Shift]) -> Shift | None:
    for shift in shifts:
        if shift.id == shift_id:
            return shift
    return None


def is_shift_complete(
    student: Student,
    shifts: Iterable[Shift],
    now: datetime,
) -> bool:
    """
    Has the student's shift ended for today?

    Minute precision.  A same-day shift (start before end) is complete once
    ``now`` is strictly past its end.  A shift whose end is at or before its
    start wraps midnight; it is complete from its end until its next start.
    A student without a known shift is never complete.
    """
    shift = find_shift(student.shift, shifts)
    if shift is None:
        return False

    now_mins = minutes_of_day(now)
    start_mins = minutes_of_day(shift.start_time)
    end_mins = minutes_of_day(shift.end_time)

    if start_mins < end_mins:
        return now_mins > end_mins
    return end_mins <= now_mins < start_mins


def find_occupant(seat_id: str, students: Iterable[Student]) -> Student | None:
    """First active student assigned to ``seat_id``."""
    for student in students:
        if student.is_active and student.assigned_seat == seat_id:
            return student
    return None


def resolve_seat_status(
    seat_id: str,
    students: Iterable[Student],
    payments: Sequence[Payment],
    shifts: Sequence[Shift],
    *,
    clock: Clock | None = None,
) -> SeatOccupancy:
    """
    Classify one seat.

    Returns:
        SeatOccupancy with AVAILABLE when no active student holds the seat;
        otherwise SHIFT_DONE, OVERPAID, DUE or PAID in that precedence,
        together with the occupant and their financial summary.
    """
    with LogContext.bind(seat_id=seat_id):
        occupant = find_occupant(seat_id, students)
        if occupant is None:
            logger.debug("seat_status_resolved", extra={
                "status": SeatStatus.AVAILABLE.value,
            })
            return SeatOccupancy(status=SeatStatus.AVAILABLE)

        clock = clock or SystemClock()
        financials = compute_financials(occupant, payments, clock=clock)

        if is_shift_complete(occupant, shifts, clock.now()):
            status = SeatStatus.SHIFT_DONE
        elif financials.overpaid > 0:
            status = SeatStatus.OVERPAID
        elif financials.total_dues > 0:
            status = SeatStatus.DUE
        else:
            status = SeatStatus.PAID

        with LogContext.bind(student_id=occupant.id):
            logger.debug("seat_status_resolved", extra={
                "status": status.value,
                "shift": occupant.shift,
            })

        return SeatOccupancy(status=status, student=occupant, financials=financials)
