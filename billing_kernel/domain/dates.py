"""
Dates -- anchor-day month arithmetic.

Responsibility:
    Date helpers for billing cycles that recur on the day-of-month of
    admission: normalizing stored timestamps to calendar dates, stepping to
    the next anchor-day boundary with end-of-month clamping, and parsing
    ``HH:MM`` shift times.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Billing is date-granular: every value reaching the engine is a
      ``date``; time-of-day is dropped.
    - ``next_anchor_boundary`` always lands in the calendar month after its
      input, on ``anchor_day`` or on that month's last day when the month is
      too short.
"""

from __future__ import annotations

import calendar
import re
from datetime import date, datetime, time, timedelta
from typing import Any, NamedTuple

ONE_DAY = timedelta(days=1)

_HHMM = re.compile(r"^(\d{1,2}):(\d{2})$")


class CycleBoundary(NamedTuple):
    """Start of the next billing cycle and whether it was clamped."""

    start: date
    adjusted: bool


def parse_datetime(value: Any) -> datetime | date | None:
    """
    Parse a stored date or timestamp.

    Accepts ``date``/``datetime`` instances and ISO-8601 strings (including
    a trailing ``Z``, as written by browser ``toISOString()``).  Empty values
    return None.

    Raises:
        ValueError: if a non-empty string is not ISO-8601.
        TypeError: for unsupported types.
    """
    if value is None or value == "":
        return None
    if isinstance(value, (datetime, date)):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        if "T" not in text and " " not in text and len(text) == 10:
            return date.fromisoformat(text)
        return datetime.fromisoformat(text)
    raise TypeError(f"Unsupported date value: {value!r}")


def to_date(value: datetime | date | None) -> date | None:
    """Normalize a date or timestamp to its calendar date."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    return value


def last_day_of_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def next_anchor_boundary(current: date, anchor_day: int) -> CycleBoundary:
    """
    Next billing boundary after ``current``.

    The boundary is ``anchor_day`` of the calendar month following
    ``current``.  When that month has fewer days, the boundary is clamped to
    its last day and flagged ``adjusted``.  The anchor, not ``current.day``,
    drives the result, so a cycle clamped to Feb 28 still steps to Mar 31.

    >>> next_anchor_boundary(date(2025, 1, 31), 31)
    CycleBoundary(start=datetime.date(2025, 2, 28), adjusted=True)
    >>> next_anchor_boundary(date(2025, 2, 28), 31)
    CycleBoundary(start=datetime.date(2025, 3, 31), adjusted=False)
    """
    year, month = current.year, current.month + 1
    if month > 12:
        year, month = year + 1, 1
    last = last_day_of_month(year, month)
    if anchor_day > last:
        return CycleBoundary(date(year, month, last), True)
    return CycleBoundary(date(year, month, anchor_day), False)


def days_inclusive(start: date, end: date) -> int:
    """Day count from ``start`` through ``end``, counting both ends."""
    return (end - start).days + 1


def parse_hhmm(value: str) -> time:
    """
    Parse a 24-hour ``HH:MM`` string.

    Raises:
        ValueError: if the string is malformed or out of range.
    """
    match = _HHMM.match(value.strip()) if isinstance(value, str) else None
    if match is None:
        raise ValueError(f"Not an HH:MM time: {value!r}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    return time(hours, minutes)


def minutes_of_day(value: time | datetime) -> int:
    return value.hour * 60 + value.minute
