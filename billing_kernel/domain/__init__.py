"""
Pure domain layer.

Records, date arithmetic, Decimal coercion and clocks with NO dependencies
on storage, network or the wall clock (SystemClock aside).

All domain objects are immutable and deterministic.
"""

from billing_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from billing_kernel.domain.dates import (
    CycleBoundary,
    days_inclusive,
    next_anchor_boundary,
    parse_datetime,
    parse_hhmm,
    to_date,
)
from billing_kernel.domain.records import (
    FeeChange,
    Payment,
    Shift,
    Student,
    index_payments,
)
from billing_kernel.domain.values import ZERO, coerce_amount, coerce_fee, coerce_flag

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "CycleBoundary",
    "days_inclusive",
    "next_anchor_boundary",
    "parse_datetime",
    "parse_hhmm",
    "to_date",
    "FeeChange",
    "Payment",
    "Shift",
    "Student",
    "index_payments",
    "ZERO",
    "coerce_amount",
    "coerce_fee",
    "coerce_flag",
]
