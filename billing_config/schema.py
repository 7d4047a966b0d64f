"""
LibraryPolicy schema.

The human-authored, reviewable description of how one library bills and
alerts: its timezone, the engine's cycle cap, alert thresholds and the
daily shifts seats are sold in.  YAML sets are parsed into these types by
the loader and handed to engines as plain values.
"""

from __future__ import annotations

from dataclasses import dataclass
from zoneinfo import ZoneInfo

from billing_kernel.domain.clock import SystemClock
from billing_kernel.domain.records import Shift


@dataclass(frozen=True)
class AlertThresholds:
    """Day counts driving the dues alert lists."""

    window_days: int = 7
    highlight_days: int = 90
    deactivation_days: int = 120


@dataclass(frozen=True)
class LibraryPolicy:
    """A validated, loaded configuration set."""

    name: str
    timezone: str = "Asia/Kolkata"
    max_billing_cycles: int = 1200
    alerts: AlertThresholds = AlertThresholds()
    shifts: tuple[Shift, ...] = ()
    checksum: str = ""

    def clock(self) -> SystemClock:
        """System clock in the library's timezone."""
        return SystemClock(ZoneInfo(self.timezone))

    def shift(self, shift_id: str) -> Shift | None:
        for shift in self.shifts:
            if shift.id == shift_id:
                return shift
        return None
