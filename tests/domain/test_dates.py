"""
Tests for anchor-day date arithmetic.
"""

from datetime import date, datetime, time, timedelta, timezone

import pytest

from billing_kernel.domain.dates import (
    CycleBoundary,
    days_inclusive,
    last_day_of_month,
    minutes_of_day,
    next_anchor_boundary,
    parse_datetime,
    parse_hhmm,
    to_date,
)


class TestNextAnchorBoundary:
    """Stepping one calendar month on the anchor day."""

    @pytest.mark.parametrize("current,anchor,expected", [
        (date(2025, 1, 10), 10, CycleBoundary(date(2025, 2, 10), False)),
        (date(2025, 1, 31), 31, CycleBoundary(date(2025, 2, 28), True)),
        (date(2024, 1, 31), 31, CycleBoundary(date(2024, 2, 29), True)),
        (date(2025, 2, 28), 31, CycleBoundary(date(2025, 3, 31), False)),
        (date(2025, 3, 31), 31, CycleBoundary(date(2025, 4, 30), True)),
        (date(2025, 1, 30), 30, CycleBoundary(date(2025, 2, 28), True)),
        (date(2025, 1, 29), 29, CycleBoundary(date(2025, 2, 28), True)),
        (date(2024, 1, 29), 29, CycleBoundary(date(2024, 2, 29), False)),
        (date(2025, 12, 31), 31, CycleBoundary(date(2026, 1, 31), False)),
    ])
    def test_boundaries(self, current, anchor, expected):
        assert next_anchor_boundary(current, anchor) == expected

    def test_anchor_restored_after_short_month(self):
        """Jan 30 -> Feb 28 -> Mar 30, not Mar 28."""
        feb = next_anchor_boundary(date(2025, 1, 30), 30)
        mar = next_anchor_boundary(feb.start, 30)

        assert mar.start == date(2025, 3, 30)

    def test_always_next_calendar_month(self):
        current = date(2025, 1, 31)
        for _ in range(36):
            boundary = next_anchor_boundary(current, 31)
            months = (boundary.start.year - current.year) * 12 + boundary.start.month - current.month
            assert months == 1
            current = boundary.start


class TestDayCounts:

    def test_days_inclusive_same_day(self):
        assert days_inclusive(date(2025, 1, 10), date(2025, 1, 10)) == 1

    def test_days_inclusive_span(self):
        assert days_inclusive(date(2025, 7, 29), date(2026, 2, 7)) == 194

    def test_last_day_of_month(self):
        assert last_day_of_month(2025, 2) == 28
        assert last_day_of_month(2024, 2) == 29
        assert last_day_of_month(2025, 4) == 30


class TestParseDatetime:
    """Stored date and timestamp formats."""

    def test_date_only_string(self):
        assert parse_datetime("2025-07-29") == date(2025, 7, 29)

    def test_utc_z_suffix(self):
        parsed = parse_datetime("2025-10-22T13:10:32.657Z")

        assert parsed == datetime(2025, 10, 22, 13, 10, 32, 657000, tzinfo=timezone.utc)

    def test_offset_timestamp(self):
        parsed = parse_datetime("2025-10-22T18:40:00+05:30")

        assert parsed.utcoffset() == timedelta(hours=5, minutes=30)

    def test_passthrough(self):
        day = date(2025, 1, 1)
        assert parse_datetime(day) is day

    @pytest.mark.parametrize("value", [None, ""])
    def test_empty(self, value):
        assert parse_datetime(value) is None

    def test_garbage_string(self):
        with pytest.raises(ValueError):
            parse_datetime("next tuesday")

    def test_unsupported_type(self):
        with pytest.raises(TypeError):
            parse_datetime(20250101)

    def test_to_date_drops_time(self):
        assert to_date(datetime(2025, 3, 5, 23, 59, tzinfo=timezone.utc)) == date(2025, 3, 5)
        assert to_date(date(2025, 3, 5)) == date(2025, 3, 5)
        assert to_date(None) is None


class TestShiftTimes:

    @pytest.mark.parametrize("text,expected", [
        ("06:00", time(6, 0)),
        ("6:30", time(6, 30)),
        ("00:00", time(0, 0)),
        (" 23:59 ", time(23, 59)),
    ])
    def test_valid(self, text, expected):
        assert parse_hhmm(text) == expected

    @pytest.mark.parametrize("text", ["24:00", "12:60", "noon", "1200", "", None])
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_hhmm(text)

    def test_minutes_of_day(self):
        assert minutes_of_day(time(18, 0)) == 1080
        assert minutes_of_day(datetime(2025, 1, 1, 0, 1)) == 1
