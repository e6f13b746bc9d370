"""
Tests for core.filters module (date ranges and presets).
"""
import pytest
from datetime import date, datetime

from core.exceptions import ValidationError
from core.filters import (
    PRESETS,
    DateRange,
    get_preset,
    get_range_label,
    resolve_preset,
)

NOW = date(2024, 3, 10)


class TestDateRange:
    """Tests for DateRange."""

    def test_unbounded(self):
        assert DateRange().is_unbounded
        assert not DateRange(start=NOW).is_unbounded

    def test_string_bounds(self):
        r = DateRange(date(2024, 1, 1), date(2024, 1, 31))
        assert (r.start_str, r.end_str) == ("2024-01-01", "2024-01-31")
        assert DateRange().start_str is None
        assert DateRange().end_str is None

    def test_ordered(self):
        """ordered() puts the earlier date first."""
        r = DateRange.ordered(date(2024, 3, 9), date(2024, 3, 1))
        assert (r.start, r.end) == (date(2024, 3, 1), date(2024, 3, 9))

    def test_bounds_cover_whole_days(self):
        """The lower bound is midnight of the start day; the upper bound is the end of the end day."""
        r = DateRange(date(2024, 1, 1), date(2024, 1, 31))
        assert r.lower_bound == datetime(2024, 1, 1, 0, 0)
        assert r.upper_bound == datetime(2024, 1, 31, 23, 59, 59, 999999)

    def test_half_open_bounds(self):
        """A missing bound has no instant."""
        assert DateRange(start=date(2024, 1, 1)).upper_bound is None
        assert DateRange(end=date(2024, 1, 1)).lower_bound is None

    def test_upper_bound_on_maximum_date(self):
        assert DateRange(end=date.max).upper_bound == datetime(9999, 12, 31, 23, 59, 59, 999999)


class TestResolvePreset:
    """Tests for resolve_preset."""

    def test_last_7_days_includes_today(self):
        """7-day window is 7 calendar days ending today."""
        r = resolve_preset("last_7_days", NOW)
        assert r == DateRange(date(2024, 3, 4), date(2024, 3, 10))

    def test_yesterday(self):
        r = resolve_preset("yesterday", NOW)
        assert r == DateRange(date(2024, 3, 9), date(2024, 3, 9))

    def test_today(self):
        r = resolve_preset("today", NOW)
        assert r == DateRange(NOW, NOW)

    def test_last_30_days(self):
        r = resolve_preset("last_30_days", NOW)
        assert r.start == date(2024, 2, 10)
        assert r.end == NOW

    def test_window_crosses_leap_day(self):
        r = resolve_preset("last_7_days", date(2024, 3, 2))
        assert r.start == date(2024, 2, 25)

    def test_all_time_clears_bounds(self):
        assert resolve_preset("all_time", NOW).is_unbounded

    def test_accepts_label(self):
        """Labels resolve like keys, case-insensitively."""
        assert resolve_preset("Last 7 Days", NOW) == resolve_preset("last_7_days", NOW)
        assert resolve_preset("ALL TIME", NOW).is_unbounded

    def test_accepts_datetime_now(self):
        """A datetime anchor uses its calendar day."""
        r = resolve_preset("yesterday", datetime(2024, 3, 10, 23, 59))
        assert r.start == date(2024, 3, 9)

    def test_resolved_fresh_each_time(self):
        """Presets are rules, not stored dates."""
        preset = get_preset("last_7_days")
        assert resolve_preset(preset, NOW) != resolve_preset(preset, date(2024, 3, 11))

    def test_every_preset_is_ordered(self):
        for preset in PRESETS:
            r = resolve_preset(preset, NOW)
            if not r.is_unbounded:
                assert r.start <= r.end <= NOW

    def test_unknown_preset(self):
        with pytest.raises(ValidationError) as exc_info:
            resolve_preset("last_fortnight", NOW)
        assert exc_info.value.field == "preset"
        assert "last_7_days" in str(exc_info.value)


class TestRangeLabel:
    """Tests for get_range_label."""

    def test_matches_preset(self):
        r = resolve_preset("last_7_days", NOW)
        assert get_range_label(r, NOW) == "Last 7 Days"

    def test_all_time(self):
        assert get_range_label(DateRange()) == "All Time"

    def test_custom_range(self):
        r = DateRange(date(2024, 1, 1), date(2024, 1, 31))
        assert get_range_label(r, NOW) == "2024-01-01 - 2024-01-31"

    def test_half_open(self):
        assert get_range_label(DateRange(start=date(2024, 1, 1))) == "Since 2024-01-01"
        assert get_range_label(DateRange(end=date(2024, 1, 1))) == "Until 2024-01-01"
