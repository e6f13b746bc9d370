"""
Date range and preset utilities.

Shared by every dashboard page so the same shortcut always means the same
window.
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Union
from zoneinfo import ZoneInfo

from core.dates import end_of_day, start_of_day, to_key
from core.exceptions import ValidationError

# Marker for presets that clear both bounds
ALL_TIME = "all-time"


@dataclass(frozen=True)
class DateRange:
    """
    Inclusive date range; either bound may be absent (unbounded).

    When both bounds are present start <= end.
    """
    start: Optional[date] = None
    end: Optional[date] = None

    @property
    def is_unbounded(self) -> bool:
        return self.start is None and self.end is None

    @property
    def start_str(self) -> Optional[str]:
        """Start date as YYYY-MM-DD string."""
        return to_key(self.start) if self.start else None

    @property
    def end_str(self) -> Optional[str]:
        """End date as YYYY-MM-DD string."""
        return to_key(self.end) if self.end else None

    @property
    def lower_bound(self) -> Optional[datetime]:
        """First instant included by the range."""
        return start_of_day(self.start) if self.start else None

    @property
    def upper_bound(self) -> Optional[datetime]:
        """Last instant included by the range (end of the end day)."""
        return end_of_day(self.end) if self.end else None

    @classmethod
    def ordered(cls, first: date, second: date) -> "DateRange":
        """Range spanning two dates regardless of their order."""
        return cls(min(first, second), max(first, second))


@dataclass(frozen=True)
class Preset:
    """
    Named shortcut resolved against "now" each time it is applied.

    Exactly one of anchor_offset_days / window_length_days is used:
    anchor_offset_days picks a single day k days back, window_length_days
    picks the last n days including today (or ALL_TIME for no bounds).
    """
    key: str
    label: str
    anchor_offset_days: Optional[int] = None
    window_length_days: Union[int, str, None] = None

    @property
    def is_all_time(self) -> bool:
        return self.window_length_days == ALL_TIME


PRESETS: List[Preset] = [
    Preset("today", "Today", anchor_offset_days=0),
    Preset("yesterday", "Yesterday", anchor_offset_days=1),
    Preset("last_7_days", "Last 7 Days", window_length_days=7),
    Preset("last_30_days", "Last 30 Days", window_length_days=30),
    Preset("last_90_days", "Last 90 Days", window_length_days=90),
    Preset("last_365_days", "Last 365 Days", window_length_days=365),
    Preset("all_time", "All Time", window_length_days=ALL_TIME),
]

_PRESETS_BY_NAME: Dict[str, Preset] = {}
for _preset in PRESETS:
    _PRESETS_BY_NAME[_preset.key] = _preset
    _PRESETS_BY_NAME[_preset.label.lower()] = _preset


def get_preset(name: str) -> Preset:
    """
    Look up a preset by key ("last_7_days") or label ("Last 7 Days").

    Raises:
        ValidationError: If no preset has that name
    """
    preset = _PRESETS_BY_NAME.get((name or "").strip().lower())
    if preset is None:
        valid = ", ".join(p.key for p in PRESETS)
        raise ValidationError("preset", f"Must be one of: {valid}", name)
    return preset


def resolve_preset(preset: Union[Preset, str], now: Union[date, datetime]) -> DateRange:
    """
    Resolve a preset to a concrete range anchored on now.

    Args:
        preset: Preset instance, key or label
        now: Moment of application; callers pass it in so results are
             deterministic

    Returns:
        DateRange (both bounds absent for All Time)

    Examples:
        >>> resolve_preset("last_7_days", date(2024, 3, 10))
        DateRange(start=date(2024, 3, 4), end=date(2024, 3, 10))

        >>> resolve_preset("yesterday", date(2024, 3, 10))
        DateRange(start=date(2024, 3, 9), end=date(2024, 3, 9))
    """
    if isinstance(preset, str):
        preset = get_preset(preset)
    today = now.date() if isinstance(now, datetime) else now

    if preset.is_all_time:
        return DateRange()

    if preset.window_length_days is not None:
        # n days including today: start is n - 1 days back
        start = today - timedelta(days=int(preset.window_length_days) - 1)
        return DateRange(start, today)

    day = today - timedelta(days=preset.anchor_offset_days or 0)
    return DateRange(day, day)


def today_in_timezone(tz_name: str) -> date:
    """Current calendar day in the dashboard timezone."""
    return datetime.now(ZoneInfo(tz_name)).date()


def get_range_label(date_range: DateRange, now: Optional[date] = None) -> str:
    """
    Human-readable label for a range, using the preset name when one matches.

    Args:
        date_range: Range to describe
        now: Reference day for preset matching (skipped when None)
    """
    if now is not None:
        for preset in PRESETS:
            if resolve_preset(preset, now) == date_range:
                return preset.label
    if date_range.is_unbounded:
        return "All Time"
    if date_range.start and date_range.end:
        return f"{date_range.start_str} - {date_range.end_str}"
    if date_range.start:
        return f"Since {date_range.start_str}"
    return f"Until {date_range.end_str}"
