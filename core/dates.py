"""
Calendar date helpers.

Dates cross the URL boundary only as canonical YYYY-MM-DD keys. Everything
in here is pure; nothing reads the clock.
"""
import calendar
import re
from datetime import date, datetime, time
from typing import Any, Optional, Tuple
from zoneinfo import ZoneInfo

from dateutil import parser as date_parser

from core.exceptions import InvalidDateFormat

KEY_FORMAT = "%Y-%m-%d"
_KEY_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Two defaults that differ in year, month and day
_FILL_A = datetime(2000, 1, 1)
_FILL_B = datetime(2001, 2, 2)


def days_in_month(year: int, month: int) -> int:
    """Number of days in a month (1-based month), leap years included."""
    return calendar.monthrange(year, month)[1]


def first_weekday_of_month(year: int, month: int) -> int:
    """Weekday of the 1st of the month with Sunday = 0 ... Saturday = 6."""
    # date.weekday() is Monday = 0
    return (date(year, month, 1).weekday() + 1) % 7


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    """Move a (year, month) cursor by delta months."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def to_key(value: date) -> str:
    """Canonical YYYY-MM-DD key for a date (or datetime)."""
    if isinstance(value, datetime):
        value = value.date()
    return value.strftime(KEY_FORMAT)


def from_key(value: Any, field: str = "date") -> date:
    """
    Parse a canonical date key.

    Raises:
        InvalidDateFormat: If value is not a real YYYY-MM-DD date
    """
    if not isinstance(value, str) or not _KEY_PATTERN.match(value):
        raise InvalidDateFormat(value, field)
    try:
        return datetime.strptime(value, KEY_FORMAT).date()
    except ValueError:
        raise InvalidDateFormat(value, field)


def start_of_day(value: date) -> datetime:
    return datetime(value.year, value.month, value.day)


def end_of_day(value: date) -> datetime:
    """Last representable instant of the day (23:59:59.999999)."""
    return datetime.combine(value, time.max)


def parse_record_datetime(raw: Any, tz_name: Optional[str] = None) -> Optional[datetime]:
    """
    Leniently parse a date cell from a spreadsheet row.

    Accepts ISO timestamps, YYYY-MM-DD keys and US style M/D/YYYY values
    (optionally followed by a time). Timezone-aware values are converted to
    tz_name and returned naive so they compare with day bounds.

    Returns None for blank, unparsable or partial input (text missing its
    year, month or day); never raises.
    """
    if raw is None:
        return None
    if isinstance(raw, datetime):
        parsed = raw
    elif isinstance(raw, date):
        return start_of_day(raw)
    else:
        text = str(raw).strip()
        if not text or not any(ch.isdigit() for ch in text):
            return None
        try:
            parsed = date_parser.parse(text, dayfirst=False, default=_FILL_A)
            # Parts missing from the text come from the default
            if parsed.date() != date_parser.parse(text, dayfirst=False, default=_FILL_B).date():
                return None
        except (ValueError, OverflowError):
            return None

    if parsed.tzinfo is not None:
        if tz_name:
            parsed = parsed.astimezone(ZoneInfo(tz_name))
        parsed = parsed.replace(tzinfo=None)
    return parsed


def parse_record_date(raw: Any, tz_name: Optional[str] = None) -> Optional[date]:
    """Calendar day of a spreadsheet date cell, or None."""
    parsed = parse_record_datetime(raw, tz_name)
    return parsed.date() if parsed else None
