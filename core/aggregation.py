"""
Record filtering and aggregation.

Records are any objects with a date field: typed dataclasses from
core.models or plain dicts. Filtering is lenient: a record whose date is
missing or unparsable stays in the result, so malformed rows are never
hidden silently.
"""
import math
import re
from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, TypeVar

from core.dates import parse_record_datetime, to_key
from core.filters import DateRange

R = TypeVar("R")

_MONEY_JUNK = re.compile(r"[$,\s]")

DEFAULT_MAX_TREND_DAYS = 366


def parse_money(value: Any) -> float:
    """
    Convert a money cell like "$1,200.50" to a float.

    Currency symbols, commas and whitespace are stripped; anything that
    still does not parse (or is not finite) counts as 0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        cleaned = _MONEY_JUNK.sub("", str(value))
        try:
            number = float(cleaned)
        except ValueError:
            return 0.0
    return number if math.isfinite(number) else 0.0


def field_value(record: Any, name: str, default: Any = None) -> Any:
    """Read a field from a dict or an object."""
    if isinstance(record, Mapping):
        return record.get(name, default)
    return getattr(record, name, default)


def record_datetime(record: Any) -> Optional[datetime]:
    """Default date accessor: a parsed_date attribute or a raw "date" field."""
    parsed = getattr(record, "parsed_date", None)
    if parsed is not None:
        return parsed
    return parse_record_datetime(field_value(record, "date"))


def filter_records(
    records: Iterable[R],
    date_range: DateRange,
    extras: Optional[Mapping[str, str]] = None,
    date_of: Callable[[R], Optional[datetime]] = record_datetime,
    field_of: Callable[[R, str, Any], Any] = field_value,
) -> List[R]:
    """
    Keep records inside the range that match every extra filter.

    Args:
        records: Fetched records
        date_range: Inclusive range; the end day is included through 23:59:59.999
        extras: Exact string equality filters by field name; absent or empty
                values do not constrain
        date_of: Accessor returning the record's timestamp (None if unknown)
        field_of: Accessor (record, name, default) for extra-filter fields

    Returns:
        Matching records in their original order
    """
    constraints = {k: v for k, v in (extras or {}).items() if v}
    lower = date_range.lower_bound
    upper = date_range.upper_bound

    result = []
    for record in records:
        moment = date_of(record)
        if moment is not None:
            if not isinstance(moment, datetime):
                moment = datetime(moment.year, moment.month, moment.day)
            if lower is not None and moment < lower:
                continue
            if upper is not None and moment > upper:
                continue
        if any(str(field_of(record, k, "")) != v for k, v in constraints.items()):
            continue
        result.append(record)
    return result


class Aggregate:
    """Linear reductions over a record sequence."""

    def __init__(self, records: Iterable[Any]):
        self.records = list(records)

    @property
    def total_count(self) -> int:
        return len(self.records)

    def sum_by_field(self, name: str) -> float:
        """Sum a field; money strings are parsed, bad values count as 0."""
        return sum(parse_money(field_value(r, name)) for r in self.records)

    def sum_by(self, value_of: Callable[[Any], float]) -> float:
        return sum(value_of(r) for r in self.records)

    def grouped_count_by(self, key_fn: Callable[[Any], str]) -> Dict[str, int]:
        """Counts per key, most common first."""
        return dict(Counter(key_fn(r) for r in self.records).most_common())

    def count_where(self, predicate: Callable[[Any], bool]) -> int:
        return sum(1 for r in self.records if predicate(r))


def aggregate(records: Iterable[Any]) -> Aggregate:
    return Aggregate(records)


def safe_divide(numerator: float, denominator: float) -> float:
    """Ratio that is 0 when the denominator is 0."""
    return numerator / denominator if denominator else 0.0


def percentage(part: float, whole: float) -> float:
    return safe_divide(part, whole) * 100


def unique_values(records: Iterable[Any], name: str) -> List[str]:
    """Distinct non-empty values of a field, in first-seen order (filter dropdowns)."""
    seen: Dict[str, None] = {}
    for record in records:
        value = field_value(record, name)
        if value:
            seen.setdefault(str(value), None)
    return list(seen)


@dataclass(frozen=True)
class TrendPoint:
    key: str
    label: str
    value: float


def daily_trend(
    records: Sequence[Any],
    date_range: DateRange,
    value_of: Callable[[Any], float],
    today: date,
    date_of: Callable[[Any], Optional[datetime]] = record_datetime,
    max_days: int = DEFAULT_MAX_TREND_DAYS,
) -> List[TrendPoint]:
    """
    Per-day series for charts.

    The axis runs from the range start (else the earliest record, else the
    first of the current month) to the range end (else the latest record,
    else today). Records without a usable date are left out of the series.

    An axis longer than max_days is first narrowed to the records inside
    it (or to today when there are none), then cut to its last max_days
    days.
    """
    by_day: Dict[date, float] = {}
    dated: List[date] = []
    for record in records:
        moment = date_of(record)
        if moment is None:
            continue
        day = moment.date() if isinstance(moment, datetime) else moment
        dated.append(day)
        by_day[day] = by_day.get(day, 0.0) + value_of(record)

    first = date_range.start or (min(dated) if dated else today.replace(day=1))
    last = date_range.end or (max(dated) if dated else today)

    if (last - first).days >= max_days:
        inside = [d for d in dated if first <= d <= last]
        if inside:
            first, last = min(inside), max(inside)
        else:
            last = min(last, max(today, first))
        if (last - first).days >= max_days:
            first = last - timedelta(days=max_days - 1)

    points = []
    for offset in range((last - first).days + 1):
        day = first + timedelta(days=offset)
        points.append(TrendPoint(
            key=to_key(day),
            label=f"{day:%b} {day.day}",
            value=by_day.get(day, 0.0),
        ))
    return points
