"""
URL query codec for dashboard filters.

The query string is the only filter state that survives navigation:
`start`/`end` carry the committed range as YYYY-MM-DD keys, any other
configured keys are exact-match filters. Absent keys mean "unconstrained";
empty values are never written.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple
from urllib.parse import urlencode

from core.dates import from_key
from core.exceptions import InvalidDateFormat
from core.filters import DateRange

logger = logging.getLogger(__name__)

START_KEY = "start"
END_KEY = "end"
SORT_KEY = "sort"
RANGE_KEYS = (START_KEY, END_KEY)

DEFAULT_EXTRA_KEYS = ("platform", "closer", "setter")


def encode(date_range: DateRange, extras: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """
    Encode a range and extra filters into a query mapping.

    Bounds that are absent and extras with empty values are omitted.
    """
    query: Dict[str, str] = {}
    if date_range.start is not None:
        query[START_KEY] = date_range.start_str
    if date_range.end is not None:
        query[END_KEY] = date_range.end_str
    for key, value in (extras or {}).items():
        if value:
            query[key] = str(value)
    return query


def decode_range(params: Mapping[str, str]) -> DateRange:
    """
    Read start/end from a query mapping.

    Raises:
        InvalidDateFormat: If a present bound is not a valid date key
    """
    raw_start = params.get(START_KEY) or None
    raw_end = params.get(END_KEY) or None
    start = from_key(raw_start, START_KEY) if raw_start else None
    end = from_key(raw_end, END_KEY) if raw_end else None
    if start and end and start > end:
        return DateRange.ordered(start, end)
    return DateRange(start, end)


def decode(
    params: Mapping[str, str],
    extra_keys: Iterable[str] = DEFAULT_EXTRA_KEYS,
) -> Tuple[DateRange, Dict[str, str]]:
    """
    Decode a query mapping into (range, extras).

    The URL is user-editable, so a malformed bound drops the whole range
    instead of failing the request.
    """
    try:
        date_range = decode_range(params)
    except InvalidDateFormat as e:
        logger.warning(
            f"Ignoring date range from query: {e}",
            extra={"start": params.get(START_KEY), "end": params.get(END_KEY)},
        )
        date_range = DateRange()

    extras = {}
    for key in extra_keys:
        value = params.get(key)
        if value:
            extras[key] = value
    return date_range, extras


def merge_query(existing: Mapping[str, str], date_range: DateRange) -> Dict[str, str]:
    """
    Replace only the range keys of an existing query, keeping all others.
    """
    merged = {k: v for k, v in existing.items() if k not in RANGE_KEYS}
    merged.update(encode(date_range))
    return merged


def build_url(path: str, params: Mapping[str, Any]) -> str:
    """
    Navigable URL for a path and query mapping (no '?' when empty).

    List values repeat the key (pick=a&pick=b).
    """
    cleaned = {k: v for k, v in params.items() if v}
    if not cleaned:
        return path
    return f"{path}?{urlencode(cleaned, doseq=True)}"


@dataclass(frozen=True)
class FilterQuery:
    """Decoded filter state of a page request."""
    date_range: DateRange = field(default_factory=DateRange)
    extras: Dict[str, str] = field(default_factory=dict)
    sort: Optional[str] = None

    @classmethod
    def from_params(
        cls,
        params: Mapping[str, str],
        extra_keys: Iterable[str] = DEFAULT_EXTRA_KEYS,
    ) -> "FilterQuery":
        date_range, extras = decode(params, extra_keys)
        return cls(date_range, extras, params.get(SORT_KEY) or None)

    def to_params(self) -> Dict[str, str]:
        params = encode(self.date_range, self.extras)
        if self.sort:
            params[SORT_KEY] = self.sort
        return params
