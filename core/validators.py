"""
Input validation functions for query parameters.

All validators raise ValidationError on invalid input. Range keys in page
URLs are decoded leniently by core.query instead; these validators guard
the explicit API parameters.
"""

import re
from datetime import MINYEAR, date
from typing import List, Optional, Tuple

from core.attribution import SORT_KEYS
from core.dates import from_key
from core.exceptions import ValidationError
from core.filters import Preset, get_preset


# Maximum allowed values
MAX_FILTER_LENGTH = 255
MAX_PICKS = 2

_VIDEO_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")
_MONTH_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")


def validate_date_string(value: str, field: str = "date") -> date:
    """
    Validate and parse a YYYY-MM-DD date key.

    Args:
        value: Date string to validate
        field: Field name for error messages

    Returns:
        Parsed date object

    Raises:
        ValidationError: If the date is missing
        InvalidDateFormat: If the date is malformed
    """
    if value is None or value == "":
        raise ValidationError(field, "Date is required", value)
    return from_key(value, field)


def validate_preset(
    value: Optional[str],
    field: str = "preset",
    allow_none: bool = True
) -> Optional[Preset]:
    """
    Validate a preset name (key or label).

    Returns:
        The Preset, or None when absent and allowed

    Raises:
        ValidationError: If the preset is unknown
    """
    if value is None or value == "":
        if allow_none:
            return None
        raise ValidationError(field, "Preset is required")
    return get_preset(value)


def validate_sort(value: Optional[str]) -> Optional[str]:
    """
    Normalise a sort key.

    Unknown keys are not an error: they mean default ordering.
    """
    if not value:
        return None
    value = value.lower().strip()
    return value if value in SORT_KEYS else None


def validate_filter_value(
    value: Optional[str],
    field: str,
) -> Optional[str]:
    """
    Validate an exact-match filter value (platform, closer, ...).

    Returns:
        The value unchanged (exact match), or None when empty

    Raises:
        ValidationError: If the value is too long
    """
    if value is None or value == "":
        return None

    if len(value) > MAX_FILTER_LENGTH:
        raise ValidationError(
            field,
            f"Cannot exceed {MAX_FILTER_LENGTH} characters",
            f"{len(value)} characters"
        )

    return value


def validate_video_id(value: str, field: str = "video_id") -> str:
    """
    Validate a YouTube video ID.

    Raises:
        ValidationError: If the ID has unexpected characters or length
    """
    if not value or not _VIDEO_ID_PATTERN.match(value):
        raise ValidationError(field, "Must be 1-64 letters, digits, '-' or '_'", value)
    return value


def validate_month(value: Optional[str], field: str = "month") -> Optional[Tuple[int, int]]:
    """
    Validate a YYYY-MM month cursor.

    Returns:
        (year, month) or None when absent

    Raises:
        ValidationError: If the month is malformed
    """
    if not value:
        return None
    match = _MONTH_PATTERN.match(value)
    if not match or not 1 <= int(match.group(2)) <= 12:
        raise ValidationError(field, "Invalid month. Expected YYYY-MM", value)
    if int(match.group(1)) < MINYEAR:
        raise ValidationError(field, f"Year must be {MINYEAR} or later", value)
    return int(match.group(1)), int(match.group(2))


def validate_picks(values: Optional[List[str]], field: str = "pick") -> List[date]:
    """
    Validate picker clicks.

    Raises:
        ValidationError: If there are too many clicks
        InvalidDateFormat: If a click is not a date key
    """
    values = values or []
    if len(values) > MAX_PICKS:
        raise ValidationError(field, f"Cannot exceed {MAX_PICKS} clicks", len(values))
    return [validate_date_string(v, field) for v in values]
