"""Shared dependencies for API and page route modules."""
import logging
import time
from datetime import date
from typing import Dict, Optional

from slowapi import Limiter
from slowapi.util import get_remote_address

from core.archive import ArchiveStore
from core.config import config
from core.exceptions import InvalidDateFormat, ValidationError
from core.filters import resolve_preset, today_in_timezone
from core.query import FilterQuery
from core.sheets import SheetsClient, get_sheets_client
from core.validators import (
    validate_filter_value,
    validate_month,
    validate_picks,
    validate_preset,
    validate_sort,
    validate_video_id,
)

# Shared limiter instance
limiter = Limiter(key_func=get_remote_address)

# Track startup time for uptime calculation
START_TIME = time.time()


# Shared logger factory
def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def get_sheets() -> SheetsClient:
    """Sheets client dependency (overridden in tests)."""
    return get_sheets_client()


def get_archive_store() -> ArchiveStore:
    """Archived-video store dependency."""
    return ArchiveStore(config.attribution.archive_db_path)


def get_today() -> date:
    """The dashboard's "now", read once per request in the configured timezone."""
    return today_in_timezone(config.dashboard.timezone)


def build_filter_query(
    start: Optional[str],
    end: Optional[str],
    extras: Dict[str, Optional[str]],
    sort: Optional[str] = None,
    preset: Optional[str] = None,
    today: Optional[date] = None,
) -> FilterQuery:
    """
    FilterQuery from explicit query parameters.

    Range keys are decoded leniently (bad dates mean no range); extra
    filter values are length-checked. A preset, when given, replaces
    start/end with its range resolved against `today`.

    Raises:
        ValidationError: If an extra filter value or the preset is invalid
    """
    params = {"start": start or "", "end": end or ""}
    for key, value in extras.items():
        params[key] = validate_filter_value(value, key) or ""
    query = FilterQuery.from_params(params, extra_keys=extras.keys())

    date_range = query.date_range
    resolved = validate_preset(preset)
    if resolved is not None:
        date_range = resolve_preset(resolved, today or get_today())
    return FilterQuery(date_range, query.extras, validate_sort(sort))
