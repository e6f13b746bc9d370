"""
Core shared library for the Valhalla dashboard.

This package contains the logic used by the web package:
- exceptions: Custom exception hierarchy
- dates / filters / query: date keys, presets and the URL filter codec
- selection: date range picker state machine
- aggregation: record filtering and reductions
- config: Centralized configuration
"""

# Import in dependency order
from core.exceptions import (
    ValhallaError,
    SheetsError,
    SheetsConnectionError,
    SheetsDataError,
    MissingColumn,
    ValidationError,
    InvalidDateFormat,
)

from core.filters import (
    DateRange,
    Preset,
    PRESETS,
    get_preset,
    resolve_preset,
)

from core.query import (
    FilterQuery,
    encode,
    decode,
    merge_query,
)

from core.aggregation import (
    Aggregate,
    aggregate,
    filter_records,
    parse_money,
)

from core.config import config

__all__ = [
    # Exceptions
    "ValhallaError",
    "SheetsError",
    "SheetsConnectionError",
    "SheetsDataError",
    "MissingColumn",
    "ValidationError",
    "InvalidDateFormat",
    # Filters
    "DateRange",
    "Preset",
    "PRESETS",
    "get_preset",
    "resolve_preset",
    # Query codec
    "FilterQuery",
    "encode",
    "decode",
    "merge_query",
    # Aggregation
    "Aggregate",
    "aggregate",
    "filter_records",
    "parse_money",
    # Config
    "config",
]
