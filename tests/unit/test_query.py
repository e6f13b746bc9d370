"""
Tests for core.query module (URL filter codec).
"""
import pytest
from datetime import date
from urllib.parse import parse_qs, urlparse

from core.exceptions import InvalidDateFormat
from core.filters import DateRange
from core.query import (
    FilterQuery,
    build_url,
    decode,
    decode_range,
    encode,
    merge_query,
)

JANUARY = DateRange(date(2024, 1, 1), date(2024, 1, 31))


class TestEncode:
    """Tests for encode."""

    def test_full_range_with_extras(self):
        assert encode(JANUARY, {"platform": "ig"}) == {
            "start": "2024-01-01",
            "end": "2024-01-31",
            "platform": "ig",
        }

    def test_absent_bounds_omitted(self):
        assert encode(DateRange()) == {}
        assert encode(DateRange(start=date(2024, 1, 1))) == {"start": "2024-01-01"}

    def test_empty_extras_omitted(self):
        """Empty values are never written."""
        assert encode(DateRange(), {"closer": "", "setter": None}) == {}


class TestDecode:
    """Tests for decode / decode_range."""

    def test_round_trip(self):
        """decode(encode(r, e)) == (r, e)."""
        params = encode(JANUARY, {"platform": "ig"})
        assert decode(params) == (JANUARY, {"platform": "ig"})

    def test_absent_keys_mean_unbounded(self):
        date_range, extras = decode({})
        assert date_range.is_unbounded
        assert extras == {}

    def test_malformed_bound_drops_range(self):
        """A bad start or end drops the whole range and does not raise."""
        date_range, extras = decode({"start": "2024-13-01", "end": "2024-01-31", "closer": "Al"})
        assert date_range.is_unbounded
        assert extras == {"closer": "Al"}

    def test_decode_range_raises(self):
        with pytest.raises(InvalidDateFormat) as exc_info:
            decode_range({"start": "01/02/2024"})
        assert exc_info.value.field == "start"

    def test_reversed_bounds_swapped(self):
        r = decode_range({"start": "2024-01-31", "end": "2024-01-01"})
        assert r == JANUARY

    def test_only_configured_extra_keys(self):
        _, extras = decode({"platform": "ig", "utm": "x"}, extra_keys=("platform",))
        assert extras == {"platform": "ig"}

    def test_empty_values_ignored(self):
        date_range, extras = decode({"start": "", "end": "", "platform": ""})
        assert date_range.is_unbounded
        assert extras == {}


class TestMergeQuery:
    """Tests for merge_query."""

    def test_preserves_other_keys(self):
        """Only range keys are replaced."""
        existing = {"start": "2023-01-01", "end": "2023-12-31", "closer": "Alice", "sort": "aov"}
        merged = merge_query(existing, JANUARY)
        assert merged == {
            "start": "2024-01-01",
            "end": "2024-01-31",
            "closer": "Alice",
            "sort": "aov",
        }

    def test_clearing_range(self):
        """Merging an unbounded range removes both bounds."""
        merged = merge_query({"start": "2024-01-01", "end": "2024-01-02", "closer": "Al"}, DateRange())
        assert merged == {"closer": "Al"}


class TestBuildUrl:
    """Tests for build_url."""

    def test_no_params(self):
        assert build_url("/leads", {}) == "/leads"
        assert build_url("/leads", {"start": ""}) == "/leads"

    def test_params_encoded(self):
        url = build_url("/", {"start": "2024-01-01", "closer": "Mary Ann"})
        assert parse_qs(urlparse(url).query) == {"start": ["2024-01-01"], "closer": ["Mary Ann"]}

    def test_list_values_repeat_key(self):
        url = build_url("/", {"pick": ["2024-01-01", "2024-01-05"]})
        assert parse_qs(urlparse(url).query) == {"pick": ["2024-01-01", "2024-01-05"]}


class TestFilterQuery:
    """Tests for FilterQuery."""

    def test_from_params(self):
        q = FilterQuery.from_params({"start": "2024-01-01", "end": "2024-01-31", "setter": "Sam", "sort": "aov"})
        assert q.date_range == JANUARY
        assert q.extras == {"setter": "Sam"}
        assert q.sort == "aov"

    def test_to_params_round_trip(self):
        q = FilterQuery(JANUARY, {"platform": "ig"}, "cash_app")
        assert FilterQuery.from_params(q.to_params()) == q

    def test_defaults(self):
        q = FilterQuery()
        assert q.date_range.is_unbounded
        assert q.to_params() == {}
