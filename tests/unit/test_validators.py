"""
Tests for core.validators module.
"""
import pytest
from datetime import date

from core.validators import (
    MAX_FILTER_LENGTH,
    validate_date_string,
    validate_filter_value,
    validate_month,
    validate_picks,
    validate_preset,
    validate_sort,
    validate_video_id,
)
from core.exceptions import InvalidDateFormat, ValidationError


class TestValidateDateString:
    """Tests for validate_date_string function."""

    def test_valid_date(self):
        """Valid date string should return date object."""
        assert validate_date_string("2026-01-15") == date(2026, 1, 15)

    def test_invalid_format(self):
        """Invalid format should raise InvalidDateFormat."""
        with pytest.raises(InvalidDateFormat) as exc_info:
            validate_date_string("15-01-2026")
        assert "Invalid date format" in str(exc_info.value)

    def test_invalid_date(self):
        """Feb 30 doesn't exist."""
        with pytest.raises(ValidationError):
            validate_date_string("2026-02-30")

    def test_empty_string(self):
        """Empty string should raise ValidationError."""
        with pytest.raises(ValidationError) as exc_info:
            validate_date_string("")
        assert "required" in str(exc_info.value).lower()

    def test_none_value(self):
        with pytest.raises(ValidationError):
            validate_date_string(None)


class TestValidatePreset:
    """Tests for validate_preset function."""

    def test_valid(self):
        assert validate_preset("last_30_days").window_length_days == 30

    def test_none_allowed(self):
        assert validate_preset(None) is None
        assert validate_preset("") is None

    def test_none_not_allowed(self):
        with pytest.raises(ValidationError):
            validate_preset(None, allow_none=False)

    def test_unknown(self):
        with pytest.raises(ValidationError):
            validate_preset("last_fortnight")


class TestValidateSort:
    """Tests for validate_sort function."""

    def test_known_keys(self):
        for key in ("aov", "cash_call", "cash_app", "cash_optin"):
            assert validate_sort(key) == key

    def test_normalises_case(self):
        assert validate_sort(" AOV ") == "aov"

    def test_unknown_is_default(self):
        """Unknown sort keys are not an error."""
        assert validate_sort("views") is None
        assert validate_sort(None) is None


class TestValidateFilterValue:
    """Tests for validate_filter_value function."""

    def test_exact_value_returned(self):
        assert validate_filter_value(" Alice ", "closer") == " Alice "

    def test_empty_is_none(self):
        assert validate_filter_value("", "closer") is None
        assert validate_filter_value(None, "closer") is None

    def test_too_long(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_filter_value("x" * (MAX_FILTER_LENGTH + 1), "closer")
        assert exc_info.value.field == "closer"


class TestValidateVideoId:
    """Tests for validate_video_id function."""

    def test_valid(self):
        assert validate_video_id("dQw4w9WgXcQ") == "dQw4w9WgXcQ"

    @pytest.mark.parametrize("value", ["", "has space", "a/b", "x" * 65])
    def test_invalid(self, value):
        with pytest.raises(ValidationError):
            validate_video_id(value)


class TestValidateMonth:
    """Tests for validate_month function."""

    def test_valid(self):
        assert validate_month("2024-03") == (2024, 3)

    def test_absent(self):
        assert validate_month(None) is None

    @pytest.mark.parametrize("value", ["2024-13", "2024-00", "2024-3", "March"])
    def test_invalid(self, value):
        with pytest.raises(ValidationError):
            validate_month(value)

    def test_year_before_first_representable(self):
        """Year 0000 has no calendar."""
        with pytest.raises(ValidationError) as exc_info:
            validate_month("0000-01")
        assert "Year must be 1 or later" in str(exc_info.value)
        assert validate_month("0001-01") == (1, 1)


class TestValidatePicks:
    """Tests for validate_picks function."""

    def test_valid(self):
        assert validate_picks(["2024-03-01", "2024-03-05"]) == [date(2024, 3, 1), date(2024, 3, 5)]

    def test_empty(self):
        assert validate_picks(None) == []

    def test_too_many(self):
        with pytest.raises(ValidationError):
            validate_picks(["2024-03-01", "2024-03-02", "2024-03-03"])

    def test_bad_date(self):
        with pytest.raises(InvalidDateFormat):
            validate_picks(["tomorrow"])
