"""
Tests for input validation and month arithmetic.
"""

import pytest
from datetime import date

from kite_finance.validation import (
    ValidationError,
    add_months,
    last_day_of_month,
    month_bounds,
    month_label,
    months_between,
    next_month,
    parse_month_key,
    previous_month,
    validate_category_id,
)


class TestMonthKeys:
    """Tests for parsing and formatting YYYY-MM keys."""

    def test_parse_valid_month(self):
        """Test parsing a well-formed key."""
        assert parse_month_key("2024-03") == date(2024, 3, 1)

    @pytest.mark.parametrize("bad", ["2024-13", "2024-00", "2024-1", "24-01", "2024/01", "", "2024-01-01"])
    def test_parse_rejects_malformed(self, bad):
        """Test that malformed keys raise ValidationError."""
        with pytest.raises(ValidationError):
            parse_month_key(bad)

    def test_parse_rejects_non_string(self):
        """Test that non-string keys raise ValidationError."""
        with pytest.raises(ValidationError):
            parse_month_key(202401)

    def test_parse_rejects_out_of_range_year(self):
        """Test the supported year range."""
        with pytest.raises(ValidationError, match="supported range"):
            parse_month_key("1899-12")

    def test_validation_error_is_value_error(self):
        """Test that callers catching ValueError still see validation failures."""
        assert issubclass(ValidationError, ValueError)


class TestMonthArithmetic:
    """Tests for month navigation helpers."""

    def test_month_bounds_half_open(self):
        """Test that the end bound is the first day of the next month."""
        assert month_bounds("2024-02") == (date(2024, 2, 1), date(2024, 3, 1))

    def test_month_bounds_december(self):
        """Test the year rollover."""
        assert month_bounds("2023-12") == (date(2023, 12, 1), date(2024, 1, 1))

    def test_last_day_of_month_leap_year(self):
        """Test February in a leap year."""
        assert last_day_of_month("2024-02") == date(2024, 2, 29)
        assert last_day_of_month("2023-02") == date(2023, 2, 28)

    def test_previous_month(self):
        """Test stepping back across a year boundary."""
        assert previous_month("2024-03") == "2024-02"
        assert previous_month("2024-01") == "2023-12"

    def test_previous_month_at_range_start(self):
        """Test that the first supported month has no predecessor."""
        assert previous_month("1900-01") is None

    def test_next_month(self):
        """Test stepping forward across a year boundary."""
        assert next_month("2023-12") == "2024-01"

    def test_next_month_at_range_end(self):
        """Test that the last supported month has no successor."""
        with pytest.raises(ValidationError):
            next_month("2999-12")

    def test_add_months(self):
        """Test shifting by positive and negative deltas."""
        assert add_months("2024-03", -2) == "2024-01"
        assert add_months("2024-03", -3) == "2023-12"
        assert add_months("2024-11", 14) == "2026-01"
        assert add_months("2024-03", 0) == "2024-03"

    def test_add_months_out_of_range(self):
        """Test that shifting past the supported range gives None."""
        assert add_months("1900-06", -12) is None

    def test_month_label(self):
        """Test the human-readable month name."""
        assert month_label("2024-01") == "January 2024"

    def test_months_between_inclusive(self):
        """Test that both ends are included."""
        assert months_between("2023-11", "2024-02") == [
            "2023-11", "2023-12", "2024-01", "2024-02",
        ]

    def test_months_between_single(self):
        """Test a one-month range."""
        assert months_between("2024-05", "2024-05") == ["2024-05"]

    def test_months_between_reversed(self):
        """Test that start after end is rejected."""
        with pytest.raises(ValidationError, match="after"):
            months_between("2024-05", "2024-04")


class TestCategoryId:
    """Tests for category identifier validation."""

    def test_valid_category_id(self):
        """Test that ordinary ids pass through unchanged."""
        assert validate_category_id("groceries") == "groceries"

    @pytest.mark.parametrize("bad", ["", "   ", "a" * 101, "food\x00", "line\nbreak"])
    def test_invalid_category_ids(self, bad):
        """Test that unusable ids are rejected."""
        with pytest.raises(ValidationError):
            validate_category_id(bad)

    def test_non_string_category_id(self):
        """Test that non-string ids are rejected."""
        with pytest.raises(ValidationError, match="string"):
            validate_category_id(42)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
