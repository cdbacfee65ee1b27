"""Validation package."""

from kite_finance.validation.validator import (
    ValidationError,
    add_months,
    format_month_key,
    last_day_of_month,
    month_bounds,
    month_label,
    months_between,
    next_month,
    parse_month_key,
    previous_month,
    validate_category_id,
)

__all__ = [
    "ValidationError",
    "add_months",
    "format_month_key",
    "last_day_of_month",
    "month_bounds",
    "month_label",
    "months_between",
    "next_month",
    "parse_month_key",
    "previous_month",
    "validate_category_id",
]
