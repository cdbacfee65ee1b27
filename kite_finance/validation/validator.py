"""
Input Validation and Month Arithmetic

DESIGN DECISION: Every public ledger operation validates its inputs
before touching storage. A malformed month key or category id fails
immediately with ValidationError; it never reaches a source and never
produces a partial ledger.

IMPORTANT: A month key that is well-formed but has no budget is NOT a
validation problem. Missing records are valid terminal states.

Month keys are "YYYY-MM" strings. All arithmetic on them goes through
this module so that the rest of the engine never parses dates itself.
"""

from datetime import date, timedelta
from typing import Optional

from kite_finance.models.budget import MONTH_KEY_PATTERN


# Supported calendar range for month keys
MIN_YEAR = 1900
MAX_YEAR = 2999

MAX_CATEGORY_ID_LENGTH = 100


class ValidationError(ValueError):
    """Caller supplied a malformed month key or category identifier."""
    pass


def parse_month_key(month: str) -> date:
    """
    Parse a YYYY-MM key into the first day of that month.

    Raises:
        ValidationError: If the key is not a supported YYYY-MM month
    """
    if not isinstance(month, str) or not MONTH_KEY_PATTERN.match(month):
        raise ValidationError(f"Month must be in YYYY-MM format, got {month!r}")

    year, month_number = int(month[:4]), int(month[5:])
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise ValidationError(
            f"Month {month} is outside the supported range "
            f"{MIN_YEAR}-01 to {MAX_YEAR}-12"
        )
    return date(year, month_number, 1)


def format_month_key(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


def month_bounds(month: str) -> tuple[date, date]:
    """
    Get the half-open date range [start, end) covered by a month.

    end is the first day of the following month.
    """
    start = parse_month_key(month)
    if start.month == 12:
        end = date(start.year + 1, 1, 1)
    else:
        end = date(start.year, start.month + 1, 1)
    return start, end


def last_day_of_month(month: str) -> date:
    _, end = month_bounds(month)
    return end - timedelta(days=1)


def previous_month(month: str) -> Optional[str]:
    """
    Get the month before the given one.

    Returns None at the start of the supported range, which callers
    treat exactly like a month without a budget.
    """
    start = parse_month_key(month)
    if start.month == 1:
        if start.year == MIN_YEAR:
            return None
        return format_month_key(date(start.year - 1, 12, 1))
    return format_month_key(date(start.year, start.month - 1, 1))


def next_month(month: str) -> str:
    _, end = month_bounds(month)
    if end.year > MAX_YEAR:
        raise ValidationError(f"Month {month} has no successor in the supported range")
    return format_month_key(end)


def add_months(month: str, delta: int) -> Optional[str]:
    """
    Shift a month key by delta months (negative goes back).

    Returns None when the result falls outside the supported range.
    """
    start = parse_month_key(month)
    index = start.year * 12 + (start.month - 1) + delta
    year, month_index = divmod(index, 12)
    if not MIN_YEAR <= year <= MAX_YEAR:
        return None
    return format_month_key(date(year, month_index + 1, 1))


def month_label(month: str) -> str:
    """Human-readable month name, e.g. 'January 2024'."""
    return parse_month_key(month).strftime("%B %Y")


def months_between(start_month: str, end_month: str) -> list[str]:
    """
    List every month from start_month to end_month, inclusive.

    Raises:
        ValidationError: If either key is malformed or start is after end
    """
    start = parse_month_key(start_month)
    end = parse_month_key(end_month)
    if start > end:
        raise ValidationError(
            f"Start month {start_month} is after end month {end_month}"
        )

    months = [start_month]
    while months[-1] != end_month:
        months.append(next_month(months[-1]))
    return months


def validate_category_id(category_id: str) -> str:
    """
    Check that a category identifier is usable as a lookup key.

    Unknown categories are fine (they simply have no budgets).
    Empty, non-string, or oversized identifiers are not.
    """
    if not isinstance(category_id, str):
        raise ValidationError(
            f"Category id must be a string, got {type(category_id).__name__}"
        )
    if not category_id.strip():
        raise ValidationError("Category id must not be empty")
    if len(category_id) > MAX_CATEGORY_ID_LENGTH:
        raise ValidationError(
            f"Category id exceeds {MAX_CATEGORY_ID_LENGTH} characters"
        )
    if any(not ch.isprintable() for ch in category_id):
        raise ValidationError("Category id contains control characters")
    return category_id
