"""
Date range validation for eBay transaction queries.
"""
from datetime import date, timedelta
from typing import Optional, Union

from core.exceptions import ValidationError
from core.schema import DateRange

DEFAULT_MAX_RANGE_DAYS = 90

DateLike = Union[date, str]


def _to_date(value: DateLike, field: str) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise ValidationError(
            f"Invalid {field}: expected YYYY-MM-DD",
            details={"field": field, "value": value}
        )


def validate_date_range(
    start_date: DateLike,
    end_date: DateLike,
    today: Optional[date] = None,
    max_days: int = DEFAULT_MAX_RANGE_DAYS,
) -> DateRange:
    """
    Validate a query window against eBay Finances API requirements.

    Args:
        start_date: First day of the range (inclusive)
        end_date: Last day of the range (inclusive)
        today: Reference date for the "no future dates" rule (defaults to today)
        max_days: Largest allowed distance between start and end

    Returns:
        Validated DateRange

    Raises:
        ValidationError: If the range is reversed, in the future, or too long
    """
    start = _to_date(start_date, "start_date")
    end = _to_date(end_date, "end_date")
    today = today or date.today()

    if start > end:
        raise ValidationError(
            "Start date cannot be after end date",
            details={"start_date": start.isoformat(), "end_date": end.isoformat()}
        )

    if start > today or end > today:
        raise ValidationError(
            "Dates cannot be in the future",
            details={"today": today.isoformat()}
        )

    if (end - start).days > max_days:
        raise ValidationError(
            f"Date range cannot exceed {max_days} days",
            details={"days": (end - start).days, "max_days": max_days}
        )

    return DateRange(start_date=start, end_date=end)


def create_date_preset(days: int, today: Optional[date] = None) -> DateRange:
    """Range covering the last `days` days up to and including today."""
    today = today or date.today()
    return DateRange(start_date=today - timedelta(days=days), end_date=today)
