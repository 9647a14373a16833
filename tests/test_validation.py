"""
Unit tests for date range validation.
"""
from datetime import date

import pytest

from core.exceptions import ValidationError
from core.validation import create_date_preset, validate_date_range

TODAY = date(2024, 6, 30)


def test_valid_range_returns_date_range():
    result = validate_date_range("2024-06-01", "2024-06-30", today=TODAY)
    assert result.start_date == date(2024, 6, 1)
    assert result.end_date == date(2024, 6, 30)


def test_accepts_date_objects():
    result = validate_date_range(date(2024, 6, 1), date(2024, 6, 2), today=TODAY)
    assert result.end_date == date(2024, 6, 2)


def test_start_after_end():
    with pytest.raises(ValidationError, match="Start date cannot be after end date"):
        validate_date_range("2024-06-10", "2024-06-01", today=TODAY)


def test_future_dates_rejected():
    with pytest.raises(ValidationError, match="future"):
        validate_date_range("2024-06-01", "2024-07-01", today=TODAY)


def test_ninety_days_is_allowed():
    validate_date_range("2024-04-01", "2024-06-30", today=TODAY)


def test_more_than_ninety_days_rejected():
    with pytest.raises(ValidationError, match="90 days"):
        validate_date_range("2024-03-31", "2024-06-30", today=TODAY)


def test_custom_limit():
    with pytest.raises(ValidationError):
        validate_date_range("2024-06-01", "2024-06-30", today=TODAY, max_days=7)


def test_malformed_date():
    with pytest.raises(ValidationError) as exc_info:
        validate_date_range("30/06/2024", "2024-06-30", today=TODAY)
    assert exc_info.value.details["field"] == "start_date"


def test_date_preset():
    preset = create_date_preset(30, today=TODAY)
    assert preset.start_date == date(2024, 5, 31)
    assert preset.end_date == TODAY
