"""Input guards for the pure progression functions"""
from datetime import date, datetime
from typing import Any

from fitcoach.exceptions import ValidationError


def require_non_negative_int(value: Any, field: str) -> int:
    """
    Reject anything that is not a plain non-negative integer.

    Booleans are rejected even though they subclass int, and negative
    values are never clamped to zero.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(
            message=f"{field} must be an integer, got {type(value).__name__}",
            field=field,
            value=value
        )
    if value < 0:
        raise ValidationError(
            message=f"{field} must be non-negative",
            field=field,
            value=value
        )
    return value


def require_calendar_date(value: Any, field: str) -> date:
    """Accept a calendar date; reject datetimes and anything else"""
    if isinstance(value, datetime) or not isinstance(value, date):
        raise ValidationError(
            message=f"{field} must be a calendar date, got {type(value).__name__}",
            field=field,
            value=value
        )
    return value
