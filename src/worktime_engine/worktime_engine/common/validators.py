from __future__ import annotations

from ..core.exceptions import ValidationError


def require_non_negative(value: int | float, field_name: str) -> int | float:
    if value is None or value < 0:
        raise ValidationError(f"{field_name} must not be negative")
    return value


def require_range(value: int | float, field_name: str, low: int | float, high: int | float) -> int | float:
    if value is None or not (low <= value <= high):
        raise ValidationError(f"{field_name} must be between {low} and {high}")
    return value


def require_weekday(value: int, field_name: str) -> int:
    if not isinstance(value, int) or not 0 <= value <= 6:
        raise ValidationError(f"{field_name} must be a weekday number 0..6")
    return value
