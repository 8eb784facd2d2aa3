from __future__ import annotations

from datetime import date
from typing import Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_int_range(value, field_name: str, *, min_value: int, max_value: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")
    if number < min_value or number > max_value:
        raise ValidationError(f"{field_name} must be between {min_value} and {max_value}")
    return number


def require_date_range(start: Optional[date], end: Optional[date], *, max_days: Optional[int] = None) -> None:
    if start is None or end is None:
        raise ValidationError("date_from and date_to are required")
    if start > end:
        raise ValidationError("date_from must not be after date_to")
    if max_days is not None and (end - start).days + 1 > max_days:
        raise ValidationError(f"Date range must not exceed {max_days} days")
