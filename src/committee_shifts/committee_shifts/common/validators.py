from __future__ import annotations

from typing import Any

from ..core.enums import ShiftKind
from ..core.exceptions import InvalidShiftError, ValidationError


def require_non_empty(value: Any, field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_int(value: Any, field_name: str, *, minimum: int | None = None, maximum: int | None = None) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be an integer")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")
    if minimum is not None and number < minimum:
        raise ValidationError(f"{field_name} must be at least {minimum}")
    if maximum is not None and number > maximum:
        raise ValidationError(f"{field_name} must be at most {maximum}")
    return number


def parse_shift(value: Any) -> ShiftKind:
    if isinstance(value, ShiftKind):
        return value
    try:
        return ShiftKind(str(value).strip().lower())
    except ValueError:
        raise InvalidShiftError(f"Invalid shift {value!r}. Must be 'morning' or 'afternoon'")


def optional_bool(value: Any, field_name: str) -> bool | None:
    """JSON booleans only; None means the field was not sent."""
    if value is None:
        return None
    if not isinstance(value, bool):
        raise ValidationError(f"{field_name} must be true or false")
    return value
