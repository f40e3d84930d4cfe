from __future__ import annotations
"""Reusable validation helpers for request payloads and domain values.

All helpers raise ValidationError (400) with a message suitable for showing
inline next to the offending form field.
"""
from typing import Any, Iterable
from tracker.errors import ValidationError


def validate_status(new_status: str, allowed: Iterable[str], field_name: str = 'status') -> str:
    """Validate that new_status is inside allowed.

    Returns the status (to enable inline usage) or raises ValidationError.
    """
    if new_status not in allowed:
        raise ValidationError(description=f"{field_name} invalid")
    return new_status


def require_text(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(description=f"{field_name} is required")
    return value.strip()


def positive_int(value: Any, field_name: str = 'quantity') -> int:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool):
        raise ValidationError(description=f"{field_name} must be a positive integer")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(description=f"{field_name} must be a positive integer")
    if number != value and not (isinstance(value, str) and value.strip().lstrip('+').isdigit()):
        raise ValidationError(description=f"{field_name} must be a positive integer")
    if number <= 0:
        raise ValidationError(description=f"{field_name} must be a positive integer")
    return number

__all__ = ['validate_status', 'require_text', 'positive_int']
