from __future__ import annotations

import re
from typing import Any, Optional

from ..core.constants import MAX_YEAR, MIN_YEAR, NOTES_MAX_LENGTH
from ..core.exceptions import ValidationError

_INT_TEXT = re.compile(r"[+-]?\d+")


def require_non_empty(value: Any, field_name: str) -> str:
    if value is not None and not isinstance(value, str):
        raise ValidationError(f"{field_name} must be text")
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_int(value: Any, field_name: str) -> int:
    """Whole numbers only: an int, an integral float or a string of digits."""
    # bool is an int subclass; a JSON true/false is never a valid count or id.
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and _INT_TEXT.fullmatch(value.strip()):
        return int(value.strip())
    raise ValidationError(f"{field_name} must be an integer")


def require_non_negative_int(value: Any, field_name: str) -> int:
    number = require_int(value, field_name)
    if number < 0:
        raise ValidationError(f"{field_name} cannot be negative")
    return number


def optional_notes(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError("Notes must be text")
    value = value.strip()
    if len(value) > NOTES_MAX_LENGTH:
        raise ValidationError(f"Notes cannot exceed {NOTES_MAX_LENGTH} characters")
    return value or None


def require_month(value: Any) -> int:
    month = require_int(value, "Month")
    if not 1 <= month <= 12:
        raise ValidationError("Month must be between 1 and 12")
    return month


def require_year(value: Any) -> int:
    year = require_int(value, "Year")
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise ValidationError(f"Year must be between {MIN_YEAR} and {MAX_YEAR}")
    return year
