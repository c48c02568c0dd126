"""
Input Normalization Utilities
=============================

All parsing of external inputs (query strings, headers, JSON bodies) happens
here. Routes normalize first, then hand typed values to the services.

Usage:
    from utils.normalize import to_date, to_month, ValidationError

    start = to_date(request.args.get('startDate'), field='startDate')
    month = to_month(request.args.get('month'), field='month')
"""

import json
from datetime import date, datetime
from typing import Optional, Union

from constants import MONTH_NAMES, month_index


class ValidationError(ValueError):
    """Raised when input cannot be normalized to expected type."""

    def __init__(self, message: str, field: str = None, received_value=None):
        super().__init__(message)
        self.field = field
        self.received_value = received_value


def to_float(
    value: Optional[str],
    *,
    default: Optional[float] = None,
    field: str = None
) -> Optional[float]:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (ValueError, TypeError):
        raise ValidationError(
            f"Expected float, got {type(value).__name__}: {value!r}",
            field=field,
            received_value=value
        )


def to_date(
    value: Optional[Union[str, date]],
    *,
    default: Optional[date] = None,
    field: str = None
) -> Optional[date]:
    """
    Convert string to date object.

    Accepts YYYY-MM-DD, an ISO timestamp (date part kept), or a date/datetime.

    Raises:
        ValidationError: If value cannot be parsed as date
    """
    if value is None or value == "":
        return default
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value)[:10], "%Y-%m-%d").date()
    except (ValueError, TypeError):
        raise ValidationError(
            f"Expected date (YYYY-MM-DD), got {type(value).__name__}: {value!r}",
            field=field,
            received_value=value
        )


def to_str(
    value: Optional[str],
    *,
    default: Optional[str] = None,
    field: str = None
) -> Optional[str]:
    """Strip a string; whitespace-only counts as missing."""
    if value is None:
        return default
    result = str(value).strip()
    return result if result else default


def to_month(
    value: Optional[str],
    *,
    default: Optional[str] = None,
    field: str = None
) -> Optional[str]:
    """
    Normalize a month to its full English name.

    Accepts 'September', 'september' or 9 / '9'.
    """
    value = to_str(value)
    if value is None:
        return default
    if value.isdigit():
        number = int(value)
        if 1 <= number <= 12:
            return MONTH_NAMES[number - 1]
    elif month_index(value):
        return MONTH_NAMES[month_index(value) - 1]
    raise ValidationError(
        f"Expected month name or number, got: {value!r}",
        field=field,
        received_value=value
    )


def to_str_list_json(
    value: Optional[str],
    *,
    default: Optional[list] = None,
    field: str = None
) -> Optional[list]:
    """
    Parse a JSON array of strings (used for the allowed-brands header).

    '["ABC","XYZ"]' -> ['ABC', 'XYZ']; missing -> default; '[]' -> [].
    'null' is the same as missing (unrestricted caller).
    """
    if value is None or str(value).strip() == "":
        return default
    try:
        parsed = json.loads(value)
    except (ValueError, TypeError):
        raise ValidationError(
            f"Expected JSON array of strings, got: {value!r}",
            field=field,
            received_value=value
        )
    if parsed is None:
        return default
    if not isinstance(parsed, list) or not all(isinstance(item, str) for item in parsed):
        raise ValidationError(
            f"Expected JSON array of strings, got: {value!r}",
            field=field,
            received_value=value
        )
    return [item.strip() for item in parsed if item.strip()]


def coerce_to_date(value) -> Optional[date]:
    """
    Coerce a DB value to a date. For use in the SERVICE LAYER only.

    Postgres hands back date objects; some drivers return ISO strings.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.strptime(value[:10], "%Y-%m-%d").date()
        except ValueError:
            raise ValueError(f"Cannot parse date string: {value!r}")
    raise ValueError(f"Cannot coerce {type(value).__name__} to date: {value!r}")
