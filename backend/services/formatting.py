"""
Display formatting for KPI values.

    format_numeric(1234.5)              -> '1.23K'
    format_currency(-1_500_000, 'MYR')  -> 'RM -1.50M'
    format_integer(12345.6)             -> '12,346'
    format_percentage(12.346)           -> '12.35%'
    format_change(4.2)                  -> '+4.20%'

None and NaN render as zero.
"""

import math
from typing import Optional

from constants import CURRENCY_SYMBOLS, DEFAULT_CURRENCY_SYMBOL, normalize_currency
from services.kpi.registry import TYPE_AMOUNT, TYPE_INTEGER, TYPE_PERCENTAGE


def _is_missing(value) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def currency_symbol(currency: Optional[str]) -> str:
    return CURRENCY_SYMBOLS.get(normalize_currency(currency), DEFAULT_CURRENCY_SYMBOL)


def _denominated(value: float) -> str:
    abs_value = abs(value)
    if abs_value >= 1_000_000:
        body = f"{abs_value / 1_000_000:.2f}M"
    elif abs_value >= 1_000:
        body = f"{abs_value / 1_000:.2f}K"
    else:
        body = f"{abs_value:,.2f}"
    return f"-{body}" if value < 0 else body


def format_numeric(value) -> str:
    """Amounts and ratios: 2 decimals, K/M above a thousand."""
    if _is_missing(value):
        return '0.00'
    return _denominated(value)


def format_integer(value) -> str:
    if _is_missing(value):
        return '0'
    return f"{round(value):,}"


def format_currency(value, currency: Optional[str]) -> str:
    if _is_missing(value):
        return '0.00'
    return f"{currency_symbol(currency)} {_denominated(value)}"


def format_percentage(value) -> str:
    if _is_missing(value):
        return '0.00%'
    return f"{value:,.2f}%"


def format_change(value) -> str:
    """Signed percentage change, '+' only for positive values."""
    if _is_missing(value):
        return '0.00%'
    sign = '+' if value > 0 else ''
    return f"{sign}{value:,.2f}%"


def format_metric(value, value_type: str, currency: Optional[str] = None) -> str:
    """Format by registry value type (integer / amount / percentage / decimal)."""
    if value_type == TYPE_INTEGER:
        return format_integer(value)
    if value_type == TYPE_PERCENTAGE:
        return format_percentage(value)
    if value_type == TYPE_AMOUNT and currency:
        return format_currency(value, currency)
    return format_numeric(value)
