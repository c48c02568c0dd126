"""
Slicer Resolver - valid years/months/lines and default selections.

Options are derived from rows that exist for the currency, after the
caller's brand allow-list is applied. Defaults point at the latest dated
row the caller can see.
"""

import logging
from typing import Dict, List, Optional, Sequence

from constants import (
    LINE_ALL,
    MONTH_NAMES,
    TABLE_DEPOSIT,
    is_valid_currency,
    month_date_range_key,
    normalize_currency,
    sort_month_names,
)
from services.brand_access import filter_brands_by_user
from services.data_source import (
    fetch_distinct,
    fetch_latest_row,
    fetch_month_date_ranges,
    get_model,
)
from utils.filter_builder import QueryFilter
from utils.normalize import ValidationError

logger = logging.getLogger('analytics.slicers')


def resolve_slicer_options(
    currency: str,
    allowed_brands: Optional[Sequence[str]] = None,
    table: str = TABLE_DEPOSIT,
) -> Dict:
    """
    Build slicer options for one currency.

    Args:
        currency: MYR / SGD / USC
        allowed_brands: caller allow-list, None for unrestricted
        table: table the page reads (deposit, withdraw, blue_whale_*)

    Returns:
        {
            'lines': ['ALL', 'ABC', ...],
            'years': [2024, 2025],
            'months': ['January', ...],
            'monthDateRanges': {'2025-September': {'min': ..., 'max': ...}},
            'defaults': {'year', 'month', 'line', 'startDate', 'endDate'},
        }
    """
    if not is_valid_currency(currency):
        raise ValidationError(f"Unknown currency: {currency!r}", field='currency', received_value=currency)
    currency = normalize_currency(currency)
    get_model(table)

    all_lines = fetch_distinct(table, 'line', QueryFilter(currency=currency))
    lines = filter_brands_by_user(all_lines, allowed_brands)

    # Restricted callers only see periods their brands have data for
    scope = QueryFilter(
        currency=currency,
        lines=tuple(lines) if allowed_brands is not None else None,
    )
    years = fetch_distinct(table, 'year', scope)
    months = sort_month_names(fetch_distinct(table, 'month', scope))
    month_ranges = fetch_month_date_ranges(table, scope)

    defaults = _resolve_defaults(table, scope, lines, month_ranges)

    logger.info(
        "slicer_options currency=%s table=%s lines=%d years=%d restricted=%s",
        currency, table, len(lines), len(years), allowed_brands is not None,
    )
    return {
        'lines': _line_options(lines),
        'years': years,
        'months': months,
        'monthDateRanges': month_ranges,
        'defaults': defaults,
    }


def _line_options(lines: List[str]) -> List[str]:
    if len(lines) > 1:
        return [LINE_ALL] + lines
    return list(lines)


def _default_line(lines: List[str]) -> Optional[str]:
    if len(lines) > 1:
        return LINE_ALL
    return lines[0] if lines else None


def _resolve_defaults(table: str, scope: QueryFilter, lines: List[str], month_ranges: Dict) -> Dict:
    latest = fetch_latest_row(table, scope)
    defaults = {
        'year': None,
        'month': None,
        'line': _default_line(lines),
        'startDate': None,
        'endDate': None,
    }
    if latest is None:
        return defaults

    year = getattr(latest, 'year', None) or latest.date.year
    month = getattr(latest, 'month', None) or MONTH_NAMES[latest.date.month - 1]
    defaults['year'] = year
    defaults['month'] = month
    month_range = month_ranges.get(month_date_range_key(year, month))
    if month_range:
        defaults['startDate'] = month_range['min']
        defaults['endDate'] = month_range['max']
    else:
        defaults['startDate'] = latest.date.replace(day=1).isoformat()
        defaults['endDate'] = latest.date.isoformat()
    return defaults
