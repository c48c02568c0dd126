"""
Period resolution for month/quarter comparisons.

Three comparison modes:
    QUARTER_TO_QUARTER  complete quarter vs the full previous quarter
    MONTH_TO_MONTH      complete past month vs the full previous month
    DATE_TO_DATE        partial period vs the same dates one month earlier

Month arithmetic uses dateutil.relativedelta, which clamps to month end
(2025-03-31 minus one month is 2025-02-28).
"""

import calendar
from dataclasses import dataclass
from datetime import date
from typing import Optional, Tuple

from dateutil.relativedelta import relativedelta

from constants import MONTH_NAMES, QUARTERS, month_index
from utils.normalize import ValidationError

MODE_QUARTER = 'Quarter'
MODE_DAILY = 'Daily'
PERIOD_MODES = (MODE_QUARTER, MODE_DAILY)

QUARTER_TO_QUARTER = 'QUARTER_TO_QUARTER'
MONTH_TO_MONTH = 'MONTH_TO_MONTH'
DATE_TO_DATE = 'DATE_TO_DATE'


@dataclass(frozen=True)
class PreviousPeriod:
    start: date
    end: date
    comparison_mode: str

    def to_dict(self):
        return {
            'prevStartDate': self.start.isoformat(),
            'prevEndDate': self.end.isoformat(),
            'comparisonMode': self.comparison_mode,
        }


# =============================================================================
# MONTHS
# =============================================================================

def _month_number(month_name: str) -> int:
    number = month_index(month_name)
    if not number:
        raise ValidationError(f"Unknown month: {month_name!r}", field='month', received_value=month_name)
    return number


def previous_month(year: int, month_name: str) -> Tuple[int, str]:
    """(2025, 'January') -> (2024, 'December')"""
    number = _month_number(month_name)
    if number == 1:
        return year - 1, MONTH_NAMES[11]
    return year, MONTH_NAMES[number - 2]


def month_date_range(year: int, month_name: str) -> Tuple[date, date]:
    number = _month_number(month_name)
    last_day = calendar.monthrange(year, number)[1]
    return date(year, number, 1), date(year, number, last_day)


def _last_day_of_month(d: date) -> date:
    return d.replace(day=calendar.monthrange(d.year, d.month)[1])


def is_complete_month(start: date, end: date, today: date) -> bool:
    """Starts on the 1st, ends on the month's last day, and the month is over."""
    return (
        start.day == 1
        and end == _last_day_of_month(end)
        and (end.year, end.month) < (today.year, today.month)
    )


# =============================================================================
# QUARTERS
# =============================================================================

def _check_quarter(quarter: str) -> int:
    if quarter not in QUARTERS:
        raise ValidationError(f"Unknown quarter: {quarter!r}", field='quarter', received_value=quarter)
    return QUARTERS.index(quarter)


def previous_quarter(quarter: str, year: int) -> Tuple[str, int]:
    """('Q1', 2025) -> ('Q4', 2024)"""
    index = _check_quarter(quarter)
    if index == 0:
        return 'Q4', year - 1
    return QUARTERS[index - 1], year


def quarter_date_range(year: int, quarter: str) -> Tuple[date, date]:
    index = _check_quarter(quarter)
    first_month = index * 3 + 1
    start = date(year, first_month, 1)
    end = _last_day_of_month(date(year, first_month + 2, 1))
    return start, end


def is_quarter_complete(quarter: str, year: int, max_date: Optional[date], today: date) -> bool:
    """The quarter has ended and data reaches its last day."""
    _, quarter_end = quarter_date_range(year, quarter)
    return quarter_end < today and max_date is not None and max_date >= quarter_end


# =============================================================================
# RESOLUTION
# =============================================================================

def resolve_previous_period(
    mode: str,
    start: date,
    end: date,
    max_date: Optional[date] = None,
    quarter: Optional[str] = None,
    year: Optional[int] = None,
    today: Optional[date] = None,
) -> PreviousPeriod:
    """
    Pick the comparison window for [start, end].

    Args:
        mode: 'Quarter' (quarter slicer) or 'Daily' (month/custom range)
        max_date: latest date with data; a quarter only counts as complete
            when data reaches its final day
        quarter/year: required for 'Quarter' mode
        today: reference date, defaults to date.today()
    """
    today = today or date.today()
    if start > end:
        raise ValidationError(f"startDate {start} is after endDate {end}", field='startDate', received_value=start)

    if mode == MODE_QUARTER:
        if not quarter or year is None:
            raise ValidationError("Quarter mode requires quarter and year", field='quarter')
        if is_quarter_complete(quarter, year, max_date, today):
            prev_q, prev_year = previous_quarter(quarter, year)
            prev_start, prev_end = quarter_date_range(prev_year, prev_q)
            return PreviousPeriod(prev_start, prev_end, QUARTER_TO_QUARTER)
    elif mode == MODE_DAILY:
        if is_complete_month(start, end, today):
            prev_start = start - relativedelta(months=1)
            prev_end = _last_day_of_month(end - relativedelta(months=1))
            return PreviousPeriod(prev_start, prev_end, MONTH_TO_MONTH)
    else:
        raise ValidationError(f"Expected one of {list(PERIOD_MODES)}, got: {mode!r}", field='mode', received_value=mode)

    return PreviousPeriod(
        start - relativedelta(months=1),
        end - relativedelta(months=1),
        DATE_TO_DATE,
    )


def comparison_label(mode: str, quarter: Optional[str] = None, year: Optional[int] = None) -> str:
    if mode == QUARTER_TO_QUARTER:
        if quarter and year:
            prev_q, prev_year = previous_quarter(quarter, year)
            return f"vs {prev_q} {prev_year}"
        return 'vs Last Quarter'
    if mode == MONTH_TO_MONTH:
        return 'vs Last Month'
    if mode == DATE_TO_DATE:
        return 'vs Same Period Last Month'
    return 'vs Last Period'


def average_daily(total, start: date, end: date) -> float:
    """Total spread over the inclusive day count of [start, end]."""
    days = abs((end - start).days) + 1
    return (total or 0) / days
