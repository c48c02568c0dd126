"""
Filter builder utilities.

Single source of truth for turning a QueryFilter into SQLAlchemy conditions.
Every fetch in services/data_source.py goes through build_sqlalchemy_filters().
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, List, Optional, Tuple

from sqlalchemy import false

from constants import is_all_lines, normalize_currency
from utils.normalize import ValidationError, coerce_to_date


@dataclass(frozen=True)
class QueryFilter:
    """
    Slicer + access scope for one fetch.

    line:  selected brand; None or 'ALL' means no brand restriction
    lines: access-scoped allow-list (None = unrestricted, () = nothing visible)
    date_from/date_to are inclusive and cannot be mixed with year/month.
    """
    currency: str
    line: Optional[str] = None
    lines: Optional[Tuple[str, ...]] = None
    year: Optional[int] = None
    month: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    require_latency: bool = False
    min_deposit_cases: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, 'currency', normalize_currency(self.currency))
        if self.lines is not None:
            object.__setattr__(self, 'lines', tuple(self.lines))
        if self.date_from is not None:
            object.__setattr__(self, 'date_from', coerce_to_date(self.date_from))
        if self.date_to is not None:
            object.__setattr__(self, 'date_to', coerce_to_date(self.date_to))

        has_range = self.date_from is not None or self.date_to is not None
        has_period = self.year is not None or self.month is not None
        if has_range and has_period:
            raise ValidationError(
                "Use either a date range or year/month, not both",
                field='date_from' if self.date_from is not None else 'date_to',
                received_value=self.date_from or self.date_to,
            )
        if self.date_from and self.date_to and self.date_from > self.date_to:
            raise ValidationError(
                f"date_from {self.date_from} is after date_to {self.date_to}",
                field='date_from',
                received_value=self.date_from,
            )

    @property
    def brand(self) -> Optional[str]:
        """Selected single brand, or None when all brands are selected."""
        return None if is_all_lines(self.line) else self.line.strip()

    def replace(self, **changes) -> 'QueryFilter':
        values = {name: getattr(self, name) for name in self.__dataclass_fields__}
        values.update(changes)
        return QueryFilter(**values)


def build_sqlalchemy_filters(model: Any, qf: QueryFilter) -> List[Any]:
    """
    Build SQLAlchemy filter conditions for `model` from a QueryFilter.

    Returns:
        List of SQLAlchemy conditions to be combined with and_().
    """
    conditions: List[Any] = [model.currency == qf.currency]

    if qf.brand is not None:
        conditions.append(model.line == qf.brand)
    if qf.lines is not None:
        if qf.lines:
            conditions.append(model.line.in_(qf.lines))
        else:
            # Restricted caller with an empty allow-list sees nothing
            conditions.append(false())

    if qf.year is not None:
        conditions.append(model.year == qf.year)
    if qf.month is not None:
        conditions.append(model.month == qf.month)

    if qf.date_from is not None:
        conditions.append(model.date >= qf.date_from)
    if qf.date_to is not None:
        conditions.append(model.date <= qf.date_to)

    if qf.require_latency and hasattr(model, 'proc_sec'):
        conditions.append(model.proc_sec.isnot(None))

    if qf.min_deposit_cases is not None and hasattr(model, 'deposit_cases'):
        conditions.append(model.deposit_cases >= qf.min_deposit_cases)

    return conditions
