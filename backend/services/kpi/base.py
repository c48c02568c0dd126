"""
KPI Base Module - Shared row and snapshot shapes for the KPI core.

Core components:
- TransactionRow: one deposit or withdraw event
- SummaryRow: one pre-aggregated brand/day (or member/day) row
- KPISnapshot: computed metrics for one (currency, line, period)
- safe_div(): the only division used by ratio KPIs

Usage:
    from services.kpi.base import KPISnapshot, TransactionRow, safe_div
"""

import datetime as dt
import logging
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

logger = logging.getLogger('kpi')


def safe_div(numerator, denominator) -> float:
    """numerator / denominator, or 0.0 when the denominator is zero or missing."""
    if not denominator:
        return 0.0
    return (numerator or 0) / denominator


def snake_to_camel(name: str) -> str:
    head, *rest = name.split('_')
    return head + ''.join(part.capitalize() for part in rest)


# =============================================================================
# ROWS
# =============================================================================

@dataclass(frozen=True)
class TransactionRow:
    """One deposit or withdraw event. proc_sec is None when not captured."""
    date: Optional[dt.date] = None
    time: Optional[str] = None
    year: Optional[int] = None
    month: Optional[str] = None
    line: Optional[str] = None
    currency: Optional[str] = None
    amount: float = 0.0
    operator_group: Optional[str] = None
    proc_sec: Optional[float] = None
    status: Optional[str] = None
    user_key: Optional[str] = None

    @property
    def hour(self) -> Optional[int]:
        """Hour of day from 'HH:MM[:SS]', None when time is missing or malformed."""
        if not self.time:
            return None
        head = str(self.time).split(':')[0].strip()
        if not head.isdigit():
            return None
        hour = int(head)
        return hour if 0 <= hour <= 23 else None


@dataclass(frozen=True)
class SummaryRow:
    """
    Pre-aggregated row.

    Brand/day summary rows carry no user_key; member rows (blue_whale_{cur},
    member_report_daily) carry user_key and unique_code.
    """
    date: Optional[dt.date] = None
    line: Optional[str] = None
    currency: Optional[str] = None
    deposit_cases: int = 0
    deposit_amount: float = 0.0
    withdraw_cases: int = 0
    withdraw_amount: float = 0.0
    add_transaction: float = 0.0
    deduct_transaction: float = 0.0
    add_bonus: float = 0.0
    deduct_bonus: float = 0.0
    new_register: int = 0
    new_depositor: int = 0
    user_key: Optional[str] = None
    unique_code: Optional[str] = None


# =============================================================================
# SNAPSHOT
# =============================================================================

@dataclass
class KPISnapshot:
    """
    Computed KPIs for one (currency, line, period).

    Values are kept at full precision; to_dict() is the serialization
    boundary (camelCase keys, floats rounded to 2 decimals).
    """
    # Totals
    deposit_amount: float = 0.0
    deposit_cases: int = 0
    withdraw_amount: float = 0.0
    withdraw_cases: int = 0
    add_transaction: float = 0.0
    deduct_transaction: float = 0.0
    add_bonus: float = 0.0
    deduct_bonus: float = 0.0
    new_register: int = 0
    new_depositor: int = 0

    # Revenue
    gross_gaming_revenue: float = 0.0
    net_profit: float = 0.0

    # Members
    active_member: int = 0
    pure_user: int = 0
    pure_member: int = 0
    churn_member: int = 0
    churn_rate: float = 0.0
    retention_rate: float = 0.0

    # Ratios
    avg_transaction_value: float = 0.0
    purchase_frequency: float = 0.0
    ggr_per_user: float = 0.0
    deposit_amount_per_user: float = 0.0
    winrate: float = 0.0
    withdraw_rate: float = 0.0

    # Automation / latency
    automation_transactions: int = 0
    manual_transactions: int = 0
    automation_amount: float = 0.0
    manual_amount: float = 0.0
    automation_rate: float = 0.0
    manual_rate: float = 0.0
    automation_amount_rate: float = 0.0
    overdue_transactions: int = 0
    automation_overdue: int = 0
    manual_overdue: int = 0
    overdue_rate: float = 0.0
    fast_transactions: int = 0
    fast_processing_rate: float = 0.0
    avg_processing_time: float = 0.0
    avg_processing_time_automation: float = 0.0
    avg_processing_time_manual: float = 0.0
    time_saved_hours: float = 0.0
    efficiency_gain: float = 0.0

    def get(self, key: str, default: Any = 0) -> Any:
        """Look up a metric by snake_case or camelCase name."""
        attr = _CAMEL_TO_FIELD.get(key, key)
        return getattr(self, attr, default)

    def to_dict(self) -> Dict[str, Any]:
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, float):
                value = round(value, 2)
            result[snake_to_camel(f.name)] = value
        return result


_CAMEL_TO_FIELD = {snake_to_camel(f.name): f.name for f in fields(KPISnapshot)}
SNAPSHOT_KEYS = frozenset(_CAMEL_TO_FIELD)
