"""
KPI Registry - ordered metric definitions for comparisons and exports.

Keys are KPISnapshot camelCase names. `inverse` marks metrics where a
decrease is good news (withdrawals, withdraw rate, winrate).

Usage:
    from services.kpi.registry import COMPARISON_METRICS, get_metric

    for metric in COMPARISON_METRICS:
        value = snapshot.get(metric.key)
"""

from dataclasses import dataclass
from typing import Dict, List

from services.kpi.base import SNAPSHOT_KEYS

TYPE_INTEGER = 'integer'
TYPE_AMOUNT = 'amount'
TYPE_PERCENTAGE = 'percentage'
TYPE_DECIMAL = 'decimal'


@dataclass(frozen=True)
class MetricSpec:
    key: str
    label: str
    value_type: str
    inverse: bool = False


# =============================================================================
# METRIC REGISTRY
# =============================================================================

# Explicit order - comparison table and CSV columns rely on this
COMPARISON_ORDER = [
    'activeMember',
    'newRegister',
    'newDepositor',
    'pureMember',
    'depositCases',
    'depositAmount',
    'withdrawCases',
    'withdrawAmount',
    'addBonus',
    'deductBonus',
    'addTransaction',
    'deductTransaction',
    'grossGamingRevenue',
    'netProfit',
    'withdrawRate',
    'winrate',
    'avgTransactionValue',
    'ggrPerUser',
    'depositAmountPerUser',
    'purchaseFrequency',
]

METRIC_REGISTRY: Dict[str, MetricSpec] = {
    'activeMember': MetricSpec('activeMember', 'Active Member', TYPE_INTEGER),
    'newRegister': MetricSpec('newRegister', 'New Register', TYPE_INTEGER),
    'newDepositor': MetricSpec('newDepositor', 'New Depositor', TYPE_INTEGER),
    'pureMember': MetricSpec('pureMember', 'Pure Member', TYPE_INTEGER),
    'depositCases': MetricSpec('depositCases', 'Deposit Cases', TYPE_INTEGER),
    'depositAmount': MetricSpec('depositAmount', 'Deposit Amount', TYPE_AMOUNT),
    'withdrawCases': MetricSpec('withdrawCases', 'Withdraw Cases', TYPE_INTEGER, inverse=True),
    'withdrawAmount': MetricSpec('withdrawAmount', 'Withdraw Amount', TYPE_AMOUNT, inverse=True),
    'addBonus': MetricSpec('addBonus', 'Add Bonus', TYPE_AMOUNT),
    'deductBonus': MetricSpec('deductBonus', 'Deduct Bonus', TYPE_AMOUNT),
    'addTransaction': MetricSpec('addTransaction', 'Add Transaction', TYPE_AMOUNT),
    'deductTransaction': MetricSpec('deductTransaction', 'Deduct Transaction', TYPE_AMOUNT),
    'grossGamingRevenue': MetricSpec('grossGamingRevenue', 'Gross Gaming Revenue (GGR)', TYPE_AMOUNT),
    'netProfit': MetricSpec('netProfit', 'Net Profit', TYPE_AMOUNT),
    'withdrawRate': MetricSpec('withdrawRate', 'Withdraw Rate', TYPE_PERCENTAGE, inverse=True),
    'winrate': MetricSpec('winrate', 'Winrate', TYPE_PERCENTAGE, inverse=True),
    'avgTransactionValue': MetricSpec('avgTransactionValue', 'Average Transaction Value (ATV)', TYPE_AMOUNT),
    'ggrPerUser': MetricSpec('ggrPerUser', 'GGR User', TYPE_AMOUNT),
    'depositAmountPerUser': MetricSpec('depositAmountPerUser', 'DA User', TYPE_AMOUNT),
    'purchaseFrequency': MetricSpec('purchaseFrequency', 'DC User', TYPE_DECIMAL),
}

COMPARISON_METRICS: List[MetricSpec] = [METRIC_REGISTRY[key] for key in COMPARISON_ORDER]

# Fail at import if a metric points at a field KPISnapshot does not have
_unknown = [key for key in METRIC_REGISTRY if key not in SNAPSHOT_KEYS]
if _unknown:
    raise RuntimeError(f"Metrics not on KPISnapshot: {_unknown}")


def get_metric(key: str) -> MetricSpec:
    """Look up a metric by camelCase key; KeyError if unknown."""
    return METRIC_REGISTRY[key]


def list_metric_keys() -> List[str]:
    return list(COMPARISON_ORDER)
