"""
Period Comparator - period A vs period B, per metric and per brand.

compare() is the single comparison rule:
    difference        = B - A
    percentageChange  = 0                       if A == 0 and B == 0
                      = +100 / -100             if A == 0 (sign of B)
                      = (B - A) / |A| * 100     otherwise

Negative baselines:
-100 -> 50 is +150%, -100 -> -150 is -50%.

The ALL-brands row compares the totals snapshots; it is never a reduction
over the per-brand comparisons.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from constants import LINE_ALL
from services.kpi.base import KPISnapshot
from services.kpi.calculator import KIND_SUMMARY, calculate_kpis
from services.kpi.policy import DEFAULT_POLICY, KPIPolicy
from services.kpi.registry import COMPARISON_METRICS, MetricSpec

COLOR_GOOD = 'green'
COLOR_BAD = 'red'
COLOR_NEUTRAL = 'gray'


@dataclass(frozen=True)
class ComparisonResult:
    period_a: float
    period_b: float
    difference: float
    percentage_change: float

    def to_dict(self) -> Dict[str, float]:
        return {
            'periodA': round(self.period_a, 2),
            'periodB': round(self.period_b, 2),
            'difference': round(self.difference, 2),
            'percentageChange': round(self.percentage_change, 2),
        }


def compare(value_a, value_b) -> ComparisonResult:
    """Compare one metric across two periods. None counts as 0."""
    a = value_a or 0
    b = value_b or 0
    difference = b - a

    if a == 0:
        if b == 0:
            pct = 0.0
        else:
            pct = 100.0 if b > 0 else -100.0
    else:
        pct = difference / abs(a) * 100

    return ComparisonResult(
        period_a=a,
        period_b=b,
        difference=difference,
        percentage_change=pct,
    )


def change_color(difference, inverse: bool = False) -> str:
    if not difference:
        return COLOR_NEUTRAL
    improved = difference < 0 if inverse else difference > 0
    return COLOR_GOOD if improved else COLOR_BAD


def compare_snapshots(
    snapshot_a: KPISnapshot,
    snapshot_b: KPISnapshot,
    metrics: Sequence[MetricSpec] = COMPARISON_METRICS,
) -> List[Dict]:
    """One row per metric, in registry order."""
    rows = []
    for metric in metrics:
        result = compare(snapshot_a.get(metric.key), snapshot_b.get(metric.key))
        row = {
            'metric': metric.label,
            'metricKey': metric.key,
            'type': metric.value_type,
            'inverse': metric.inverse,
        }
        row.update(result.to_dict())
        row['color'] = change_color(result.difference, metric.inverse)
        rows.append(row)
    return rows


def _rows_for_line(rows: Iterable, line: str) -> List:
    return [row for row in rows if row.line == line]


def compare_brands(
    rows_a: Sequence,
    rows_b: Sequence,
    brands: Sequence[str],
    *,
    members_a: Optional[Sequence] = None,
    members_b: Optional[Sequence] = None,
    metrics: Sequence[MetricSpec] = COMPARISON_METRICS,
    policy: KPIPolicy = DEFAULT_POLICY,
) -> List[Dict]:
    """
    Compare summary rows per brand plus an ALL total.

    Rows for brands outside `brands` are ignored, including in the total,
    so callers pass the access-filtered brand list.

    Returns:
        [{line: 'ALL', comparison: [...]}, {line: <brand>, comparison: [...]}, ...]
    """
    allowed = set(brands)
    rows_a = [row for row in rows_a if row.line in allowed]
    rows_b = [row for row in rows_b if row.line in allowed]
    if members_a is not None:
        members_a = [row for row in members_a if row.line in allowed]
    if members_b is not None:
        members_b = [row for row in members_b if row.line in allowed]

    def snapshot(rows, members, line=None):
        if line is not None:
            rows = _rows_for_line(rows, line)
            members = _rows_for_line(members, line) if members is not None else None
        return calculate_kpis(rows, KIND_SUMMARY, members=members, policy=policy)

    results = [{
        'line': LINE_ALL,
        'comparison': compare_snapshots(
            snapshot(rows_a, members_a), snapshot(rows_b, members_b), metrics
        ),
    }]
    for brand in brands:
        results.append({
            'line': brand,
            'comparison': compare_snapshots(
                snapshot(rows_a, members_a, brand), snapshot(rows_b, members_b, brand), metrics
            ),
        })
    return results
