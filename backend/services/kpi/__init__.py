"""
KPI Services Package

Pure KPI core shared by the analytics routes:
- calculator: rows -> KPISnapshot
- comparator: period A vs period B
- time_series: per-bucket snapshots for charts
- periods: previous-period resolution

Usage:
    from services.kpi import calculate_kpis, compare, build_time_series

    snapshot = calculate_kpis(rows, 'transaction', policy=policy)
    result = compare(snapshot_a.net_profit, snapshot_b.net_profit)
"""

from services.kpi.base import (
    KPISnapshot,
    SummaryRow,
    TransactionRow,
    safe_div,
)

from services.kpi.policy import DEFAULT_POLICY, KPIPolicy

from services.kpi.calculator import (
    calculate_kpis,
    daily_peak_hours,
    processing_distribution,
)

from services.kpi.comparator import (
    ComparisonResult,
    compare,
    compare_brands,
    compare_snapshots,
)

from services.kpi.registry import COMPARISON_METRICS

from services.kpi.time_series import build_time_series, to_chart_series

__all__ = [
    'KPISnapshot',
    'SummaryRow',
    'TransactionRow',
    'safe_div',
    'DEFAULT_POLICY',
    'KPIPolicy',
    'calculate_kpis',
    'daily_peak_hours',
    'processing_distribution',
    'ComparisonResult',
    'compare',
    'compare_brands',
    'compare_snapshots',
    'COMPARISON_METRICS',
    'build_time_series',
    'to_chart_series',
]
