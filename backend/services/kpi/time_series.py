"""
Time-Series Builder - bucket rows, recompute KPIs per bucket.

Bucket keys (zero-padded so lexicographic order is chronological):
    daily    YYYY-MM-DD
    weekly   YYYY-Www   weeks start on Sunday; W01 is the week holding 1 Jan
    monthly  YYYY-MM
    hourly   HH:00      from the row's time; rows without time are skipped

Each bucket gets a full calculate_kpis() run over its own rows.
"""

from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

from services.kpi.calculator import KIND_TRANSACTION, SIDE_DEPOSIT, calculate_kpis
from services.kpi.policy import DEFAULT_POLICY, KPIPolicy
from utils.normalize import ValidationError

BUCKET_DAILY = 'daily'
BUCKET_WEEKLY = 'weekly'
BUCKET_MONTHLY = 'monthly'
BUCKET_HOURLY = 'hourly'
BUCKETS = (BUCKET_DAILY, BUCKET_WEEKLY, BUCKET_MONTHLY, BUCKET_HOURLY)


def _week_start(d: date) -> date:
    # date.weekday(): Monday=0 .. Sunday=6
    return d - timedelta(days=(d.weekday() + 1) % 7)


def week_key(d: date) -> str:
    first_week = _week_start(date(d.year, 1, 1))
    number = (_week_start(d) - first_week).days // 7 + 1
    return f"{d.year}-W{number:02d}"


def bucket_key(row, bucket: str) -> Optional[str]:
    """Bucket key for one row, None when the row cannot be placed."""
    if bucket == BUCKET_HOURLY:
        hour = getattr(row, 'hour', None)
        return None if hour is None else f"{hour:02d}:00"
    if row.date is None:
        return None
    if bucket == BUCKET_DAILY:
        return row.date.isoformat()
    if bucket == BUCKET_WEEKLY:
        return week_key(row.date)
    if bucket == BUCKET_MONTHLY:
        return f"{row.date.year:04d}-{row.date.month:02d}"
    raise ValidationError(f"Unknown bucket: {bucket!r}", field='bucket', received_value=bucket)


def build_time_series(
    rows: Iterable,
    bucket: str = BUCKET_DAILY,
    *,
    kind: str = KIND_TRANSACTION,
    side: str = SIDE_DEPOSIT,
    policy: KPIPolicy = DEFAULT_POLICY,
    date_floor: Optional[date] = None,
) -> List[Dict]:
    """
    Bucket rows and compute a snapshot per bucket.

    Args:
        date_floor: drop rows dated before this (automation rollout cutoff)

    Returns:
        [{'period': key, **snapshot.to_dict()}, ...] sorted by key
    """
    if bucket not in BUCKETS:
        raise ValidationError(f"Unknown bucket: {bucket!r}", field='bucket', received_value=bucket)

    grouped = defaultdict(list)
    for row in rows:
        if date_floor is not None and (row.date is None or row.date < date_floor):
            continue
        key = bucket_key(row, bucket)
        if key is not None:
            grouped[key].append(row)

    series = []
    for key in sorted(grouped):
        snapshot = calculate_kpis(grouped[key], kind, side=side, policy=policy)
        point = {'period': key}
        point.update(snapshot.to_dict())
        series.append(point)
    return series


def to_chart_series(series: List[Dict], field: str, name: Optional[str] = None) -> Dict:
    """
    Reshape one field of a time series for a chart.

    Returns:
        {'series': [{'name': ..., 'data': [...]}], 'categories': [period, ...]}
    """
    return {
        'series': [{
            'name': name or field,
            'data': [point.get(field, 0) for point in series],
        }],
        'categories': [point['period'] for point in series],
    }
