"""
Overview Endpoints - summary-table KPIs for one currency

Endpoints:
- /<currency>/overview - KPIs, churn vs previous period, time series
- /<currency>/overview/export - per-line KPI snapshot CSV
"""

import time
from typing import Optional

from flask import jsonify, request

from api.contracts import KPIFilterParams
from api.serializers.response import success_envelope
from constants import LINE_ALL, member_table_for, summary_table_for
from routes.analytics import analytics_bp
from routes.analytics._route_utils import (
    build_query_filter,
    caller_from_request,
    csv_response,
    kpi_policy,
    log_error,
    log_success,
    require_currency,
    route_logger,
)
from services.data_source import DataSourceError, fetch_rows
from services.export_service import snapshots_to_csv
from services.kpi.calculator import KIND_SUMMARY, calculate_kpis
from services.kpi.comparator import compare_snapshots
from services.kpi.periods import MODE_DAILY, previous_month, resolve_previous_period
from services.kpi.time_series import BUCKET_HOURLY, build_time_series, to_chart_series
from utils.filter_builder import QueryFilter
from utils.normalize import ValidationError

logger = route_logger("overview")

CHART_FIELDS = [
    ('depositAmount', 'Deposit Amount'),
    ('withdrawAmount', 'Withdraw Amount'),
    ('grossGamingRevenue', 'GGR'),
    ('depositCases', 'Deposit Cases'),
]


def previous_filter(qf: QueryFilter) -> Optional[QueryFilter]:
    """
    The churn comparison window for a filter.

    year+month -> previous calendar month; date range -> resolved previous
    period; anything else has no previous window.
    """
    if qf.year is not None and qf.month is not None:
        prev_year, prev_month = previous_month(qf.year, qf.month)
        return qf.replace(year=prev_year, month=prev_month)
    if qf.date_from is not None and qf.date_to is not None:
        prev = resolve_previous_period(MODE_DAILY, qf.date_from, qf.date_to)
        return qf.replace(date_from=prev.start, date_to=prev.end)
    return None


def _fetch_period(currency: str, qf: QueryFilter):
    rows = fetch_rows(summary_table_for(currency), qf)
    members = fetch_rows(member_table_for(currency), qf.replace(min_deposit_cases=1))
    return rows, members


@analytics_bp.route("/<currency>/overview", methods=["GET"])
def overview(currency):
    """
    Summary KPIs for the selected slicers.

    Returns:
        {
            "kpis": {...KPISnapshot},
            "previousKpis": {...} | null,
            "comparison": [...metric rows, previous vs current],
            "timeSeries": [{"period": ..., ...KPISnapshot}],
            "charts": {"depositAmount": {"series": [...], "categories": [...]}, ...}
        }
    """
    start = time.perf_counter()
    currency = require_currency(currency)
    params = KPIFilterParams.model_validate(request.args.to_dict())
    if params.bucket == BUCKET_HOURLY:
        raise ValidationError("Summary data has no hourly breakdown", field='bucket', received_value=params.bucket)
    caller = caller_from_request()
    policy = kpi_policy()
    qf = build_query_filter(currency, params, caller)
    prev_qf = previous_filter(qf)

    try:
        rows, members = _fetch_period(currency, qf)
        prev_rows, prev_members = _fetch_period(currency, prev_qf) if prev_qf else ([], None)
    except DataSourceError as e:
        log_error(logger, "/overview", start, e, {"currency": currency, "line": qf.line})
        raise

    snapshot = calculate_kpis(
        rows, KIND_SUMMARY, members=members, previous_members=prev_members, policy=policy
    )
    previous = None
    comparison = []
    if prev_qf is not None:
        previous = calculate_kpis(prev_rows, KIND_SUMMARY, members=prev_members, policy=policy)
        comparison = compare_snapshots(previous, snapshot)

    series = build_time_series(rows, params.bucket, kind=KIND_SUMMARY, policy=policy)
    charts = {field: to_chart_series(series, field, label) for field, label in CHART_FIELDS}

    log_success(logger, "/overview", start, {
        "currency": currency,
        "line": qf.line,
        "rows": len(rows),
        "buckets": len(series),
    })
    return jsonify(success_envelope({
        "kpis": snapshot.to_dict(),
        "previousKpis": previous.to_dict() if previous is not None else None,
        "comparison": comparison,
        "timeSeries": series,
        "charts": charts,
    }, meta={"currency": currency, "line": qf.line, "bucket": params.bucket}))


@analytics_bp.route("/<currency>/overview/export", methods=["GET"])
def overview_export(currency):
    """CSV with one KPI row for ALL plus one per visible brand."""
    start = time.perf_counter()
    currency = require_currency(currency)
    params = KPIFilterParams.model_validate(request.args.to_dict())
    caller = caller_from_request()
    policy = kpi_policy()
    qf = build_query_filter(currency, params, caller)

    try:
        rows, members = _fetch_period(currency, qf)
    except DataSourceError as e:
        log_error(logger, "/overview/export", start, e, {"currency": currency})
        raise

    snapshots = {}
    if qf.brand is None:
        snapshots[LINE_ALL] = calculate_kpis(rows, KIND_SUMMARY, members=members, policy=policy)
    for line in sorted({row.line for row in rows if row.line}):
        snapshots[line] = calculate_kpis(
            [row for row in rows if row.line == line],
            KIND_SUMMARY,
            members=[m for m in members if m.line == line],
            policy=policy,
        )

    log_success(logger, "/overview/export", start, {"currency": currency, "lines": len(snapshots)})
    return csv_response(snapshots_to_csv(snapshots), f"{currency.lower()}_overview.csv")
