"""
Auto-Approval Monitor Endpoint - automation coverage and processing times

Endpoints:
- /<currency>/auto-approval - deposit or withdraw automation KPIs and charts

Automation series drop rows before KPI_AUTOMATION_ROLLOUT_DATE. The overdue
chart is always weekly, whatever bucket the page asks for.
"""

import time

from flask import jsonify, request

from api.contracts import AutoApprovalParams
from api.serializers.response import success_envelope
from routes.analytics import analytics_bp
from routes.analytics._route_utils import (
    build_query_filter,
    caller_from_request,
    kpi_policy,
    log_error,
    log_success,
    require_currency,
    route_logger,
)
from services.data_source import DataSourceError, fetch_rows
from services.kpi.calculator import (
    KIND_TRANSACTION,
    calculate_kpis,
    daily_peak_hours,
    processing_distribution,
)
from services.kpi.time_series import BUCKET_WEEKLY, build_time_series, to_chart_series

logger = route_logger("auto_approval")


@analytics_bp.route("/<currency>/auto-approval", methods=["GET"])
def auto_approval(currency):
    """
    Automation KPIs for deposit or withdraw transactions.

    Query params: side (deposit|withdraw), line, year, month, startDate,
    endDate, bucket (daily|weekly|monthly|hourly) or isWeekly.

    Returns:
        {
            "kpis": {...KPISnapshot},
            "timeSeries": [...],
            "overdueTimeSeries": [...weekly],
            "processingDistribution": {min, q1, median, q3, max, count},
            "peakHours": [{date, peakHour, ...}],
            "charts": {automationRate, avgProcessingTimeAutomation, overdueTransactions}
        }
    """
    start = time.perf_counter()
    currency = require_currency(currency)
    params = AutoApprovalParams.model_validate(request.args.to_dict())
    caller = caller_from_request()
    policy = kpi_policy()
    qf = build_query_filter(currency, params, caller)

    try:
        rows = fetch_rows(params.side, qf)
    except DataSourceError as e:
        log_error(logger, "/auto-approval", start, e, {"currency": currency, "side": params.side})
        raise

    floor = policy.automation_rollout_date
    snapshot = calculate_kpis(rows, KIND_TRANSACTION, side=params.side, policy=policy)
    series = build_time_series(
        rows, params.bucket, kind=KIND_TRANSACTION, side=params.side, policy=policy, date_floor=floor,
    )
    overdue_series = build_time_series(
        rows, BUCKET_WEEKLY, kind=KIND_TRANSACTION, side=params.side, policy=policy, date_floor=floor,
    )
    automation_rows = [row for row in rows if floor is None or (row.date is not None and row.date >= floor)]

    log_success(logger, "/auto-approval", start, {
        "currency": currency,
        "side": params.side,
        "line": qf.line,
        "rows": len(rows),
        "buckets": len(series),
    })
    return jsonify(success_envelope({
        "kpis": snapshot.to_dict(),
        "timeSeries": series,
        "overdueTimeSeries": overdue_series,
        "processingDistribution": processing_distribution(
            automation_rows, automation_only=True, policy=policy
        ).to_dict(),
        "peakHours": daily_peak_hours(automation_rows, policy),
        "charts": {
            "automationRate": to_chart_series(series, "automationRate", "Automation Rate"),
            "avgProcessingTimeAutomation": to_chart_series(
                series, "avgProcessingTimeAutomation", "Avg Processing Time (Automation)"
            ),
            "overdueTransactions": to_chart_series(
                overdue_series, "automationOverdue", "Automation Overdue"
            ),
        },
    }, meta={
        "currency": currency,
        "side": params.side,
        "bucket": params.bucket,
        "automationRolloutDate": floor.isoformat() if floor else None,
    }))
