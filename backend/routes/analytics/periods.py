"""
Previous Period Endpoint - which window a page compares against

Endpoints:
- /<currency>/previous-period - comparison window, label and daily averages
"""

import time

from flask import jsonify, request

from api.contracts import PreviousPeriodParams
from api.serializers.response import success_envelope
from constants import summary_table_for
from routes.analytics import analytics_bp
from routes.analytics._route_utils import (
    caller_from_request,
    kpi_policy,
    log_error,
    log_success,
    require_currency,
    route_logger,
)
from services.brand_access import resolve_line_scope
from services.data_source import DataSourceError, fetch_max_date, fetch_rows
from services.kpi.calculator import KIND_SUMMARY, calculate_kpis
from services.kpi.periods import average_daily, comparison_label, resolve_previous_period
from utils.filter_builder import QueryFilter

logger = route_logger("periods")

AVERAGED_FIELDS = ('depositAmount', 'depositCases', 'grossGamingRevenue')


def _daily_averages(snapshot, start, end):
    return {key: round(average_daily(snapshot.get(key), start, end), 2) for key in AVERAGED_FIELDS}


@analytics_bp.route("/<currency>/previous-period", methods=["GET"])
def previous_period(currency):
    """
    Resolve the comparison window for startDate..endDate.

    Query params:
        mode: Quarter | Daily
        startDate, endDate: current window (required)
        quarter, year: required for Quarter mode
        table: table whose latest date decides quarter completeness

    Returns:
        {
            "prevStartDate", "prevEndDate", "comparisonMode", "label",
            "averageDaily": {"current": {...}, "previous": {...}}
        }
    """
    start = time.perf_counter()
    currency = require_currency(currency)
    params = PreviousPeriodParams.model_validate(request.args.to_dict())
    caller = caller_from_request()
    policy = kpi_policy()

    try:
        max_date = fetch_max_date(params.table, QueryFilter(currency=currency))
        prev = resolve_previous_period(
            params.mode, params.start_date, params.end_date,
            max_date=max_date, quarter=params.quarter, year=params.year,
        )
        line, lines = resolve_line_scope(params.line, caller)
        qf = QueryFilter(
            currency=currency, line=line, lines=lines,
            date_from=params.start_date, date_to=params.end_date,
        )
        current_rows = fetch_rows(summary_table_for(currency), qf)
        previous_rows = fetch_rows(
            summary_table_for(currency), qf.replace(date_from=prev.start, date_to=prev.end)
        )
    except DataSourceError as e:
        log_error(logger, "/previous-period", start, e, {"currency": currency, "mode": params.mode})
        raise

    current = calculate_kpis(current_rows, KIND_SUMMARY, policy=policy)
    previous = calculate_kpis(previous_rows, KIND_SUMMARY, policy=policy)

    data = prev.to_dict()
    data["label"] = comparison_label(prev.comparison_mode, params.quarter, params.year)
    data["averageDaily"] = {
        "current": _daily_averages(current, params.start_date, params.end_date),
        "previous": _daily_averages(previous, prev.start, prev.end),
    }

    log_success(logger, "/previous-period", start, {
        "currency": currency,
        "mode": params.mode,
        "comparison_mode": prev.comparison_mode,
    })
    return jsonify(success_envelope(data, meta={
        "currency": currency,
        "maxDate": max_date.isoformat() if max_date else None,
    }))
