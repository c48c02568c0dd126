"""
KPI Comparison Endpoints - period A vs period B

Endpoints:
- /<currency>/kpi-comparison - per-metric comparison for one line (or ALL)
- /<currency>/kpi-comparison/export - same rows as CSV
- /<currency>/brand-comparison - per-brand comparison plus ALL total
- /<currency>/brand-comparison/export - same as CSV

Period totals come from blue_whale_{cur}_summary; active members from
blue_whale_{cur} rows with deposit_cases > 0. Period A and B are fetched
one after the other inside the request.
"""

import time

from flask import jsonify, request

from api.contracts import ComparisonParams
from api.serializers.response import success_envelope
from constants import member_table_for, summary_table_for
from routes.analytics import analytics_bp
from routes.analytics._route_utils import (
    caller_from_request,
    csv_response,
    kpi_policy,
    log_error,
    log_success,
    require_currency,
    route_logger,
)
from services.brand_access import filter_brands_by_user, resolve_line_scope
from services.data_source import DataSourceError, fetch_distinct, fetch_rows
from services.export_service import brand_comparison_to_csv, comparison_to_csv
from services.kpi.calculator import KIND_SUMMARY, calculate_kpis
from services.kpi.comparator import compare_brands, compare_snapshots
from utils.filter_builder import QueryFilter

logger = route_logger("comparison")


def _period_filters(currency: str, params: ComparisonParams, line, lines):
    qf_a = QueryFilter(
        currency=currency, line=line, lines=lines,
        date_from=params.period_a_start, date_to=params.period_a_end,
    )
    qf_b = qf_a.replace(date_from=params.period_b_start, date_to=params.period_b_end)
    return qf_a, qf_b


def _fetch(currency: str, qf: QueryFilter):
    rows = fetch_rows(summary_table_for(currency), qf)
    members = fetch_rows(member_table_for(currency), qf.replace(min_deposit_cases=1))
    return rows, members


def _period_meta(params: ComparisonParams):
    return {
        "periodA": {"start": params.period_a_start.isoformat(), "end": params.period_a_end.isoformat()},
        "periodB": {"start": params.period_b_start.isoformat(), "end": params.period_b_end.isoformat()},
    }


def _kpi_comparison_rows(currency: str):
    start = time.perf_counter()
    params = ComparisonParams.model_validate(request.args.to_dict())
    caller = caller_from_request()
    policy = kpi_policy()
    line, lines = resolve_line_scope(params.line, caller)
    qf_a, qf_b = _period_filters(currency, params, line, lines)

    try:
        rows_a, members_a = _fetch(currency, qf_a)
        rows_b, members_b = _fetch(currency, qf_b)
    except DataSourceError as e:
        log_error(logger, "/kpi-comparison", start, e, {"currency": currency, "line": line})
        raise

    snapshot_a = calculate_kpis(rows_a, KIND_SUMMARY, members=members_a, policy=policy)
    snapshot_b = calculate_kpis(rows_b, KIND_SUMMARY, members=members_b, policy=policy)
    rows = compare_snapshots(snapshot_a, snapshot_b)

    log_success(logger, "/kpi-comparison", start, {
        "currency": currency,
        "line": line,
        "rows_a": len(rows_a),
        "rows_b": len(rows_b),
    })
    return params, line, rows


@analytics_bp.route("/<currency>/kpi-comparison", methods=["GET"])
def kpi_comparison(currency):
    """
    Compare every registry metric between two date ranges.

    Query params: line, periodAStart, periodAEnd, periodBStart, periodBEnd
    (all four dates required).
    """
    currency = require_currency(currency)
    params, line, rows = _kpi_comparison_rows(currency)
    data = {"line": line, "comparisonData": rows}
    data.update(_period_meta(params))
    return jsonify(success_envelope(data, meta={"currency": currency}))


@analytics_bp.route("/<currency>/kpi-comparison/export", methods=["GET"])
def kpi_comparison_export(currency):
    currency = require_currency(currency)
    params, line, rows = _kpi_comparison_rows(currency)
    filename = (
        f"{currency.lower()}_kpi_comparison_{params.period_a_start.isoformat()}_"
        f"{params.period_b_end.isoformat()}.csv"
    )
    display_currency = currency if params.formatted else None
    return csv_response(comparison_to_csv(rows, line=line, currency=display_currency), filename)


def _brand_comparison(currency: str):
    start = time.perf_counter()
    params = ComparisonParams.model_validate(request.args.to_dict())
    caller = caller_from_request()
    policy = kpi_policy()

    summary_table = summary_table_for(currency)
    try:
        all_brands = fetch_distinct(summary_table, 'line', QueryFilter(currency=currency))
        brands = filter_brands_by_user(all_brands, caller.allowed_brands)
        qf_a, qf_b = _period_filters(currency, params, None, tuple(brands))
        rows_a, members_a = _fetch(currency, qf_a)
        rows_b, members_b = _fetch(currency, qf_b)
    except DataSourceError as e:
        log_error(logger, "/brand-comparison", start, e, {"currency": currency})
        raise

    results = compare_brands(
        rows_a, rows_b, brands,
        members_a=members_a, members_b=members_b, policy=policy,
    )
    log_success(logger, "/brand-comparison", start, {"currency": currency, "brands": len(brands)})
    return params, brands, results


@analytics_bp.route("/<currency>/brand-comparison", methods=["GET"])
def brand_comparison(currency):
    """Per-brand comparison for every brand the caller can see, plus ALL."""
    currency = require_currency(currency)
    params, brands, results = _brand_comparison(currency)
    data = {"brands": brands, "results": results}
    data.update(_period_meta(params))
    return jsonify(success_envelope(data, meta={"currency": currency}))


@analytics_bp.route("/<currency>/brand-comparison/export", methods=["GET"])
def brand_comparison_export(currency):
    currency = require_currency(currency)
    params, _, results = _brand_comparison(currency)
    display_currency = currency if params.formatted else None
    return csv_response(
        brand_comparison_to_csv(results, currency=display_currency),
        f"{currency.lower()}_brand_comparison.csv",
    )
