"""
Business Performance Target Endpoints

Endpoints:
- GET  /targets - active quarterly targets for a currency
- POST /targets - create or update one target (admin / currency manager)
- GET  /targets/audit-log - latest audit rows
- GET  /<currency>/targets/achievement - actuals vs targets per brand
"""

import time

from flask import jsonify, request

from api.contracts import AuditLogParams, TargetAchievementParams, TargetListParams, TargetPayload
from api.serializers.response import success_envelope
from constants import member_table_for, summary_table_for
from routes.analytics import analytics_bp
from routes.analytics._route_utils import (
    actor_from_request,
    caller_from_request,
    kpi_policy,
    log_error,
    log_success,
    require_currency,
    route_logger,
)
from services.brand_access import filter_brands_by_user
from services.data_source import DataSourceError, fetch_distinct, fetch_rows
from services.kpi.calculator import KIND_SUMMARY, calculate_kpis
from services.kpi.periods import quarter_date_range
from services.target_service import achievement_rows, list_audit_log, list_targets, save_target
from utils.filter_builder import QueryFilter
from utils.normalize import ValidationError

logger = route_logger("targets")


@analytics_bp.route("/targets", methods=["GET"])
def get_targets():
    """Query params: currency (required), year, quarter."""
    start = time.perf_counter()
    params = TargetListParams.model_validate(request.args.to_dict())
    currency = require_currency(params.currency)
    caller = caller_from_request()

    targets = list_targets(currency, params.year, params.quarter, caller)

    log_success(logger, "/targets", start, {"currency": currency, "count": len(targets)})
    return jsonify(success_envelope({"targets": targets}, meta={"currency": currency}))


@analytics_bp.route("/targets", methods=["POST"])
def post_target():
    """
    Body: {currency, line, year, quarter, targetGgr?, ..., reason?, userEmail?}

    The x-user-email header wins over userEmail for the audit actor.
    """
    start = time.perf_counter()
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object", field='body')
    payload = TargetPayload.model_validate(body)
    currency = require_currency(payload.currency)
    caller = caller_from_request()
    changed_by = actor_from_request(payload.user_email)

    values = payload.model_dump()
    values['currency'] = currency
    try:
        result = save_target(values, caller, changed_by=changed_by)
    except DataSourceError as e:
        log_error(logger, "POST /targets", start, e, {"currency": currency, "line": payload.line})
        raise

    log_success(logger, "POST /targets", start, {
        "currency": currency,
        "line": payload.line,
        "action": result['action'],
        "changed": len(result['changedFields']),
    })
    status = 201 if result['action'] == 'CREATE' else 200
    return jsonify(success_envelope(result)), status


@analytics_bp.route("/targets/audit-log", methods=["GET"])
def get_audit_log():
    """Query params: currency (optional), limit (1-1000, default 100)."""
    start = time.perf_counter()
    params = AuditLogParams.model_validate(request.args.to_dict())
    currency = require_currency(params.currency) if params.currency else None

    entries = list_audit_log(currency, params.limit)

    log_success(logger, "/targets/audit-log", start, {"currency": currency, "count": len(entries)})
    return jsonify(success_envelope({"entries": entries}, meta={"currency": currency}))


def _achievement_period(params: TargetAchievementParams):
    """(start, end, ratio): the quarter itself, or a date range prorated by days."""
    quarter_start, quarter_end = quarter_date_range(params.year, params.quarter)
    if params.start_date is None:
        return quarter_start, quarter_end, 1.0
    days_in_period = (params.end_date - params.start_date).days + 1
    days_in_quarter = (quarter_end - quarter_start).days + 1
    return params.start_date, params.end_date, days_in_period / days_in_quarter


@analytics_bp.route("/<currency>/targets/achievement", methods=["GET"])
def get_target_achievement(currency):
    """
    Actual GGR, deposit cases, deposit amount and active members per visible
    brand against the quarterly bp_target.

    Query params: year, quarter (required); startDate/endDate for daily mode.
    """
    start = time.perf_counter()
    currency = require_currency(currency)
    params = TargetAchievementParams.model_validate(request.args.to_dict())
    caller = caller_from_request()
    policy = kpi_policy()
    period_start, period_end, ratio = _achievement_period(params)

    summary_table = summary_table_for(currency)
    try:
        brands = filter_brands_by_user(
            fetch_distinct(summary_table, 'line', QueryFilter(currency=currency)),
            caller.allowed_brands,
        )
        qf = QueryFilter(
            currency=currency, lines=tuple(brands),
            date_from=period_start, date_to=period_end,
        )
        rows = fetch_rows(summary_table, qf)
        members = fetch_rows(member_table_for(currency), qf.replace(min_deposit_cases=1))
    except DataSourceError as e:
        log_error(logger, "/targets/achievement", start, e, {"currency": currency})
        raise

    snapshots = {
        brand: calculate_kpis(
            [row for row in rows if row.line == brand], KIND_SUMMARY,
            members=[member for member in members if member.line == brand],
            policy=policy,
        )
        for brand in brands
    }
    total = calculate_kpis(rows, KIND_SUMMARY, members=members, policy=policy)
    details = achievement_rows(currency, params.year, params.quarter, snapshots, total, ratio)

    log_success(logger, "/targets/achievement", start, {
        "currency": currency,
        "brands": len(brands),
        "ratio": round(ratio, 4),
    })
    return jsonify(success_envelope({
        "details": details,
        "period": {"start": period_start.isoformat(), "end": period_end.isoformat()},
        "targetRatio": round(ratio, 4),
    }, meta={"currency": currency, "year": params.year, "quarter": params.quarter}))
