"""
Slicer Options Endpoint

Endpoints:
- /<currency>/slicer-options - lines, years, months, month date ranges, defaults
"""

import time

from flask import jsonify, request

from api.contracts import SlicerOptionsParams
from api.serializers.response import success_envelope
from routes.analytics import analytics_bp
from routes.analytics._route_utils import (
    caller_from_request,
    log_error,
    log_success,
    require_currency,
    route_logger,
)
from services.data_source import DataSourceError
from services.slicer_service import resolve_slicer_options

logger = route_logger("slicers")


@analytics_bp.route("/<currency>/slicer-options", methods=["GET"])
def slicer_options(currency):
    start = time.perf_counter()
    currency = require_currency(currency)
    params = SlicerOptionsParams.model_validate(request.args.to_dict())
    caller = caller_from_request()

    try:
        options = resolve_slicer_options(currency, caller.allowed_brands, table=params.table)
    except DataSourceError as e:
        log_error(logger, "/slicer-options", start, e, {"currency": currency})
        raise

    log_success(logger, "/slicer-options", start, {
        "currency": currency,
        "table": params.table,
        "lines": len(options["lines"]),
    })
    return jsonify(success_envelope(options))
