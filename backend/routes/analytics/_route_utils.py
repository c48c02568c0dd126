"""
Shared route utilities for analytics endpoints.

Goals:
- Structured logger usage with elapsed timings
- One place that turns request headers into a CallerContext
- One place that turns slicer params into a QueryFilter
"""

import time
import logging
from typing import Any, Dict, Optional

from flask import Response, current_app, request

from constants import is_valid_currency, normalize_currency
from services.brand_access import CallerContext, resolve_line_scope
from services.kpi.policy import KPIPolicy
from utils.filter_builder import QueryFilter
from utils.normalize import ValidationError, to_str, to_str_list_json

ALLOWED_BRANDS_HEADER = 'x-user-allowed-brands'
ROLE_HEADER = 'x-user-role'
USER_HEADER = 'x-user-email'


def route_logger(name: str) -> logging.Logger:
    """Return namespaced logger for analytics routes."""
    return logging.getLogger(f"analytics.{name}")


def elapsed_ms(start_time: float) -> int:
    """Elapsed milliseconds since a perf_counter() start value."""
    return int((time.perf_counter() - start_time) * 1000)


def log_success(
    logger: logging.Logger,
    route: str,
    start_time: float,
    details: Optional[Dict[str, Any]] = None,
) -> None:
    payload = {"route": route, "elapsed_ms": elapsed_ms(start_time)}
    if details:
        payload.update(details)
    logger.info("route_success %s", payload)


def log_error(
    logger: logging.Logger,
    route: str,
    start_time: float,
    err: Exception,
    details: Optional[Dict[str, Any]] = None,
) -> None:
    payload = {"route": route, "elapsed_ms": elapsed_ms(start_time)}
    if details:
        payload.update(details)
    logger.exception("route_error %s err=%s", payload, err)


def require_currency(currency: str) -> str:
    """Normalize the <currency> path segment; 400 on unknown values."""
    if not is_valid_currency(currency):
        raise ValidationError(f"Unknown currency: {currency!r}", field='currency', received_value=currency)
    return normalize_currency(currency)


def caller_from_request() -> CallerContext:
    """
    Build the caller from request headers.

    x-user-allowed-brands: JSON string array; absent or null = unrestricted
    x-user-role:           role name (admin, manager_myr, ...)
    """
    allowed = to_str_list_json(request.headers.get(ALLOWED_BRANDS_HEADER), field=ALLOWED_BRANDS_HEADER)
    role = to_str(request.headers.get(ROLE_HEADER))
    return CallerContext(role=role, allowed_brands=allowed)


def actor_from_request(fallback: Optional[str] = None) -> Optional[str]:
    return to_str(request.headers.get(USER_HEADER)) or fallback


def kpi_policy() -> KPIPolicy:
    return KPIPolicy.from_config(current_app.config)


def build_query_filter(currency: str, params, caller: CallerContext, **extra) -> QueryFilter:
    """
    QueryFilter for the slicer params (line, year, month, start_date, end_date).

    Raises:
        BrandAccessError: requested line outside the caller's allow-list
        ValidationError: date range mixed with year/month
    """
    line, lines = resolve_line_scope(getattr(params, 'line', None), caller)
    return QueryFilter(
        currency=currency,
        line=line,
        lines=lines,
        year=getattr(params, 'year', None),
        month=getattr(params, 'month', None),
        date_from=getattr(params, 'start_date', None),
        date_to=getattr(params, 'end_date', None),
        **extra,
    )


def csv_response(content: str, filename: str) -> Response:
    return Response(
        content,
        mimetype='text/csv',
        headers={'Content-Disposition': f'attachment; filename="{filename}"'},
    )
