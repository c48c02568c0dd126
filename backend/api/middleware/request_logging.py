"""
Request logging middleware - sampled access log for /api requests.

Config keys (from env via config.Config):
  - REQUEST_LOG_ENABLED (default: true)
  - REQUEST_LOG_SAMPLE_RATE (default: 0.0)
  - REQUEST_LOG_ENDPOINTS (comma-separated path prefixes to always log)
"""

import logging
import random
from typing import List

from flask import Flask, g, request

from api.middleware.request_id import get_elapsed_ms
from utils.normalize import ValidationError, to_float

logger = logging.getLogger("api.request")


def _parse_watchlist(raw: str) -> List[str]:
    if not raw:
        return []
    return [p.strip() for p in raw.split(",") if p.strip()]


def _should_log(path: str, watchlist: List[str], sample_rate: float) -> bool:
    if any(path.startswith(prefix) for prefix in watchlist):
        return True
    if sample_rate <= 0:
        return False
    if sample_rate >= 1:
        return True
    return random.random() <= sample_rate


def setup_request_logging_middleware(app: Flask) -> None:
    if not app.config.get("REQUEST_LOG_ENABLED", True):
        return

    try:
        sample_rate = to_float(app.config.get("REQUEST_LOG_SAMPLE_RATE"), default=0.0)
    except ValidationError:
        logger.warning("Invalid REQUEST_LOG_SAMPLE_RATE=%r, sampling disabled",
                       app.config.get("REQUEST_LOG_SAMPLE_RATE"))
        sample_rate = 0.0
    watchlist = _parse_watchlist(app.config.get("REQUEST_LOG_ENDPOINTS", ""))

    @app.after_request
    def _log_request(response):
        path = request.path
        if not path.startswith("/api"):
            return response
        if not _should_log(path, watchlist, sample_rate):
            return response

        logger.info(
            "api_request path=%s method=%s status=%s duration_ms=%s request_id=%s",
            path,
            request.method,
            response.status_code,
            get_elapsed_ms(),
            getattr(g, "request_id", None),
        )
        return response
