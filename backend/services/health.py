"""
Health and Readiness Check Service

check_database_ready(): SELECT 1 with a short statement timeout on Postgres,
cached for a few seconds so a dead database does not stall every probe.
"""

import logging
import time
from typing import Optional, Tuple

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from models.database import db

logger = logging.getLogger(__name__)

# (result, timestamp)
_readiness_cache: Optional[Tuple[bool, float]] = None
_CACHE_TTL_SECONDS = 10


def reset_readiness_cache() -> None:
    global _readiness_cache
    _readiness_cache = None


def check_database_ready(timeout_ms: int = 500, use_cache: bool = True) -> bool:
    """
    True if the database answers SELECT 1 within `timeout_ms`.

    Uses an engine-level connection so request sessions are untouched.
    """
    global _readiness_cache

    if use_cache and _readiness_cache is not None:
        cached_result, cached_time = _readiness_cache
        age = time.time() - cached_time
        if age < _CACHE_TTL_SECONDS:
            logger.debug("Using cached readiness result: %s (age: %.1fs)", cached_result, age)
            return cached_result

    try:
        with db.engine.begin() as conn:
            if conn.dialect.name == 'postgresql':
                conn.execute(text(f"SET LOCAL statement_timeout = '{int(timeout_ms)}ms'"))
            conn.execute(text("SELECT 1"))
        result = True
    except SQLAlchemyError as e:
        result = False
        logger.warning("Database readiness check failed: %s", e)

    if use_cache:
        _readiness_cache = (result, time.time())

    return result
