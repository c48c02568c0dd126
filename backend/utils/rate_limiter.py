"""
Rate Limiter Configuration

Per-caller request limits for the analytics API.
Storage comes from RATELIMIT_STORAGE_URI (memory:// unless a Redis URL is set).

Key decisions:
- Caller email when the dashboard sends one (shared office IPs)
- IP-based key otherwise
"""

import logging

from flask import request

logger = logging.getLogger(__name__)

# Format: "X per period" where period is minute, hour, day
RATE_LIMITS = {
    "burst": "120 per minute",
    "hourly": "600 per hour",
}

DEFAULT_LIMITS = [RATE_LIMITS["burst"], RATE_LIMITS["hourly"]]


def get_rate_limit_key():
    email = (request.headers.get('x-user-email') or '').strip().lower()
    if email:
        return f"user:{email}"
    return f"ip:{request.remote_addr}"


def init_limiter(app):
    """
    Initialize Flask-Limiter with the app.

    RATELIMIT_ENABLED=False (TestConfig) turns every limit into a no-op.
    Returns the limiter instance for decorator use.
    """
    from flask_limiter import Limiter

    storage_uri = app.config.get('RATELIMIT_STORAGE_URI') or "memory://"
    default_limits = app.config.get('RATELIMIT_DEFAULT_LIMITS') or DEFAULT_LIMITS

    limiter = Limiter(
        key_func=get_rate_limit_key,
        app=app,
        default_limits=default_limits,
        storage_uri=storage_uri,
        key_prefix="rate_limit",
        # Return 429 with retry-after header
        headers_enabled=True,
    )

    logger.info("Rate limiter initialized with storage: %s", storage_uri.split('@')[-1])
    return limiter


def get_limiter():
    """The limiter registered by init_limiter(), or None."""
    from flask import current_app
    return getattr(current_app, 'limiter', None)
