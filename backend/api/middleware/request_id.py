"""
Request ID middleware - correlation id and start time for every request.

g.request_id     X-Request-ID header value, or a fresh uuid4
g.request_start  perf_counter() at request start, read by the response
                 envelope (meta.elapsedMs) and request logging
"""

import time
import uuid
from typing import Optional

from flask import Flask, g, request


def setup_request_id_middleware(app: Flask) -> None:

    @app.before_request
    def inject_request_id():
        g.request_id = request.headers.get('X-Request-ID') or str(uuid.uuid4())
        g.request_start = time.perf_counter()

    @app.after_request
    def add_request_id_header(response):
        if hasattr(g, 'request_id'):
            response.headers['X-Request-ID'] = g.request_id
        return response


def get_request_id() -> Optional[str]:
    return getattr(g, 'request_id', None)


def get_elapsed_ms() -> Optional[float]:
    """Milliseconds since the request started, None outside a request."""
    start = getattr(g, 'request_start', None)
    if start is None:
        return None
    return round((time.perf_counter() - start) * 1000, 2)
