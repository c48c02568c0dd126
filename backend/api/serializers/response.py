"""
Response envelope helpers.

Success shape shared by every analytics route:
{
    "success": true,
    "data": {...},
    "meta": {"requestId": "...", "elapsedMs": 12.3, ...}
}
"""

from typing import Any, Dict, List, Optional

from flask import g

from api.middleware.request_id import get_elapsed_ms


def success_envelope(
    data: Any,
    meta: Optional[Dict[str, Any]] = None,
    warnings: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """
    Build a standardized success response envelope.

    requestId and elapsedMs are added to meta when a request is active.
    """
    meta = dict(meta or {})
    if hasattr(g, 'request_id'):
        meta['requestId'] = g.request_id
    elapsed = get_elapsed_ms()
    if elapsed is not None:
        meta['elapsedMs'] = elapsed

    response = {"success": True, "data": data, "meta": meta}
    if warnings:
        response['warnings'] = warnings
    return response
