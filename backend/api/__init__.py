"""
API package - HTTP boundary helpers.

This package provides:
- Pydantic param models (api.contracts)
- Global middleware (request_id, error_envelope, request_logging)
- Response envelope helpers (api.serializers)
"""
