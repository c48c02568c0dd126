"""
Error envelope middleware - one failure shape for every error.

{
    "success": false,
    "error": "Access to brand 'XYZ' is not permitted",
    "code": "FORBIDDEN",
    "requestId": "uuid",
    "field": "line"            # validation errors only
}

Mapping:
    ValidationError / pydantic ValidationError  -> 400 INVALID_PARAMS
    BrandAccessError                            -> 403 FORBIDDEN
    DataSourceError                             -> 500 DATA_SOURCE_ERROR
    HTTPException                               -> its own status
    anything else                               -> 500 INTERNAL_ERROR
"""

import logging

from flask import Flask, g, jsonify
from pydantic import ValidationError as PydanticValidationError
from werkzeug.exceptions import HTTPException

from services.brand_access import BrandAccessError
from services.data_source import DataSourceError
from utils.normalize import ValidationError

logger = logging.getLogger('api.middleware.error')

ERROR_CODES = {
    "INVALID_PARAMS": 400,
    "FORBIDDEN": 403,
    "NOT_FOUND": 404,
    "DATA_SOURCE_ERROR": 500,
    "INTERNAL_ERROR": 500,
}


def make_error_response(code: str, message: str, status_code: int = None, field: str = None):
    """
    Build a (response, status) tuple in the failure envelope.

    Status defaults from ERROR_CODES, falling back to 500.
    """
    request_id = getattr(g, 'request_id', None)
    if status_code is None:
        status_code = ERROR_CODES.get(code, 500)

    body = {
        "success": False,
        "error": message,
        "code": code,
        "requestId": request_id,
    }
    if field:
        body["field"] = field

    response = jsonify(body)
    if request_id:
        response.headers['X-Request-ID'] = request_id
    return response, status_code


def _pydantic_message(error: PydanticValidationError):
    first = error.errors()[0] if error.errors() else {}
    loc = first.get('loc') or ()
    field = str(loc[-1]) if loc else None
    message = first.get('msg', 'Invalid parameters')
    return (f"{field}: {message}" if field else message), field


def setup_error_handlers(app: Flask) -> None:

    @app.errorhandler(ValidationError)
    def handle_validation_error(error):
        logger.info("validation_error field=%s message=%s", error.field, error)
        return make_error_response("INVALID_PARAMS", str(error), field=error.field)

    @app.errorhandler(PydanticValidationError)
    def handle_pydantic_error(error):
        message, field = _pydantic_message(error)
        logger.info("validation_error field=%s message=%s", field, message)
        return make_error_response("INVALID_PARAMS", message, field=field)

    @app.errorhandler(BrandAccessError)
    def handle_access_error(error):
        logger.warning("access_denied message=%s", error)
        return make_error_response("FORBIDDEN", str(error))

    @app.errorhandler(DataSourceError)
    def handle_data_source_error(error):
        logger.error("data_source_error table=%s message=%s", error.table, error, exc_info=error)
        return make_error_response("DATA_SOURCE_ERROR", str(error))

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        # "Not Found" -> "NOT_FOUND"
        code = error.name.upper().replace(' ', '_')
        return make_error_response(code, error.description, status_code=error.code)

    @app.errorhandler(Exception)
    def handle_generic_error(error):
        logger.exception(
            "Unhandled error: %s", error,
            extra={
                "event": "unhandled_error",
                "request_id": getattr(g, 'request_id', None),
                "error_type": type(error).__name__,
            }
        )
        return make_error_response("INTERNAL_ERROR", "An unexpected error occurred")
