"""
Flask Response Utilities

HTTP response helpers shared by the validation layer and the application
error handlers. The validation error payload is a wire contract with existing
storefront clients, so it is serialized explicitly (compact separators, fixed
key order) rather than through the application's JSON provider, whose key
sorting and indentation depend on configuration.
"""

import json
from typing import Any, Dict, Iterable, Optional

from flask import Response

HTTP_BAD_REQUEST = 400
HTTP_NOT_FOUND = 404
HTTP_INTERNAL_SERVER_ERROR = 500

JSON_MIMETYPE = 'application/json'
VALIDATION_FAILED_MESSAGE = 'Validation failed'


def json_response(payload: Dict[str, Any], status_code: int) -> Response:
    """
    Serialize ``payload`` into a JSON response, preserving key order.

    Args:
        payload: JSON-serializable mapping
        status_code: HTTP status code

    Returns:
        Flask Response with ``application/json`` body
    """
    body = json.dumps(payload, separators=(',', ':'), ensure_ascii=False)
    return Response(body, status=status_code, mimetype=JSON_MIMETYPE)


def error_response(message: str, status_code: int, errors: Optional[Dict[str, str]] = None) -> Response:
    """Standard ``{"success": false, "message": ...}`` error envelope."""
    payload: Dict[str, Any] = {'success': False, 'message': message}
    if errors is not None:
        payload['errors'] = errors
    return json_response(payload, status_code)


def create_validation_error_response(errors: Iterable[Any]) -> Response:
    """
    Build the 400 response returned for any rejected request body.

    Errors are folded into a ``{field: message}`` object; when a field
    appears more than once the last message wins.

    Args:
        errors: Iterable of objects exposing ``field`` and ``message``

    Returns:
        Response with status 400 and body
        ``{"success":false,"message":"Validation failed","errors":{...}}``
    """
    folded: Dict[str, str] = {}
    for error in errors:
        folded[error.field] = error.message

    return error_response(VALIDATION_FAILED_MESSAGE, HTTP_BAD_REQUEST, errors=folded)


__all__ = [
    'HTTP_BAD_REQUEST',
    'HTTP_NOT_FOUND',
    'HTTP_INTERNAL_SERVER_ERROR',
    'VALIDATION_FAILED_MESSAGE',
    'json_response',
    'error_response',
    'create_validation_error_response',
]
