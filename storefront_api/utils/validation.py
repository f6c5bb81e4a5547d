"""
Request validation utilities for storefront API resource handlers.

This module is the validation pipeline that sits in front of create/update
and bulk-action endpoints:

- ``validate_request`` checks a single-resource body against the field
  rules registered for its resource type
- ``validate_bulk_request`` checks ``{action, ids, data?}`` bodies and asks
  the schema provider whether the action is legal for the resource
- ``validate_and_sanitize`` additionally strips dangerous markup from an
  accepted body
- ``with_validation`` / ``with_bulk_validation`` wrap Flask views so they
  only run for valid bodies

None of the public functions raise: malformed bodies, unknown resource types
and exceptions from the schema provider are all reported as a failed
``ValidationResult``.
"""

from dataclasses import dataclass
from functools import wraps
from typing import Any, Callable, Dict, List, Optional

import structlog
from flask import current_app, has_app_context, request
from werkzeug.exceptions import BadRequest

from storefront_api.services.schema_registry import (
    GENERAL_ERROR_FIELD,
    SchemaProvider,
    get_schema_provider,
)
from storefront_api.utils.response import create_validation_error_response
from storefront_api.utils.sanitization import sanitize_input

logger = structlog.get_logger("validation")

INVALID_BODY_MESSAGE = "Invalid request body"
MISSING_SCHEMA_MESSAGE = "No validation schema found for {resource_type}"
ACTION_REQUIRED_MESSAGE = "Action is required and must be a string"
IDS_REQUIRED_MESSAGE = "IDs must be a non-empty array"
INVALID_ACTION_MESSAGE = "Invalid action"


@dataclass(frozen=True)
class ValidationError:
    """A single rejected field, or ``_general`` for request-level failures."""
    field: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {'field': self.field, 'message': self.message}


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of validating one request body.

    A successful result carries the parsed body in ``data`` and no
    ``errors``; a failed result carries ``errors`` and no ``data``. Use
    :meth:`success` and :meth:`failure` rather than the constructor.
    """
    valid: bool
    data: Any = None
    errors: Optional[List[ValidationError]] = None

    @classmethod
    def success(cls, data: Any) -> 'ValidationResult':
        return cls(valid=True, data=data)

    @classmethod
    def failure(cls, errors: List[ValidationError]) -> 'ValidationResult':
        return cls(valid=False, errors=list(errors))

    def to_dict(self) -> Dict[str, Any]:
        if self.valid:
            return {'valid': True, 'data': self.data}
        return {'valid': False, 'errors': [error.to_dict() for error in self.errors]}


def _invalid_body() -> ValidationResult:
    return ValidationResult.failure([ValidationError(GENERAL_ERROR_FIELD, INVALID_BODY_MESSAGE)])


def _log_failures_enabled() -> bool:
    if has_app_context():
        return current_app.config.get('VALIDATION_LOG_FAILURES', True)
    return True


def _reject(resource_type: str, errors: List[ValidationError]) -> ValidationResult:
    if _log_failures_enabled():
        logger.info(
            "Request body rejected",
            resource_type=resource_type,
            fields=[error.field for error in errors],
        )
    return ValidationResult.failure(errors)


def _read_json_body(req) -> Any:
    """Decode the request body as JSON regardless of the declared content type."""
    return req.get_json(force=True)


def validate_request(
    req,
    resource_type: str,
    provider: Optional[SchemaProvider] = None,
) -> ValidationResult:
    """
    Validate a single-resource create/update request body.

    Args:
        req: Request object exposing ``get_json`` (normally ``flask.request``)
        resource_type: Resource key whose schema applies, e.g. ``"product"``
        provider: Schema provider; defaults to the application's provider

    Returns:
        ``ValidationResult`` carrying the unsanitized parsed body on success
    """
    try:
        body = _read_json_body(req)
        provider = provider if provider is not None else get_schema_provider()

        schema = provider.get_validation_schema(resource_type)
        if not schema:
            return _reject(resource_type, [ValidationError(
                GENERAL_ERROR_FIELD,
                MISSING_SCHEMA_MESSAGE.format(resource_type=resource_type),
            )])

        field_errors = provider.validate_form_data(body, schema)
        if field_errors:
            return _reject(resource_type, [
                ValidationError(field_name, message)
                for field_name, message in field_errors.items()
            ])

        return ValidationResult.success(body)

    except BadRequest as e:
        logger.info("Malformed request body", resource_type=resource_type, error=e.description)
        return _invalid_body()
    except Exception:
        logger.warning("Request validation failed unexpectedly", resource_type=resource_type, exc_info=True)
        return _invalid_body()


def validate_bulk_request(
    req,
    resource_type: str,
    provider: Optional[SchemaProvider] = None,
) -> ValidationResult:
    """
    Validate a bulk action request body of the form ``{action, ids, data?}``.

    Checks run in a fixed order and only the first failure is reported:
    action shape, ids shape, then action legality for the resource.

    Args:
        req: Request object exposing ``get_json``
        resource_type: Resource key the action targets
        provider: Schema provider; defaults to the application's provider

    Returns:
        ``ValidationResult`` carrying the full original body on success
    """
    try:
        body = _read_json_body(req)
        if body is None:
            logger.info("Bulk request body is null", resource_type=resource_type)
            return _invalid_body()

        # Arrays, strings and numbers carry no keys, so every field reads as missing.
        payload = body if isinstance(body, dict) else {}
        action = payload.get('action')
        ids = payload.get('ids')
        data = payload.get('data')

        if not isinstance(action, str) or not action:
            return _reject(resource_type, [ValidationError('action', ACTION_REQUIRED_MESSAGE)])

        if not isinstance(ids, list) or not ids:
            return _reject(resource_type, [ValidationError('ids', IDS_REQUIRED_MESSAGE)])

        provider = provider if provider is not None else get_schema_provider()
        verdict = provider.validate_bulk_action(action, resource_type, data)
        if not verdict.valid:
            return _reject(resource_type, [
                ValidationError('action', verdict.error or INVALID_ACTION_MESSAGE)
            ])

        return ValidationResult.success(body)

    except BadRequest as e:
        logger.info("Malformed bulk request body", resource_type=resource_type, error=e.description)
        return _invalid_body()
    except Exception:
        logger.warning("Bulk request validation failed unexpectedly", resource_type=resource_type, exc_info=True)
        return _invalid_body()


def validate_and_sanitize(
    req,
    resource_type: str,
    provider: Optional[SchemaProvider] = None,
) -> ValidationResult:
    """Validate like :func:`validate_request`, then sanitize an accepted body."""
    result = validate_request(req, resource_type, provider=provider)
    if not result.valid:
        return result
    return ValidationResult.success(sanitize_input(result.data))


def _validated_view(
    validator: Callable[..., ValidationResult],
    resource_type: str,
    handler: Optional[Callable],
    provider: Optional[SchemaProvider],
):
    def decorator(view: Callable) -> Callable:
        @wraps(view)
        def wrapper(*args, **kwargs):
            result = validator(request, resource_type, provider=provider)
            if not result.valid:
                return create_validation_error_response(result.errors)
            return view(request._get_current_object(), result.data, *args, **kwargs)
        return wrapper

    if handler is not None:
        return decorator(handler)
    return decorator


def with_validation(
    resource_type: str,
    handler: Optional[Callable] = None,
    provider: Optional[SchemaProvider] = None,
):
    """
    Guard a Flask view with :func:`validate_request`.

    The view is called as ``view(request, validated_data, **view_args)`` and
    its return value is passed through untouched. Rejected bodies get the
    standard 400 validation response and the view is never called.

    Usage:
        @bp.route('/products', methods=['POST'])
        @with_validation('product')
        def create_product(req, data):
            ...

        bp.add_url_rule('/shops', view_func=with_validation('shop', create_shop),
                        methods=['POST'])
    """
    return _validated_view(validate_request, resource_type, handler, provider)


def with_bulk_validation(
    resource_type: str,
    handler: Optional[Callable] = None,
    provider: Optional[SchemaProvider] = None,
):
    """Guard a Flask view with :func:`validate_bulk_request`; see :func:`with_validation`."""
    return _validated_view(validate_bulk_request, resource_type, handler, provider)


__all__ = [
    'GENERAL_ERROR_FIELD',
    'INVALID_BODY_MESSAGE',
    'ValidationError',
    'ValidationResult',
    'validate_request',
    'validate_bulk_request',
    'validate_and_sanitize',
    'with_validation',
    'with_bulk_validation',
]
