"""
Utilities Package

Cross-cutting concerns of the storefront API:
- Request validation and middleware adapters
- Payload sanitization
- HTTP response formatting
- Structured logging and error handling

Usage:
    from storefront_api.utils import validate_request, with_validation, sanitize_input
"""

# Input sanitization
from .sanitization import sanitize_input, sanitize_string

# HTTP response formatting
from .response import create_validation_error_response, error_response

# Request validation pipeline
from .validation import (
    GENERAL_ERROR_FIELD,
    ValidationError,
    ValidationResult,
    validate_and_sanitize,
    validate_bulk_request,
    validate_request,
    with_bulk_validation,
    with_validation,
)

__all__ = [
    'sanitize_input',
    'sanitize_string',
    'create_validation_error_response',
    'error_response',
    'GENERAL_ERROR_FIELD',
    'ValidationError',
    'ValidationResult',
    'validate_and_sanitize',
    'validate_bulk_request',
    'validate_request',
    'with_bulk_validation',
    'with_validation',
]
