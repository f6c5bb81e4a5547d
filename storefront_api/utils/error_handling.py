"""
Error handling for the storefront API Flask application.

Registers JSON error handlers so that clients always receive the
``{"success": false, "message": ...}`` envelope, never an HTML error page or
a stack trace. Validation failures themselves never reach these handlers;
they are turned into 400 responses by the validation layer.
"""

from typing import Optional

import structlog
from flask import Flask
from werkzeug.exceptions import HTTPException

from storefront_api.utils.response import HTTP_INTERNAL_SERVER_ERROR, error_response

INTERNAL_ERROR_MESSAGE = "An unexpected error occurred"


class FlaskErrorHandler:
    """
    Flask error handler registration.

    Usage:
        error_handler = FlaskErrorHandler()
        error_handler.init_app(app)
    """

    def __init__(self, app: Optional[Flask] = None):
        self.app = app
        self.logger = structlog.get_logger("error_handler")

        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        """Register the handlers on ``app``."""
        self.app = app

        @app.errorhandler(HTTPException)
        def handle_http_exception(error: HTTPException):
            return self._handle_http_error(error)

        @app.errorhandler(Exception)
        def handle_generic_exception(error: Exception):
            return self._handle_generic_exception(error)

        app.extensions['error_handler'] = self
        self.logger.debug("Flask error handlers registered")

    def _handle_http_error(self, error: HTTPException):
        status_code = error.code or HTTP_INTERNAL_SERVER_ERROR
        if status_code >= HTTP_INTERNAL_SERVER_ERROR:
            self.logger.error("HTTP error", status_code=status_code, error=error.description)
        else:
            self.logger.info("HTTP error", status_code=status_code, error=error.description)
        return error_response(error.description or error.name, status_code)

    def _handle_generic_exception(self, error: Exception):
        self.logger.error(
            "Unhandled exception",
            error_type=type(error).__name__,
            exc_info=error,
        )
        return error_response(INTERNAL_ERROR_MESSAGE, HTTP_INTERNAL_SERVER_ERROR)


def init_error_handling(app: Flask) -> FlaskErrorHandler:
    """Initialize error handling for the Flask application factory."""
    return FlaskErrorHandler(app)


__all__ = ['FlaskErrorHandler', 'init_error_handling', 'INTERNAL_ERROR_MESSAGE']
