"""
Structured logging configuration for the storefront API.

Configures structlog once per process with ISO timestamps, log levels and
Flask request context, rendering JSON in production and coloured console
output in development. Modules obtain loggers with
``structlog.get_logger("<component>")`` and never configure handlers
themselves.
"""

import logging
import sys
from typing import Any, Dict, List

import structlog
from flask import Flask, has_request_context, request

LOG_LEVELS = {
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'WARNING': logging.WARNING,
    'ERROR': logging.ERROR,
    'CRITICAL': logging.CRITICAL,
}


def add_flask_context(logger, name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Add the active request's method, path and endpoint to every log entry."""
    if has_request_context():
        event_dict.setdefault('method', request.method)
        event_dict.setdefault('path', request.path)
        event_dict.setdefault('endpoint', request.endpoint)
    return event_dict


def configure_structlog(level: str = 'INFO', json_output: bool = True) -> None:
    """
    Configure structlog processors and output.

    Args:
        level: Minimum log level name
        json_output: Render JSON lines when True, console output otherwise
    """
    shared_processors: List[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        add_flask_context,
    ]

    if json_output:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            LOG_LEVELS.get(level.upper(), logging.INFO)
        ),
        logger_factory=structlog.PrintLoggerFactory(sys.stdout),
        cache_logger_on_first_use=False,
    )


def init_logging(app: Flask) -> None:
    """
    Initialize structured logging for the Flask application factory.

    Reads ``LOG_LEVEL`` and ``LOG_JSON`` from the application config and
    registers request hooks that log each completed request at debug level.
    """
    level = app.config.get('LOG_LEVEL', 'INFO')
    configure_structlog(level=level, json_output=app.config.get('LOG_JSON', True))
    app.logger.setLevel(LOG_LEVELS.get(level.upper(), logging.INFO))

    logger = structlog.get_logger("http")

    @app.after_request
    def log_response(response):
        logger.debug("Request completed", status_code=response.status_code)
        return response

    structlog.get_logger("app").info(
        "Structured logging initialized",
        log_level=level,
        json_output=app.config.get('LOG_JSON', True),
    )


__all__ = ['add_flask_context', 'configure_structlog', 'init_logging']
