"""
Flask Application Factory - Main Entry Point

Builds the storefront API application: configuration, structured logging,
JSON error handling, the schema registry consumed by the request validation
layer, and the health endpoint.

Example:
    from app import create_app
    app = create_app('development')
    app.run(debug=True)
"""

from typing import Any, Dict, Optional

import structlog
from flask import Flask, jsonify

from config import get_config
from storefront_api import __version__
from storefront_api.services.inline_edit_schemas import default_registry
from storefront_api.services.schema_registry import SchemaProvider
from storefront_api.utils.error_handling import init_error_handling
from storefront_api.utils.logging import init_logging

logger = structlog.get_logger("app")


class FlaskApplicationError(Exception):
    """Raised when the application cannot be initialized."""

    def __init__(self, message: str, error_code: str = None, details: Dict[str, Any] = None):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


def register_health_endpoints(app: Flask) -> None:
    """Register the liveness endpoint used by load balancers."""

    @app.route('/health', methods=['GET'])
    def health_check():
        registry = app.extensions['schema_registry']
        return jsonify({
            'status': 'healthy',
            'version': __version__,
            'resource_types': sorted(getattr(registry, 'resource_types', [])),
        })


def create_app(
    config_name: Optional[str] = None,
    schema_registry: Optional[SchemaProvider] = None,
) -> Flask:
    """
    Flask application factory.

    Args:
        config_name: Environment configuration name ('development', 'testing',
            'production'). If None, determined from FLASK_CONFIG.
        schema_registry: Schema provider used by the validation layer; the
            built-in registry when omitted

    Returns:
        Configured Flask application

    Raises:
        FlaskApplicationError: If the schema provider does not satisfy the
            ``SchemaProvider`` contract
    """
    app = Flask(__name__)

    config_class = get_config(config_name)
    app.config.from_object(config_class)
    config_class.init_app(app)

    init_logging(app)
    init_error_handling(app)

    provider = schema_registry if schema_registry is not None else default_registry
    if not isinstance(provider, SchemaProvider):
        raise FlaskApplicationError(
            "Schema registry does not implement the SchemaProvider contract",
            error_code="INVALID_SCHEMA_REGISTRY",
            details={'type': type(provider).__name__},
        )
    app.extensions['schema_registry'] = provider

    register_health_endpoints(app)

    logger.info(
        "Flask application created",
        config=config_class.__name__,
        debug=app.debug,
        testing=app.testing,
    )
    return app
