"""
Global pytest configuration for the storefront request validation tests.

Provides the Flask application fixture consumed by pytest-flask (which in
turn provides ``client``), request builders for feeding raw bodies to the
validators, and a mock schema provider standing in for the registry.
"""

import json
from typing import Any, Callable, Optional
from unittest.mock import Mock

import pytest
from werkzeug.test import EnvironBuilder

from app import create_app
from storefront_api.services.schema_registry import (
    BulkActionResult,
    FieldRule,
    SchemaProvider,
)


# =============================================================================
# PYTEST CONFIGURATION AND MARKERS
# =============================================================================

def pytest_configure(config):
    """Register custom markers for test categorization."""
    config.addinivalue_line(
        "markers",
        "unit: Unit tests for individual components and functions"
    )
    config.addinivalue_line(
        "markers",
        "integration: Tests exercising the Flask application"
    )


def pytest_collection_modifyitems(config, items):
    """Apply markers based on test location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


# =============================================================================
# FLASK APPLICATION FIXTURES
# =============================================================================

@pytest.fixture
def app():
    """
    Flask application configured with TestingConfig.

    pytest-flask uses this fixture to provide ``client`` and pushes a test
    request context around each test that requests it.
    """
    application = create_app('testing')
    yield application


# =============================================================================
# REQUEST AND COLLABORATOR FIXTURES
# =============================================================================

@pytest.fixture
def make_request(app) -> Callable[..., Any]:
    """
    Factory for request objects carrying a given body.

    ``make_request(body)`` encodes ``body`` as JSON; ``make_request(raw=...)``
    sends the raw text unchanged, which is how malformed bodies are built.
    """
    def _make_request(body: Any = None, raw: Optional[str] = None):
        data = raw if raw is not None else json.dumps(body)
        builder = EnvironBuilder(
            method='POST',
            path='/api/test',
            data=data,
            content_type='application/json',
        )
        try:
            return app.request_class(builder.get_environ())
        finally:
            builder.close()

    return _make_request


@pytest.fixture
def provider() -> Mock:
    """
    Mock schema provider that accepts everything by default.

    Tests override return values or side effects per collaborator method.
    """
    mock_provider = Mock(spec=SchemaProvider)
    mock_provider.get_validation_schema.return_value = [FieldRule('name', required=True)]
    mock_provider.validate_form_data.return_value = {}
    mock_provider.validate_bulk_action.return_value = BulkActionResult.allowed()
    return mock_provider
