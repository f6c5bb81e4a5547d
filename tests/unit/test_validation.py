"""
Unit tests for the request validation pipeline.

Exercises validate_request, validate_bulk_request and validate_and_sanitize
against a mock schema provider, including malformed bodies and collaborator
failures, plus the ValidationResult container.
"""

from unittest.mock import Mock

import pytest

from app import create_app
from storefront_api.services.schema_registry import BulkActionResult, FieldRule
from storefront_api.utils.validation import (
    GENERAL_ERROR_FIELD,
    ValidationError,
    ValidationResult,
    validate_and_sanitize,
    validate_bulk_request,
    validate_request,
)


def _broken_request(exc: Exception) -> Mock:
    req = Mock()
    req.get_json.side_effect = exc
    return req


def _assert_invalid_body(result: ValidationResult) -> None:
    assert result.valid is False
    assert result.data is None
    assert result.errors == [ValidationError(GENERAL_ERROR_FIELD, "Invalid request body")]


class TestValidationResult:

    def test_success_carries_data_only(self):
        result = ValidationResult.success({"name": "Test"})

        assert result.valid is True
        assert result.data == {"name": "Test"}
        assert result.errors is None

    def test_failure_carries_errors_only(self):
        result = ValidationResult.failure([ValidationError("name", "Required")])

        assert result.valid is False
        assert result.data is None
        assert result.errors == [ValidationError("name", "Required")]

    def test_to_dict(self):
        assert ValidationResult.success({"a": 1}).to_dict() == {"valid": True, "data": {"a": 1}}
        assert ValidationResult.failure([ValidationError("a", "Bad")]).to_dict() == {
            "valid": False,
            "errors": [{"field": "a", "message": "Bad"}],
        }


class TestValidateRequest:
    """Single-resource validation."""

    def test_missing_schema(self, make_request, provider):
        provider.get_validation_schema.return_value = None

        result = validate_request(make_request({"name": "Test"}), "unknown", provider=provider)

        assert result.valid is False
        assert len(result.errors) == 1
        assert result.errors[0].field == GENERAL_ERROR_FIELD
        assert result.errors[0].message == "No validation schema found for unknown"
        provider.validate_form_data.assert_not_called()

    def test_empty_schema(self, make_request, provider):
        provider.get_validation_schema.return_value = []

        result = validate_request(make_request({"name": "Test"}), "product", provider=provider)

        assert result.valid is False
        assert "No validation schema found for product" in result.errors[0].message

    def test_looks_up_schema_for_resource_type(self, make_request, provider):
        validate_request(make_request({"name": "Test"}), "category", provider=provider)

        provider.get_validation_schema.assert_called_once_with("category")

    def test_valid_body(self, make_request, provider):
        body = {"name": "Test Product", "price": 100}

        result = validate_request(make_request(body), "product", provider=provider)

        assert result.valid is True
        assert result.data == body
        assert result.errors is None

    def test_passes_body_and_schema_to_field_checker(self, make_request, provider):
        schema = [FieldRule('name', required=True), FieldRule('price', type='number')]
        provider.get_validation_schema.return_value = schema
        body = {"name": "Test", "price": 10}

        validate_request(make_request(body), "product", provider=provider)

        provider.validate_form_data.assert_called_once_with(body, schema)

    def test_field_errors_become_validation_errors(self, make_request, provider):
        provider.validate_form_data.return_value = {
            "name": "Name is required",
            "price": "Price must be at least 0",
        }

        result = validate_request(make_request({"name": "", "price": -1}), "product", provider=provider)

        assert result.valid is False
        assert result.data is None
        assert result.errors == [
            ValidationError("name", "Name is required"),
            ValidationError("price", "Price must be at least 0"),
        ]

    def test_valid_body_is_not_sanitized(self, make_request, provider):
        body = {"name": "Test<script>alert()</script>"}

        result = validate_request(make_request(body), "product", provider=provider)

        assert result.data == body

    def test_malformed_json(self, make_request, provider):
        _assert_invalid_body(validate_request(make_request(raw='{"name": '), "product", provider=provider))
        provider.get_validation_schema.assert_not_called()

    def test_empty_body(self, make_request, provider):
        _assert_invalid_body(validate_request(make_request(raw=''), "product", provider=provider))

    def test_body_read_raises(self, provider):
        _assert_invalid_body(validate_request(_broken_request(ValueError("boom")), "product", provider=provider))

    def test_schema_lookup_raises(self, make_request, provider):
        provider.get_validation_schema.side_effect = RuntimeError("Schema error")

        _assert_invalid_body(validate_request(make_request({"name": "Test"}), "product", provider=provider))

    def test_field_checker_raises(self, make_request, provider):
        provider.validate_form_data.side_effect = KeyError("name")

        _assert_invalid_body(validate_request(make_request({"name": "Test"}), "product", provider=provider))

    def test_uses_application_registry_by_default(self, make_request):
        result = validate_request(make_request({"name": "Widget", "price": 10}), "product")

        assert result.valid is True

        result = validate_request(make_request({"name": "Widget"}), "product")

        assert result.valid is False
        assert result.errors == [ValidationError("price", "Price is required")]

    def test_uses_configured_registry(self, make_request, provider):
        custom_app = create_app('testing', schema_registry=provider)
        provider.get_validation_schema.return_value = None

        with custom_app.app_context():
            result = validate_request(make_request({"name": "Test"}), "product")

        assert result.valid is False
        provider.get_validation_schema.assert_called_once_with("product")


class TestValidateBulkRequest:
    """Bulk action validation."""

    @pytest.mark.parametrize("body", [
        {"ids": ["id1"]},
        {"action": 123, "ids": ["id1"]},
        {"action": "", "ids": ["id1"]},
        {"action": None, "ids": ["id1"]},
    ])
    def test_invalid_action(self, make_request, provider, body):
        result = validate_bulk_request(make_request(body), "product", provider=provider)

        assert result.valid is False
        assert len(result.errors) == 1
        assert result.errors[0].field == "action"
        assert result.errors[0].message == "Action is required and must be a string"
        provider.validate_bulk_action.assert_not_called()

    @pytest.mark.parametrize("body", [
        {"action": "delete"},
        {"action": "delete", "ids": "not-an-array"},
        {"action": "delete", "ids": []},
        {"action": "delete", "ids": {"0": "id1"}},
    ])
    def test_invalid_ids(self, make_request, provider, body):
        result = validate_bulk_request(make_request(body), "product", provider=provider)

        assert result.valid is False
        assert len(result.errors) == 1
        assert result.errors[0].field == "ids"
        assert "non-empty array" in result.errors[0].message
        provider.validate_bulk_action.assert_not_called()

    def test_action_checked_before_ids(self, make_request, provider):
        result = validate_bulk_request(make_request({"ids": []}), "product", provider=provider)

        assert [error.field for error in result.errors] == ["action"]

    def test_delegates_to_bulk_action_checker(self, make_request, provider):
        body = {"action": "update", "ids": ["id1"], "data": {"status": "published"}}

        validate_bulk_request(make_request(body), "product", provider=provider)

        provider.validate_bulk_action.assert_called_once_with("update", "product", {"status": "published"})

    def test_missing_data_is_passed_as_none(self, make_request, provider):
        validate_bulk_request(make_request({"action": "delete", "ids": ["id1"]}), "shop", provider=provider)

        provider.validate_bulk_action.assert_called_once_with("delete", "shop", None)

    def test_rejected_action_uses_checker_message(self, make_request, provider):
        provider.validate_bulk_action.return_value = BulkActionResult.rejected(
            "Action 'explode' is not allowed for product"
        )

        result = validate_bulk_request(make_request({"action": "explode", "ids": ["id1"]}), "product", provider=provider)

        assert result.valid is False
        assert result.errors == [ValidationError("action", "Action 'explode' is not allowed for product")]

    def test_rejected_action_default_message(self, make_request, provider):
        provider.validate_bulk_action.return_value = BulkActionResult(valid=False)

        result = validate_bulk_request(make_request({"action": "explode", "ids": ["id1"]}), "product", provider=provider)

        assert result.errors == [ValidationError("action", "Invalid action")]

    def test_valid_bulk_request_returns_full_body(self, make_request, provider):
        body = {"action": "update", "ids": ["id1", "id2"], "data": {"status": "published"}}

        result = validate_bulk_request(make_request(body), "product", provider=provider)

        assert result.valid is True
        assert result.data == body

    def test_delete_scenario(self, make_request, provider):
        result = validate_bulk_request(
            make_request({"action": "delete", "ids": ["id1", "id2"]}), "product", provider=provider
        )

        assert result == ValidationResult.success({"action": "delete", "ids": ["id1", "id2"]})

    @pytest.mark.parametrize("body", [["delete"], "delete", 42, True])
    def test_non_object_body_has_no_action(self, make_request, provider, body):
        result = validate_bulk_request(make_request(body), "product", provider=provider)

        assert result.valid is False
        assert result.errors == [ValidationError("action", "Action is required and must be a string")]
        provider.validate_bulk_action.assert_not_called()

    def test_null_body(self, make_request, provider):
        _assert_invalid_body(validate_bulk_request(make_request(None), "product", provider=provider))

    def test_malformed_json(self, make_request, provider):
        _assert_invalid_body(validate_bulk_request(make_request(raw='not json'), "product", provider=provider))

    def test_body_read_raises(self, provider):
        _assert_invalid_body(validate_bulk_request(_broken_request(OSError("reset")), "product", provider=provider))

    def test_bulk_action_checker_raises(self, make_request, provider):
        provider.validate_bulk_action.side_effect = RuntimeError("Validation error")

        _assert_invalid_body(
            validate_bulk_request(make_request({"action": "delete", "ids": ["id1"]}), "product", provider=provider)
        )

    def test_uses_application_registry_by_default(self, make_request):
        result = validate_bulk_request(make_request({"action": "teleport", "ids": ["id1"]}), "product")

        assert result.errors == [ValidationError("action", "Action 'teleport' is not allowed for product")]


class TestValidateAndSanitize:
    """Combined validation and sanitization."""

    def test_sanitizes_valid_body(self, make_request, provider):
        body = {"name": "Test<script>alert()</script>", "description": "Clean text"}

        result = validate_and_sanitize(make_request(body), "product", provider=provider)

        assert result.valid is True
        assert result.data == {"name": "Test", "description": "Clean text"}

    def test_sanitizes_nested_objects_and_lists(self, make_request, provider):
        body = {
            "user": {"name": "Test<script></script>", "bio": "Hello<iframe></iframe>"},
            "tags": ["clean", "tag<script></script>", "normal"],
        }

        result = validate_and_sanitize(make_request(body), "user", provider=provider)

        assert result.data == {
            "user": {"name": "Test", "bio": "Hello"},
            "tags": ["clean", "tag", "normal"],
        }

    def test_failed_validation_is_returned_unchanged(self, make_request, provider):
        provider.validate_form_data.return_value = {"name": "Required"}

        result = validate_and_sanitize(make_request({"name": "<script></script>"}), "product", provider=provider)

        assert result.valid is False
        assert result.data is None
        assert result.errors == [ValidationError("name", "Required")]

    def test_collaborator_failure(self, make_request, provider):
        provider.get_validation_schema.side_effect = RuntimeError("Schema error")

        _assert_invalid_body(validate_and_sanitize(make_request({"name": "Test"}), "product", provider=provider))
