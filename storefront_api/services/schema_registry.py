"""
Schema registry for inline-edit and bulk-action request validation.

This module defines the collaborator contract consumed by the request
validation layer (``SchemaProvider``) together with ``SchemaRegistry``, the
in-process implementation used by default. The validation pipeline only ever
talks to the contract, so route handlers and tests can swap in any object
exposing the same three methods.

Key Features:
- Ordered per-resource field rules (``FieldRule``)
- Field checks executed through dynamically built marshmallow schemas
- E-mail checks through email-validator without DNS lookups
- Per-resource bulk-action allow lists with explicit ``BulkActionResult``
"""

from dataclasses import dataclass
from typing import (
    Any,
    Callable,
    Dict,
    FrozenSet,
    Iterable,
    List,
    Optional,
    Protocol,
    Sequence,
    Tuple,
    runtime_checkable,
)

import structlog
from email_validator import EmailNotValidError, validate_email
from flask import current_app, has_app_context
from marshmallow import EXCLUDE, Schema, fields, validate
from marshmallow import ValidationError as MarshmallowValidationError

logger = structlog.get_logger("schema_registry")

# Field name used for failures that do not belong to a single input field.
GENERAL_ERROR_FIELD = "_general"

STRING_FIELD_TYPES = frozenset({'string', 'text', 'email', 'url', 'select'})
SUPPORTED_FIELD_TYPES = STRING_FIELD_TYPES | frozenset(
    {'number', 'integer', 'boolean', 'date', 'list'}
)


class SchemaRegistryError(Exception):
    """Raised when the registry is asked to do something it is not configured for."""

    def __init__(self, message: str, resource_type: Optional[str] = None):
        self.message = message
        self.resource_type = resource_type
        super().__init__(self.message)


@dataclass(frozen=True)
class FieldRule:
    """
    Declarative validation rule for a single request field.

    Attributes:
        name: Request body key the rule applies to
        type: One of ``SUPPORTED_FIELD_TYPES``
        required: Whether the key must be present (and non-blank for strings)
        label: Human-readable name used in error messages
    """
    name: str
    type: str = 'string'
    required: bool = False
    label: Optional[str] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    pattern: Optional[str] = None
    pattern_message: Optional[str] = None
    choices: Tuple[str, ...] = ()
    allow_none: bool = False

    @property
    def display_name(self) -> str:
        return self.label or self.name.replace('_', ' ').capitalize()


@dataclass(frozen=True)
class BulkActionResult:
    """Outcome of a bulk-action legality check."""
    valid: bool
    error: Optional[str] = None

    @classmethod
    def allowed(cls) -> 'BulkActionResult':
        return cls(valid=True)

    @classmethod
    def rejected(cls, error: str) -> 'BulkActionResult':
        return cls(valid=False, error=error)


@runtime_checkable
class SchemaProvider(Protocol):
    """
    Contract between the request validators and a schema source.

    Every method may raise; the validators convert any exception into a
    generic request-level error.
    """

    def get_validation_schema(self, resource_type: str) -> Optional[Sequence[Any]]:
        """Return the ordered field rules for ``resource_type`` or ``None``."""
        ...

    def validate_form_data(self, body: Any, schema: Sequence[Any]) -> Dict[str, str]:
        """Return ``{field: message}`` for every failing field."""
        ...

    def validate_bulk_action(
        self, action: str, resource_type: str, data: Any = None
    ) -> BulkActionResult:
        """Decide whether ``action`` may be applied to ``resource_type``."""
        ...


def get_schema_provider() -> SchemaProvider:
    """
    Resolve the schema provider for the current request.

    The application's ``schema_registry`` extension takes precedence when an
    application context is active; otherwise the built-in registry is used.
    """
    if has_app_context():
        provider = current_app.extensions.get('schema_registry')
        if provider is not None:
            return provider

    from .inline_edit_schemas import default_registry
    return default_registry


def _skip_blank(validator: Callable[[Any], Any]) -> Callable[[Any], Any]:
    """Wrap a validator so that empty optional strings are not checked."""
    def _validate(value: Any) -> Any:
        if value == "":
            return None
        return validator(value)
    return _validate


def _email_validator(label: str) -> Callable[[Any], None]:
    def _validate(value: Any) -> None:
        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError:
            raise MarshmallowValidationError(f"{label} must be a valid email address")
    return _validate


def _length_validator(rule: FieldRule) -> validate.Length:
    label = rule.display_name
    if rule.min_length is not None and rule.max_length is not None:
        message = f"{label} must be between {rule.min_length} and {rule.max_length} characters"
    elif rule.min_length is not None:
        message = f"{label} must be at least {rule.min_length} characters"
    else:
        message = f"{label} must be at most {rule.max_length} characters"
    return validate.Length(min=rule.min_length, max=rule.max_length, error=message)


def _format_bound(value: float) -> str:
    """Render a range bound for messages: ``10000000`` rather than ``1e+07``."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def _range_validator(rule: FieldRule) -> validate.Range:
    label = rule.display_name
    if rule.min_value is not None and rule.max_value is not None:
        message = (
            f"{label} must be between {_format_bound(rule.min_value)} "
            f"and {_format_bound(rule.max_value)}"
        )
    elif rule.min_value is not None:
        message = f"{label} must be at least {_format_bound(rule.min_value)}"
    else:
        message = f"{label} must be at most {_format_bound(rule.max_value)}"
    return validate.Range(min=rule.min_value, max=rule.max_value, error=message)


def build_marshmallow_field(rule: FieldRule) -> fields.Field:
    """
    Translate a ``FieldRule`` into a marshmallow field.

    Args:
        rule: Field rule to translate

    Returns:
        Configured marshmallow field

    Raises:
        SchemaRegistryError: If the rule type is not supported
    """
    if rule.type not in SUPPORTED_FIELD_TYPES:
        raise SchemaRegistryError(f"Unsupported field type '{rule.type}' for field '{rule.name}'")

    label = rule.display_name
    validators: List[Callable[[Any], Any]] = []

    if rule.type in STRING_FIELD_TYPES or rule.type == 'list':
        if rule.min_length is not None or rule.max_length is not None:
            validators.append(_length_validator(rule))
    if rule.type in ('number', 'integer') and (
        rule.min_value is not None or rule.max_value is not None
    ):
        validators.append(_range_validator(rule))
    if rule.pattern:
        validators.append(validate.Regexp(
            rule.pattern,
            error=rule.pattern_message or f"{label} has an invalid format",
        ))
    if rule.choices:
        validators.append(validate.OneOf(
            rule.choices,
            error=f"{label} must be one of: {', '.join(rule.choices)}",
        ))
    if rule.type == 'email':
        validators.append(_email_validator(label))
    if rule.type == 'url':
        validators.append(validate.URL(error=f"{label} must be a valid URL"))

    if rule.type in STRING_FIELD_TYPES:
        if rule.required:
            # Blank strings count as missing for required text inputs.
            validators.insert(0, validate.Length(min=1, error=f"{label} is required"))
        else:
            validators = [_skip_blank(v) for v in validators]

    options: Dict[str, Any] = {
        'required': rule.required,
        'allow_none': rule.allow_none,
        'validate': validators,
        'error_messages': {
            'required': f"{label} is required",
            'null': f"{label} is required",
        },
    }

    if rule.type in STRING_FIELD_TYPES:
        options['error_messages']['invalid'] = f"{label} must be a string"
        return fields.String(**options)
    if rule.type == 'number':
        options['error_messages']['invalid'] = f"{label} must be a number"
        return fields.Float(**options)
    if rule.type == 'integer':
        options['error_messages']['invalid'] = f"{label} must be a whole number"
        return fields.Integer(strict=True, **options)
    if rule.type == 'boolean':
        options['error_messages']['invalid'] = f"{label} must be true or false"
        return fields.Boolean(**options)
    if rule.type == 'date':
        options['error_messages']['invalid'] = f"{label} must be a valid date"
        return fields.Date(**options)
    options['error_messages']['invalid'] = f"{label} must be a list"
    return fields.List(fields.Raw(), **options)


def _first_message(messages: Any) -> str:
    """Flatten marshmallow's nested message structure down to one string."""
    if isinstance(messages, str):
        return messages
    if isinstance(messages, dict):
        for nested in messages.values():
            return _first_message(nested)
    if isinstance(messages, (list, tuple)) and messages:
        return _first_message(messages[0])
    return "Invalid value"


class SchemaRegistry:
    """
    In-process ``SchemaProvider`` implementation.

    Resources are registered with an ordered list of ``FieldRule`` objects
    and an optional set of allowed bulk actions. Registration is expected to
    happen at import or application start-up; lookups never mutate state.
    """

    UPDATE_ACTION = 'update'

    def __init__(self):
        self._schemas: Dict[str, Tuple[FieldRule, ...]] = {}
        self._bulk_actions: Dict[str, FrozenSet[str]] = {}

    def register(
        self,
        resource_type: str,
        rules: Iterable[FieldRule],
        bulk_actions: Iterable[str] = (),
    ) -> None:
        """
        Register (or replace) the rules for a resource type.

        Args:
            resource_type: Resource key, e.g. ``"product"``
            rules: Ordered field rules
            bulk_actions: Actions accepted by bulk endpoints for this resource

        Raises:
            SchemaRegistryError: If a rule uses an unsupported type or a field
                name is declared twice
        """
        rules = tuple(rules)
        seen = set()
        for rule in rules:
            if rule.type not in SUPPORTED_FIELD_TYPES:
                raise SchemaRegistryError(
                    f"Unsupported field type '{rule.type}' for field '{rule.name}'",
                    resource_type=resource_type,
                )
            if rule.name in seen:
                raise SchemaRegistryError(
                    f"Field '{rule.name}' declared twice",
                    resource_type=resource_type,
                )
            seen.add(rule.name)

        self._schemas[resource_type] = rules
        self._bulk_actions[resource_type] = frozenset(bulk_actions)
        logger.debug(
            "Validation schema registered",
            resource_type=resource_type,
            field_count=len(rules),
            bulk_actions=sorted(self._bulk_actions[resource_type]),
        )

    @property
    def resource_types(self) -> List[str]:
        return list(self._schemas)

    def bulk_actions_for(self, resource_type: str) -> FrozenSet[str]:
        return self._bulk_actions.get(resource_type, frozenset())

    def get_validation_schema(self, resource_type: str) -> Optional[List[FieldRule]]:
        rules = self._schemas.get(resource_type)
        if rules is None:
            return None
        return list(rules)

    def validate_form_data(self, body: Any, schema: Sequence[FieldRule]) -> Dict[str, str]:
        """
        Run the field rules in ``schema`` against ``body``.

        Args:
            body: Decoded request body
            schema: Field rules as returned by ``get_validation_schema``

        Returns:
            Mapping of failing field name to its first error message, in rule
            order. Keys that are not covered by a rule are ignored.
        """
        return self._load_errors(body, schema, partial=False)

    def validate_bulk_action(
        self, action: str, resource_type: str, data: Any = None
    ) -> BulkActionResult:
        allowed = self._bulk_actions.get(resource_type)
        if not allowed:
            return BulkActionResult.rejected(
                f"Bulk actions are not supported for {resource_type}"
            )
        if action not in allowed:
            return BulkActionResult.rejected(
                f"Action '{action}' is not allowed for {resource_type}"
            )

        if action == self.UPDATE_ACTION:
            if not isinstance(data, dict) or not data:
                return BulkActionResult.rejected(
                    "Update action requires a non-empty data object"
                )
            errors = self._load_errors(data, self._schemas.get(resource_type, ()), partial=True)
            if errors:
                field_name, message = next(iter(errors.items()))
                return BulkActionResult.rejected(f"{field_name}: {message}")

        return BulkActionResult.allowed()

    def _load_errors(
        self, body: Any, schema: Sequence[FieldRule], partial: bool
    ) -> Dict[str, str]:
        schema_class = Schema.from_dict(
            {rule.name: build_marshmallow_field(rule) for rule in schema},
            name='InlineEditSchema',
        )
        try:
            schema_class(unknown=EXCLUDE, partial=partial).load(body)
        except MarshmallowValidationError as err:
            messages = err.messages if isinstance(err.messages, dict) else {'_schema': err.messages}
            errors: Dict[str, str] = {}
            for rule in schema:
                if rule.name in messages:
                    errors[rule.name] = _first_message(messages[rule.name])
            if '_schema' in messages:
                errors[GENERAL_ERROR_FIELD] = _first_message(messages['_schema'])
            return errors
        return {}


__all__ = [
    'GENERAL_ERROR_FIELD',
    'SUPPORTED_FIELD_TYPES',
    'SchemaRegistryError',
    'FieldRule',
    'BulkActionResult',
    'SchemaProvider',
    'SchemaRegistry',
    'get_schema_provider',
    'build_marshmallow_field',
]
