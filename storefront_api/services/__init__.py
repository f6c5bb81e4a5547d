"""
Schema services consumed by the request validation layer.
"""

from .schema_registry import (
    GENERAL_ERROR_FIELD,
    BulkActionResult,
    FieldRule,
    SchemaProvider,
    SchemaRegistry,
    SchemaRegistryError,
    get_schema_provider,
)
from .inline_edit_schemas import (
    build_default_registry,
    default_registry,
)

__all__ = [
    'GENERAL_ERROR_FIELD',
    'BulkActionResult',
    'FieldRule',
    'SchemaProvider',
    'SchemaRegistry',
    'SchemaRegistryError',
    'build_default_registry',
    'default_registry',
    'get_schema_provider',
]
