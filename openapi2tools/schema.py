"""Convert OpenAPI 3.x parameter and schema objects into JSON Schema.

OpenAPI schemas are a superset/subset of JSON Schema draft 4: ``nullable``
has to become a ``null`` type, and keywords JSON Schema validators do not
understand (``discriminator``, ``xml``, ``example``...) are dropped.
"""

import copy
from typing import Any, Dict

JSON_SCHEMA_DRAFT = 'http://json-schema.org/draft-04/schema#'

UNSUPPORTED_KEYWORDS = (
    'nullable', 'discriminator', 'readOnly', 'writeOnly',
    'xml', 'externalDocs', 'example', 'deprecated',
)

_SUBSCHEMA_KEYS = ('items', 'additionalProperties', 'not')
_SUBSCHEMA_LIST_KEYS = ('allOf', 'anyOf', 'oneOf')
_SUBSCHEMA_MAP_KEYS = ('properties', 'patternProperties')

# Swagger 2.0 style parameter keywords that carry schema information
_INLINE_PARAMETER_KEYWORDS = (
    'type', 'format', 'items', 'collectionFormat', 'default', 'maximum',
    'exclusiveMaximum', 'minimum', 'exclusiveMinimum', 'maxLength',
    'minLength', 'pattern', 'maxItems', 'minItems', 'uniqueItems',
    'enum', 'multipleOf',
)


def from_schema(schema: Dict[str, Any]) -> Dict[str, Any]:
    """Convert a dereferenced OpenAPI schema object to JSON Schema."""
    converted = _convert(copy.deepcopy(schema or {}))
    converted['$schema'] = JSON_SCHEMA_DRAFT
    return converted


def from_parameter(param: Dict[str, Any]) -> Dict[str, Any]:
    """Convert an OpenAPI parameter object to the JSON Schema of its value."""
    if 'schema' in param:
        schema = param['schema']
    elif 'content' in param and param['content']:
        content = param['content']
        # Look for JSON content first
        for content_type, content_spec in content.items():
            if 'json' in content_type:
                schema = content_spec.get('schema', {})
                break
        else:
            schema = next(iter(content.values())).get('schema', {})
    else:
        schema = _build_schema_from_inline_parameter(param)

    converted = from_schema(schema)
    if param.get('description') and 'description' not in converted:
        converted['description'] = param['description']
    return converted


def _build_schema_from_inline_parameter(param: Dict[str, Any]) -> Dict[str, Any]:
    """Build a schema from a parameter that declares its type inline."""
    schema = {k: param[k] for k in _INLINE_PARAMETER_KEYWORDS if param.get(k) is not None}
    schema.setdefault('type', 'string')
    if 'collectionFormat' in schema:
        schema['x-collection-format'] = schema.pop('collectionFormat')
    return schema


def _convert(schema: Any) -> Any:
    if not isinstance(schema, dict):
        return schema

    for key in _SUBSCHEMA_KEYS:
        if isinstance(schema.get(key), dict):
            schema[key] = _convert(schema[key])
        elif key == 'items' and isinstance(schema.get(key), list):
            schema[key] = [_convert(s) for s in schema[key]]

    for key in _SUBSCHEMA_LIST_KEYS:
        if isinstance(schema.get(key), list):
            schema[key] = [_convert(s) for s in schema[key]]

    for key in _SUBSCHEMA_MAP_KEYS:
        if isinstance(schema.get(key), dict):
            schema[key] = {name: _convert(s) for name, s in schema[key].items()}

    if schema.get('nullable') is True:
        _make_nullable(schema)

    for keyword in UNSUPPORTED_KEYWORDS:
        schema.pop(keyword, None)

    return schema


def _make_nullable(schema: Dict[str, Any]) -> None:
    schema_type = schema.get('type')
    if isinstance(schema_type, list):
        if 'null' not in schema_type:
            schema['type'] = schema_type + ['null']
    elif schema_type is not None:
        schema['type'] = [schema_type, 'null']

    if isinstance(schema.get('enum'), list) and None not in schema['enum']:
        schema['enum'] = schema['enum'] + [None]
