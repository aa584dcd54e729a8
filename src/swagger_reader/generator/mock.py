"""Synthesize example values from JSON Schemas.

:func:`synthesize_example` turns a response schema into a plausible example
value. :func:`attach_mock_responses` applies it to every operation of a
reduced projection, using the first successful (2xx) response.

Schemas coming out of the resolver may be cyclic. A schema that is already
being synthesized higher up yields ``None``, and so does anything nested
below :data:`MAX_MOCK_DEPTH` levels.
"""

from __future__ import annotations

from typing import Any, Optional

from swagger_reader.models import OperationView

MOCK_DATETIME = "2024-01-01T00:00:00Z"
MOCK_STRING = "string_value"
MAX_MOCK_DEPTH = 32


def synthesize_example(schema: Any) -> Any:
    """Return an example value for *schema*.

    An ``example`` key wins, even when its value is ``null``. Otherwise:
    objects map each property to its example, arrays hold one example item,
    strings use the first enum value (``date-time`` strings a fixed
    timestamp), numbers are ``0`` and booleans ``True``. Anything else is
    ``None``.
    """
    return _example(schema, 0, set())


def _example(schema: Any, depth: int, active: set[int]) -> Any:
    if not isinstance(schema, dict) or depth > MAX_MOCK_DEPTH:
        return None
    if "example" in schema:
        return schema["example"]

    key = id(schema)
    if key in active:
        return None
    active.add(key)
    try:
        return _example_for_type(schema, _schema_type(schema), depth, active)
    finally:
        active.discard(key)


def _example_for_type(
    schema: dict[str, Any], kind: Optional[str], depth: int, active: set[int]
) -> Any:
    if kind == "object":
        properties = schema.get("properties")
        if not isinstance(properties, dict):
            return {}
        return {
            name: _example(prop, depth + 1, active) for name, prop in properties.items()
        }

    if kind == "array":
        return [_example(schema.get("items"), depth + 1, active)]

    if kind == "string":
        if schema.get("format") == "date-time":
            return MOCK_DATETIME
        enum = schema.get("enum")
        if isinstance(enum, list) and enum:
            return enum[0]
        return MOCK_STRING

    if kind in ("integer", "number"):
        return 0
    if kind == "boolean":
        return True
    return None


def _schema_type(schema: dict[str, Any]) -> Optional[str]:
    kind = schema.get("type")
    if isinstance(kind, list):
        # OpenAPI 3.1 style ["string", "null"]
        kind = next((k for k in kind if k != "null"), None)
    return kind if isinstance(kind, str) else None


def success_schema(responses: Any) -> Optional[Any]:
    """Return the schema of the first 2xx response in *responses*, if any.

    Falls back to the ``"200"`` entry. Content maps use their first media
    type; legacy responses use their flat ``schema``.
    """
    if not isinstance(responses, dict):
        return None

    status = next((code for code in responses if str(code).startswith("2")), "200")
    response = responses.get(status)
    if not isinstance(response, dict):
        return None

    content = response.get("content")
    if isinstance(content, dict) and content:
        media = next(iter(content.values()))
        return media.get("schema") if isinstance(media, dict) else None
    return response.get("schema")


def attach_mock_responses(
    paths: dict[str, dict[str, OperationView]],
) -> dict[str, dict[str, OperationView]]:
    """Return a copy of *paths* with ``mock_response`` set where possible.

    Operations without a success response schema are left as they are.
    Operation views are shallow-copied; the input is left untouched.
    """
    result: dict[str, dict[str, OperationView]] = {}
    for path, operations in paths.items():
        result[path] = {}
        for method, operation in operations.items():
            schema = success_schema(operation.get("responses"))
            if schema is not None:
                mocked: OperationView = {**operation}
                mocked["mock_response"] = synthesize_example(schema)
                operation = mocked
            result[path][method] = operation
    return result
