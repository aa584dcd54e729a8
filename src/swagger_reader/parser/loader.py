"""Parse raw document bodies and tag them with their dialect.

The public functions are:

* :func:`parse_content` -- Parse a JSON or YAML body into a dictionary.
* :func:`validate_version` -- Check that a document declares a supported
  Swagger 2.0 or OpenAPI 3.x version (used before dereferencing).
* :func:`ingest_document` -- Build a
  :class:`~swagger_reader.models.DescriptionDocument`, reading the
  dialect-specific locations of the schema table and server metadata once.

:func:`ingest_document` is deliberately lenient: the raw fallback read may
return a document that the resolver refused, and the caller should still get
whatever paths and metadata it contains.
"""

from __future__ import annotations

import json
from typing import Any

import yaml
from pydantic import ValidationError

from swagger_reader.exceptions import SpecParseError
from swagger_reader.models import DescriptionDocument, Dialect


def parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse content as JSON or YAML.

    Tries JSON first (unless hint is 'yaml'), then falls back to YAML.
    Valid JSON is also valid YAML, but JSON parsing is stricter and faster.

    Args:
        content: The raw string content.
        hint: Optional format hint ('json' or 'yaml').

    Returns:
        The parsed dictionary.

    Raises:
        SpecParseError: If the content cannot be parsed as either format,
            or does not hold an object.
    """
    json_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            json_error = exc
            # If the hint was explicitly JSON, don't try YAML
            if hint == "json":
                raise SpecParseError(f"Invalid JSON: {exc}") from exc
        else:
            return _require_object(result)

    try:
        result = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        msg = "Failed to parse document as JSON or YAML"
        if json_error:
            msg += f"\n  JSON error: {json_error}"
        msg += f"\n  YAML error: {exc}"
        raise SpecParseError(msg) from exc
    return _require_object(result)


def _require_object(result: Any) -> dict[str, Any]:
    if not isinstance(result, dict):
        kind = type(result).__name__ if result is not None else "empty document"
        raise SpecParseError(f"Document must be a JSON/YAML object (got {kind})")
    return result


def validate_version(spec: dict[str, Any]) -> str:
    """Validate and return the declared Swagger/OpenAPI version string.

    Accepts Swagger 2.x (``swagger`` field) and OpenAPI 3.x (``openapi``
    field).

    Raises:
        SpecParseError: If neither field is present or the version is
            unsupported.
    """
    if "openapi" in spec:
        version = str(spec["openapi"])
        if version.startswith("3."):
            return version
        raise SpecParseError(
            f"Unsupported OpenAPI version: {version}. Only 3.x is supported."
        )

    if "swagger" in spec:
        version = str(spec["swagger"])
        if version.startswith("2."):
            return version
        raise SpecParseError(
            f"Unsupported Swagger version: {version}. Only 2.0 is supported."
        )

    raise SpecParseError(
        "Missing 'swagger' or 'openapi' field. "
        "Is this a Swagger/OpenAPI document?"
    )


def detect_dialect(spec: dict[str, Any]) -> Dialect:
    """Return the dialect of *spec*, guessing from its keys when undeclared."""
    if "openapi" in spec:
        return Dialect.OPENAPI3
    if "swagger" in spec or "definitions" in spec or "host" in spec:
        return Dialect.SWAGGER2
    return Dialect.OPENAPI3


def ingest_document(spec: Any) -> DescriptionDocument:
    """Tag a parsed document with its dialect and lift out the fields we use.

    Args:
        spec: A resolved or raw document.

    Returns:
        A :class:`~swagger_reader.models.DescriptionDocument`. Values are
        the input's own objects, so resolved cycles survive intact.

    Raises:
        SpecParseError: If *spec* is not an object, or its metadata cannot
            be represented.
    """
    spec = _require_object(spec)
    dialect = detect_dialect(spec)

    version = spec.get("openapi") or spec.get("swagger") or "unknown"
    info = spec.get("info")
    title = info.get("title") if isinstance(info, dict) else None

    paths = spec.get("paths")
    if dialect == Dialect.SWAGGER2:
        definitions = spec.get("definitions")
    else:
        components = spec.get("components")
        definitions = components.get("schemas") if isinstance(components, dict) else None

    tags = spec.get("tags")
    schemes = spec.get("schemes")
    servers = spec.get("servers")
    host = spec.get("host")
    base_path = spec.get("basePath")

    try:
        return DescriptionDocument(
            dialect=dialect,
            version=str(version),
            title=str(title) if title else "No Title",
            paths=_string_keys(paths),
            definitions=_string_keys(definitions),
            tags=[t for t in tags if isinstance(t, dict)] if isinstance(tags, list) else [],
            host=host if isinstance(host, str) and host else None,
            base_path=base_path if isinstance(base_path, str) else "",
            schemes=[s for s in schemes if isinstance(s, str)] if isinstance(schemes, list) else [],
            servers=(
                [
                    s["url"]
                    for s in servers
                    if isinstance(s, dict) and isinstance(s.get("url"), str)
                ]
                if isinstance(servers, list)
                else []
            ),
        )
    except ValidationError as exc:
        raise SpecParseError(f"Unusable document metadata: {exc}") from exc


def _string_keys(mapping: Any) -> dict[str, Any]:
    # YAML allows non-string keys such as bare status codes
    if not isinstance(mapping, dict):
        return {}
    return {str(key): value for key, value in mapping.items()}
