"""Reduce the ``paths`` of a description document to what API consumers need.

This module walks the endpoint collection of a resolved (or raw) document and
builds a projection holding only summaries, descriptions, identifiers, tags,
parameters, request bodies and responses. Both dialects come out in the same
shape:

* Request bodies: an OpenAPI 3.x ``requestBody`` yields ``{required,
  description, content}``; a Swagger 2.0 ``in: body`` parameter yields
  ``{required, description, schema}``.
* Responses: ``{description, content}`` for OpenAPI 3.x, ``{description,
  schema}`` for Swagger 2.0.

Parameter merging follows the OpenAPI specification: path-level parameters
provide defaults, and operation-level parameters override them when they share
the same ``name`` and ``in`` values.

The module also derives the document-level facts the tools report:
:func:`derive_base_url` and :func:`collect_tags`.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any, Optional
from urllib.parse import urlsplit

from swagger_reader.models import (
    DescriptionDocument,
    HTTPMethod,
    OperationView,
    ParameterView,
    RequestBodyView,
    ResponseView,
    TagInfo,
)

# HTTP methods recognized as operations
HTTP_METHODS = frozenset(m.value for m in HTTPMethod)

# Flat Swagger 2.0 parameter fields copied into a synthesized schema
_FLAT_SCHEMA_FIELDS = ("format", "items", "enum")


def iter_operations(path_item: Any) -> Iterator[tuple[str, dict[str, Any]]]:
    """Yield ``(method, operation)`` pairs of a path item, in document order.

    Keys that are not HTTP methods (``parameters``, ``summary``, ``x-*``)
    and operations that are not objects are skipped.
    """
    if not isinstance(path_item, dict):
        return
    for method, operation in path_item.items():
        if method in HTTP_METHODS and isinstance(operation, dict):
            yield method, operation


def extract_parameter_schema(param: Any) -> Optional[dict[str, Any]]:
    """Return the value schema of a parameter.

    An explicit ``schema`` is returned as-is. Otherwise a schema is
    synthesized from the flat Swagger 2.0 fields (``type``, ``format``,
    ``items``, ``enum``, ``default``). Returns ``None`` when the parameter
    carries neither.
    """
    if not isinstance(param, dict):
        return None
    if param.get("schema"):
        return param["schema"]
    if param.get("type"):
        schema: dict[str, Any] = {"type": param["type"]}
        for field in _FLAT_SCHEMA_FIELDS:
            if param.get(field):
                schema[field] = param[field]
        if "default" in param:
            schema["default"] = param["default"]
        return schema
    return None


def simplify_paths(paths: dict[str, Any]) -> dict[str, dict[str, OperationView]]:
    """Build the reduced projection of *paths*.

    Args:
        paths: Path string to path item, as found in the document.

    Returns:
        Path string to ``{method: OperationView}``. Path items that are not
        objects are dropped; path items without operations map to ``{}``.
    """
    simplified: dict[str, dict[str, OperationView]] = {}

    for path, path_item in paths.items():
        if not isinstance(path_item, dict):
            continue

        path_params = path_item.get("parameters")
        simplified[path] = {
            method: _simplify_operation(operation, path_params)
            for method, operation in iter_operations(path_item)
        }

    return simplified


def _simplify_operation(operation: dict[str, Any], path_params: Any) -> OperationView:
    params = _merge_parameters(_as_list(path_params), _as_list(operation.get("parameters")))

    view: OperationView = {
        "summary": operation.get("summary") or "",
        "description": operation.get("description") or "",
        "operationId": operation.get("operationId") or "",
        "tags": operation.get("tags") or [],
        "parameters": [_simplify_parameter(p) for p in params],
    }

    request_body = _extract_request_body(operation.get("requestBody"), params)
    if request_body is not None:
        view["requestBody"] = request_body

    view["responses"] = _extract_responses(operation.get("responses"))
    return view


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _merge_parameters(path_params: list[Any], op_params: list[Any]) -> list[Any]:
    """Merge path-level and operation-level parameters.

    Operation-level parameters override path-level parameters with the same
    name and location (``in`` field), per the OpenAPI spec.
    """
    op_keys = {
        (p.get("name", ""), p.get("in", "")) for p in op_params if isinstance(p, dict)
    }

    merged = [
        p
        for p in path_params
        if not (isinstance(p, dict) and (p.get("name", ""), p.get("in", "")) in op_keys)
    ]
    merged.extend(op_params)
    return merged


def _simplify_parameter(param: Any) -> ParameterView:
    if not isinstance(param, dict):
        return {}

    view: dict[str, Any] = {}
    # An unresolved reference (raw fallback read) is kept visible
    if isinstance(param.get("$ref"), str) and "name" not in param:
        view["$ref"] = param["$ref"]
    for key in ("name", "in", "required", "description"):
        if param.get(key) is not None:
            view[key] = param[key]
    schema = extract_parameter_schema(param)
    if schema is not None:
        view["schema"] = schema
    return view  # type: ignore[return-value]


def _extract_request_body(body: Any, params: list[Any]) -> Optional[RequestBodyView]:
    """Unify the request body of either dialect.

    Args:
        body: The OpenAPI 3.x ``requestBody`` value, if any.
        params: The merged parameters, scanned for a Swagger 2.0
            ``in: body`` parameter when *body* is absent.

    Returns:
        A :class:`~swagger_reader.models.RequestBodyView`, or ``None`` when
        the operation takes no body.
    """
    if isinstance(body, dict):
        view: RequestBodyView = {}
        if body.get("required") is not None:
            view["required"] = body["required"]
        if body.get("description") is not None:
            view["description"] = body["description"]
        if body.get("content") is not None:
            view["content"] = body["content"]
        return view

    for param in params:
        if isinstance(param, dict) and param.get("in") == "body":
            view = {}
            if param.get("required") is not None:
                view["required"] = param["required"]
            if param.get("description") is not None:
                view["description"] = param["description"]
            schema = extract_parameter_schema(param)
            if schema is not None:
                view["schema"] = schema
            return view

    return None


def _extract_responses(responses: Any) -> dict[str, ResponseView]:
    """Unify responses per status code into ``{description, content | schema}``."""
    result: dict[str, ResponseView] = {}
    if not isinstance(responses, dict):
        return result

    for status_code, response in responses.items():
        if not isinstance(response, dict):
            continue
        view: ResponseView = {"description": response.get("description") or ""}
        if response.get("content") is not None:
            view["content"] = response["content"]
        elif response.get("schema") is not None:
            view["schema"] = response["schema"]
        result[str(status_code)] = view

    return result


def derive_base_url(document: DescriptionDocument, url: str) -> str:
    """Return the API base URL declared by *document*.

    Swagger 2.0 ``host`` wins and is combined with the first declared scheme
    (or the scheme of *url*, the document's own location) and ``basePath``.
    Otherwise the first OpenAPI 3.x server URL is used, else ``""``.
    """
    if document.host:
        scheme = document.schemes[0] if document.schemes else urlsplit(url).scheme
        return f"{scheme}://{document.host}{document.base_path}"
    if document.servers:
        return document.servers[0]
    return ""


def collect_tags(document: DescriptionDocument) -> list[TagInfo]:
    """Union the declared tag catalog with every tag used by an operation.

    Catalog descriptions are kept (a later duplicate entry wins); tags only
    seen on operations get an empty description. The result is sorted by
    name.
    """
    tags: dict[str, str] = {}

    for entry in document.tags:
        name = entry.get("name")
        if isinstance(name, str):
            description = entry.get("description")
            tags[name] = description if isinstance(description, str) else ""

    for path_item in document.paths.values():
        for _, operation in iter_operations(path_item):
            for name in _as_list(operation.get("tags")):
                if isinstance(name, str) and name not in tags:
                    tags[name] = ""

    return [{"name": name, "description": tags[name]} for name in sorted(tags)]
