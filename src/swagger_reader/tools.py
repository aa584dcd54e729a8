"""The three tools exposed over MCP and the CLI.

Each tool is a :class:`ToolSpec` in the :data:`TOOLS` registry: a name, a
description, a pydantic argument model and an async handler. The pipeline
for one invocation is:

1. :func:`parse_args` validates the argument object (no network access on
   failure).
2. A fresh :class:`~swagger_reader.parser.fetcher.SpecFetcher` is opened.
3. The handler loads the document through
   :func:`~swagger_reader.parser.acquire.load_document` and renders its text.

:func:`call_tool` is the tool boundary: it never raises, and turns any
failure into a :class:`ToolResult` with ``is_error`` set.
"""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Optional

import httpx
from pydantic import BaseModel, ValidationError

from swagger_reader.exceptions import ArgumentValidationError, TypeSynthesisError, UnknownToolError
from swagger_reader.generator import attach_mock_responses, synthesize_types
from swagger_reader.models import ReadApiArgs, ServerConfig, UrlArgs
from swagger_reader.output import debug, error, info, warning
from swagger_reader.parser import (
    SpecFetcher,
    collect_tags,
    derive_base_url,
    filter_paths,
    limit_paths,
    load_document,
    simplify_paths,
)
from swagger_reader.sanitize import sanitize

FAILURE_HINT = "Check that the URL is correct and the service is reachable."
TYPE_ERROR_PREFIX = "# [Type generation error]: "


@dataclass(frozen=True)
class ToolResult:
    """Text payload of one tool invocation."""

    text: str
    is_error: bool = False


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    args_model: type[BaseModel]
    handler: Callable[[Any, SpecFetcher], Awaitable[str]]

    def input_schema(self) -> dict[str, Any]:
        """JSON Schema advertised to MCP clients."""
        return self.args_model.model_json_schema()


def to_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)


def failure_text(exc: BaseException) -> str:
    return f"Operation failed: {exc}\n{FAILURE_HINT}"


# ------------------------------------------------------------------ #
# Argument validation
# ------------------------------------------------------------------ #


def parse_args(model: type[BaseModel], arguments: Optional[dict[str, Any]]) -> Any:
    """Validate *arguments* against *model*.

    ``None`` counts as an empty object.

    Raises:
        ArgumentValidationError: With one ``(path, reason)`` issue per
            invalid field; paths are dotted, ``(root)`` for the object itself.
    """
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, dict):
        raise ArgumentValidationError([("(root)", "Input should be an object")])

    try:
        return model.model_validate(arguments)
    except ValidationError as exc:
        issues = [
            (".".join(str(part) for part in err["loc"]) or "(root)", err["msg"])
            for err in exc.errors()
        ]
        raise ArgumentValidationError(issues) from exc


# ------------------------------------------------------------------ #
# Handlers
# ------------------------------------------------------------------ #


async def health_check(args: UrlArgs, fetcher: SpecFetcher) -> str:
    """Report version, title and endpoint count of the document."""
    document = await load_document(args.url, fetcher, use_fallback=args.use_fallback)
    return (
        "Document parsed successfully.\n"
        f"Version: {document.version}\n"
        f"Title: {document.title}\n"
        f"Endpoints: {len(document.paths)}"
    )


async def list_tags(args: UrlArgs, fetcher: SpecFetcher) -> str:
    """List every tag, declared or used, as a JSON array."""
    document = await load_document(args.url, fetcher, use_fallback=args.use_fallback)
    return to_json(collect_tags(document))


async def read_api(args: ReadApiArgs, fetcher: SpecFetcher) -> str:
    """Return the filtered, reduced endpoint projection.

    The JSON payload holds ``_meta`` (url, match count, echoed filters and
    truncation counts when a limit applied), ``baseUrl`` and ``paths``.
    Type definitions for the document's schema table follow it when
    requested. No matches yield a plain diagnostic and nothing is
    synthesized.
    """
    document = await load_document(args.url, fetcher, use_fallback=args.use_fallback)

    matched, count = filter_paths(document.paths, args.keyword, args.tag)
    if count == 0:
        return no_match_text(args.keyword, args.tag)

    limited = limit_paths(matched, args.limit_paths, args.limit_ops)
    projection = simplify_paths(limited.paths)
    if args.generate_mock:
        projection = attach_mock_responses(projection)

    meta: dict[str, Any] = {
        "url": args.url,
        "filtered_count": count,
        "filters": {"keyword": args.keyword, "tag": args.tag},
    }
    if limited.omitted_paths or limited.omitted_operations:
        meta["returned_count"] = len(limited.paths)
        meta["truncated"] = {
            "paths": limited.omitted_paths,
            "operations": limited.omitted_operations,
        }
        debug(
            f"Output limited: {limited.omitted_paths} paths and "
            f"{limited.omitted_operations} operations omitted"
        )

    result = {
        "_meta": meta,
        "baseUrl": derive_base_url(document, args.url),
        "paths": projection,
    }
    text = to_json(sanitize(result, args.max_depth))

    if args.generate_types and document.definitions:
        try:
            text += "\n\n" + synthesize_types(document.definitions)
        except TypeSynthesisError as exc:
            warning(f"Type generation failed: {exc}")
            text += f"\n\n{TYPE_ERROR_PREFIX}{exc}"

    return text


def no_match_text(keyword: Optional[str], tag: Optional[str]) -> str:
    return (
        "No matching endpoints found.\n"
        f"keyword: {keyword or 'none'}\n"
        f"tag: {tag or 'none'}\n\n"
        "Try list_controller_tags to see the available modules, "
        "or check the keyword."
    )


TOOLS: dict[str, ToolSpec] = {
    spec.name: spec
    for spec in (
        ToolSpec(
            name="validate_swagger",
            description=(
                "Health check: verify that a Swagger/OpenAPI document is reachable "
                "and parses. Returns version, title and endpoint count only."
            ),
            args_model=UrlArgs,
            handler=health_check,
        ),
        ToolSpec(
            name="list_controller_tags",
            description=(
                "Step 1: list the tags (controllers/modules) of a Swagger/OpenAPI "
                "document. Use it to see which modules exist before reading details."
            ),
            args_model=UrlArgs,
            handler=list_tags,
        ),
        ToolSpec(
            name="read_swagger_api",
            description=(
                "Step 2: read endpoint definitions from a Swagger/OpenAPI document. "
                "Filter by tag or keyword; optionally append Python type "
                "definitions and mock responses."
            ),
            args_model=ReadApiArgs,
            handler=read_api,
        ),
    )
}


# ------------------------------------------------------------------ #
# Dispatch
# ------------------------------------------------------------------ #


async def run_tool(
    name: str,
    arguments: Optional[dict[str, Any]],
    config: ServerConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> str:
    """Run tool *name* and return its text; errors propagate.

    Raises:
        UnknownToolError: *name* is not registered.
        ArgumentValidationError: *arguments* do not fit the tool.
        SwaggerReaderError: Any pipeline failure.
    """
    tool = TOOLS.get(name)
    if tool is None:
        raise UnknownToolError(f"Unknown tool: {name}")

    args = parse_args(tool.args_model, arguments)
    info(f"Calling tool {name}: {args.url}")
    async with SpecFetcher(config, transport=transport) as fetcher:
        return await tool.handler(args, fetcher)


async def call_tool(
    name: str,
    arguments: Optional[dict[str, Any]],
    config: ServerConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ToolResult:
    """Run tool *name*, converting every failure into an error result."""
    try:
        text = await run_tool(name, arguments, config, transport=transport)
    except Exception as exc:
        error(f"Tool {name} failed: {exc}")
        return ToolResult(failure_text(exc), is_error=True)
    return ToolResult(text)
