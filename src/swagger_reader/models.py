"""Canonical data shapes shared across all swagger_reader modules.

The models fall into three groups:

**Configuration models** (pydantic) -- :class:`GlobalConfig` is the optional
user config file; :class:`ServerConfig` is the resolved, frozen process
configuration injected into the pipeline.

**Tool argument models** (pydantic) -- :class:`UrlArgs` and
:class:`ReadApiArgs` declare the argument shape of each tool. They validate
incoming argument objects and also produce the JSON Schemas advertised by
the MCP server.

**Document and projection shapes** -- :class:`DescriptionDocument` tags a
parsed document with its :class:`Dialect` once, at ingestion. The reduced
projection returned to callers (:class:`OperationView` and friends) is made
of ``TypedDict`` shapes rather than pydantic models: the schemas they carry
come straight out of the resolver and may contain object cycles, which only
:func:`~swagger_reader.sanitize.sanitize` knows how to bound.
"""

from __future__ import annotations

import enum
from typing import Any, Optional, TypedDict
from urllib.parse import urlsplit

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


# --- Configuration ---


class GlobalConfig(BaseModel):
    """User-wide settings read from ``~/.config/swagger-reader/config.json``.

    Every field is optional; unset fields fall through to the defaults on
    :class:`ServerConfig`. See :func:`~swagger_reader.config.resolve_config`
    for the full precedence chain.
    """

    model_config = ConfigDict(extra="forbid")

    timeout_ms: Optional[int] = Field(
        default=None, description="Fetch/resolve timeout in milliseconds"
    )
    verify_ssl: Optional[bool] = Field(
        default=None, description="Verify TLS certificates when fetching documents"
    )


class ServerConfig(BaseModel):
    """Read-only process configuration, resolved once at startup."""

    model_config = ConfigDict(frozen=True)

    timeout_ms: int = Field(default=10_000, ge=100, le=600_000)
    verify_ssl: bool = True
    version: str = "0.0.0"

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    @property
    def user_agent(self) -> str:
        return f"swagger-reader/{self.version}"


# --- Tool arguments ---


class UrlArgs(BaseModel):
    """Arguments of ``validate_swagger`` and ``list_controller_tags``."""

    model_config = ConfigDict(extra="ignore", strict=True)

    url: str = Field(description="Full URL of the Swagger/OpenAPI document")
    use_fallback: bool = Field(
        default=True,
        description="Read the raw JSON directly when reference resolution fails",
    )

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        parts = urlsplit(value)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError("Invalid url")
        return value


class ReadApiArgs(UrlArgs):
    """Arguments of ``read_swagger_api``.

    ``path_pattern`` and ``generate_ts`` are accepted as aliases of
    ``keyword`` and ``generate_types`` for older clients.
    """

    keyword: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("keyword", "path_pattern"),
        description="Filter keyword, matched against path, summary and description",
    )
    tag: Optional[str] = Field(
        default=None, description="Only keep endpoints listing this tag"
    )
    generate_types: bool = Field(
        default=True,
        validation_alias=AliasChoices("generate_types", "generate_ts"),
        description="Append type definitions for the schema table",
    )
    generate_mock: bool = Field(
        default=False, description="Add a mock_response example to each operation"
    )
    max_depth: int = Field(
        default=20, ge=1, le=100, description="Maximum depth of the returned JSON"
    )
    limit_paths: int = Field(
        default=50, ge=0, le=10_000, description="Maximum paths returned (0 = unlimited)"
    )
    limit_ops: int = Field(
        default=200, ge=0, le=10_000, description="Maximum operations returned (0 = unlimited)"
    )


# --- Documents ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised as operations inside a path item."""

    GET = "get"
    POST = "post"
    PUT = "put"
    DELETE = "delete"
    PATCH = "patch"
    OPTIONS = "options"
    HEAD = "head"
    TRACE = "trace"


class Dialect(str, enum.Enum):
    """The two supported description formats."""

    SWAGGER2 = "swagger2"
    OPENAPI3 = "openapi3"


class DescriptionDocument(BaseModel):
    """A parsed Swagger/OpenAPI document, tagged with its dialect.

    Built by :func:`~swagger_reader.parser.loader.ingest_document`. The
    dialect-specific locations of the schema table and the server metadata
    are read once there, so downstream code never branches on raw keys.
    Field values are the resolver's objects, not copies.
    """

    dialect: Dialect
    version: str = Field(description="Raw 'swagger' or 'openapi' value, or 'unknown'")
    title: str = "No Title"
    paths: dict[str, Any] = Field(default_factory=dict)
    definitions: dict[str, Any] = Field(
        default_factory=dict,
        description="'definitions' (Swagger 2.0) or 'components.schemas' (OpenAPI 3.x)",
    )
    tags: list[dict[str, Any]] = Field(default_factory=list)
    host: Optional[str] = None
    base_path: str = ""
    schemes: list[str] = Field(default_factory=list)
    servers: list[str] = Field(default_factory=list)


# --- Projection shapes ---


ParameterView = TypedDict(
    "ParameterView",
    {
        "name": str,
        "in": str,
        "required": bool,
        "description": str,
        "schema": dict[str, Any],
    },
    total=False,
)


class RequestBodyView(TypedDict, total=False):
    required: bool
    description: str
    content: dict[str, Any]
    schema: dict[str, Any]


class ResponseView(TypedDict, total=False):
    description: str
    content: dict[str, Any]
    schema: dict[str, Any]


class OperationView(TypedDict, total=False):
    """Reduced view of one operation, as returned to the caller."""

    summary: str
    description: str
    operationId: str
    tags: list[str]
    parameters: list[ParameterView]
    requestBody: RequestBodyView
    responses: dict[str, ResponseView]
    mock_response: Any


class TagInfo(TypedDict):
    name: str
    description: str
