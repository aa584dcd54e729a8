"""Exception hierarchy for swagger_reader.

All exceptions inherit from :class:`SwaggerReaderError`, which carries an
``exit_code`` attribute mapped to a constant from
:mod:`swagger_reader.exit_codes`. The CLI entry point in
:func:`swagger_reader.app.main` exits with that code; the MCP tool boundary in
:func:`swagger_reader.tools.call_tool` turns any exception into an error
result instead.

Subclass hierarchy::

    SwaggerReaderError (exit 1)
    +-- ArgumentValidationError (exit 2)
    +-- UnknownToolError        (exit 2)
    +-- FetchTimeoutError       (exit 4)
    +-- HttpStatusError         (exit 5)
    +-- ContentTypeError        (exit 5)
    +-- FetchError              (exit 6)
    +-- SpecParseError          (exit 7)
    +-- ResolutionError         (exit 7)
    +-- CompoundError           (exit 7)
    +-- TypeSynthesisError      (exit 1)
    +-- ConfigError             (exit 1)
"""

from __future__ import annotations

from swagger_reader.exit_codes import (
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_HTTP_ERROR,
    EXIT_INVALID_USAGE,
    EXIT_SPEC_PARSE_ERROR,
    EXIT_TIMEOUT,
)


class SwaggerReaderError(Exception):
    """Base exception for all swagger_reader errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ArgumentValidationError(SwaggerReaderError):
    """Raised when tool arguments do not match their declared shape.

    Args:
        issues: ``(field_path, reason)`` pairs, one per invalid field.
    """

    exit_code = EXIT_INVALID_USAGE

    def __init__(self, issues: list[tuple[str, str]]):
        self.issues = issues
        detail = "; ".join(f"{path}: {reason}" for path, reason in issues)
        super().__init__(f"Invalid arguments: {detail}")


class UnknownToolError(SwaggerReaderError):
    """Raised when a tool name is not one of the registered tools."""

    exit_code = EXIT_INVALID_USAGE


class FetchTimeoutError(SwaggerReaderError):
    """Raised when a fetch or resolve does not finish within the timeout."""

    exit_code = EXIT_TIMEOUT


class HttpStatusError(SwaggerReaderError):
    """Raised when the document URL answers with a non-2xx status."""

    exit_code = EXIT_HTTP_ERROR

    def __init__(self, status_code: int, reason: str):
        self.status_code = status_code
        self.reason = reason
        super().__init__(f"HTTP {status_code}: {reason}")


class ContentTypeError(SwaggerReaderError):
    """Raised when the response does not declare a JSON content type.

    The first 100 characters of the body are kept in ``preview`` so the
    caller can tell an HTML login page from a misconfigured server.
    """

    exit_code = EXIT_HTTP_ERROR

    def __init__(self, content_type: str, preview: str):
        self.content_type = content_type
        self.preview = preview
        super().__init__(
            f"Response is not JSON (Content-Type: {content_type}). "
            f"Preview: {preview}..."
        )


class FetchError(SwaggerReaderError):
    """Raised on network-level failures (DNS resolution, connection refused)."""

    exit_code = EXIT_CONNECTION_ERROR


class SpecParseError(SwaggerReaderError):
    """Raised when a body is not valid JSON/YAML or is not a Swagger/OpenAPI document."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class ResolutionError(SwaggerReaderError):
    """Raised when ``$ref`` dereferencing fails.

    Args:
        message: Description of the failure.
        cause: The underlying exception, if any (also set as ``__cause__``
            by the raiser).
    """

    exit_code = EXIT_SPEC_PARSE_ERROR

    def __init__(self, message: str, cause: BaseException | None = None):
        self.cause = cause
        super().__init__(message)


class CompoundError(SwaggerReaderError):
    """Raised when both dereferencing and the raw fallback read fail."""

    exit_code = EXIT_SPEC_PARSE_ERROR

    def __init__(self, resolution_cause: BaseException, fallback_cause: BaseException):
        self.resolution_cause = resolution_cause
        self.fallback_cause = fallback_cause
        super().__init__(
            "Both reference resolution and the raw fallback read failed.\n"
            f"Resolver: {resolution_cause}\n"
            f"Fallback: {fallback_cause}"
        )


class TypeSynthesisError(SwaggerReaderError):
    """Raised when type definitions cannot be generated from the schema table.

    Never fatal: :func:`swagger_reader.tools.read_api` turns it into an
    inline comment appended to the summary.
    """


class ConfigError(SwaggerReaderError):
    """Raised for configuration problems (invalid JSON, out-of-range values)."""
