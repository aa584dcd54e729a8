"""swagger_reader -- Read Swagger/OpenAPI documents for context-limited callers.

This package fetches a Swagger 2.0 or OpenAPI 3.x document from a URL,
dereferences it, filters its endpoints by keyword or tag, and returns a
compact, depth-bounded JSON summary (plus optional type definitions and
mock responses). The same pipeline is exposed as MCP tools over stdio and
as local CLI commands.

Typical usage::

    swagger-reader serve                                 # MCP server on stdio
    swagger-reader read https://petstore.swagger.io/v2/swagger.json --tag pet

Modules:
    app: Typer application factory and CLI entry point.
    server: MCP server wiring (tool listing and dispatch).
    tools: The three tool operations and their failure handling.
    models: Argument models, dialect tagging, and projection shapes.
    config: Layered, read-once process configuration.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stderr diagnostics and stdout data with Rich support.
    sanitize: Depth-bounded, cycle-safe copying of result trees.
"""

__version__ = "0.3.0"
