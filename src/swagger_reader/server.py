"""MCP server exposing the tools in :data:`swagger_reader.tools.TOOLS`.

Built on the low-level :class:`mcp.server.lowlevel.Server` so that argument
validation stays in our pydantic models (the SDK's own input validation is
switched off) and failures keep the ``Operation failed: ...`` wording.
Communication happens over stdio; all diagnostics go to stderr.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx
import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from swagger_reader.exceptions import SwaggerReaderError
from swagger_reader.models import ServerConfig
from swagger_reader.output import info
from swagger_reader.tools import TOOLS, call_tool

SERVER_NAME = "swagger-reader"


def create_server(
    config: ServerConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Server:
    """Build the MCP server with ``list_tools`` and ``call_tool`` handlers.

    Args:
        config: Process configuration shared (read-only) by every call.
        transport: Optional :mod:`httpx` transport passed to each fetcher.
    """
    server: Server = Server(SERVER_NAME, version=config.version)

    @server.list_tools()
    async def _list_tools() -> list[types.Tool]:
        return [
            types.Tool(
                name=spec.name,
                description=spec.description,
                inputSchema=spec.input_schema(),
            )
            for spec in TOOLS.values()
        ]

    @server.call_tool(validate_input=False)
    async def _call_tool(name: str, arguments: dict[str, Any] | None) -> list[types.TextContent]:
        result = await call_tool(name, arguments, config, transport=transport)
        if result.is_error:
            # The SDK reports a raised exception as an isError result
            raise SwaggerReaderError(result.text)
        return [types.TextContent(type="text", text=result.text)]

    return server


async def serve(config: ServerConfig) -> None:
    """Run the MCP server on stdin/stdout until the client disconnects."""
    server = create_server(config)
    async with stdio_server() as (read_stream, write_stream):
        info(f"Swagger reader MCP server v{config.version} running on stdio")
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )
