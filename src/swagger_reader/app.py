"""Typer application and console-script entry points for swagger_reader.

Two console scripts are declared in ``pyproject.toml``:

* ``swagger-reader`` -> :func:`main` -- the full CLI. ``serve`` runs the MCP
  server on stdio; ``check``, ``tags`` and ``read`` run the same tool logic
  locally and print its text payload to stdout.
* ``swagger-reader-mcp`` -> :func:`serve_main` -- the MCP server alone, for
  client configurations that launch a bare command.

Both install a SIGINT handler and map errors to exit codes: a
:class:`~swagger_reader.exceptions.SwaggerReaderError` prints its message and
exits with its ``exit_code``; anything else writes a crash log under the data
directory.

See Also:
    :mod:`swagger_reader.config`: Configuration resolved in :func:`main_callback`.
    :mod:`swagger_reader.output`: Output manager initialised in :func:`main_callback`.
"""

from __future__ import annotations

import asyncio
import signal
import sys
import traceback
from collections.abc import Callable
from datetime import datetime
from typing import Any, Optional

import typer

from swagger_reader.exit_codes import EXIT_GENERIC_FAILURE
from swagger_reader.models import ServerConfig


app = typer.Typer(
    name="swagger-reader",
    help="Read Swagger 2.0 / OpenAPI 3.x documents for AI assistants (MCP server and CLI).",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        from swagger_reader.config import get_version

        typer.echo(f"swagger-reader {get_version()}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    timeout_ms: Optional[int] = typer.Option(
        None, "--timeout-ms", help="Fetch/resolve timeout in milliseconds."
    ),
    insecure: bool = typer.Option(
        False, "--insecure", help="Do not verify TLS certificates."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~swagger_reader.output.OutputManager`,
    resolves the process configuration and stores it in ``ctx.obj`` so that
    sub-commands can read it.

    Args:
        ctx: Typer invocation context.
        version: If ``True``, print the version string and exit.
        timeout_ms: Timeout override (highest precedence).
        insecure: Disable TLS certificate verification.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress non-essential diagnostic output.
        verbose: Enable debug-level diagnostic output.
    """
    from swagger_reader.config import resolve_config
    from swagger_reader.exceptions import ConfigError
    from swagger_reader.output import OutputManager, error, set_output

    set_output(OutputManager(no_color=no_color, quiet=quiet, verbose=verbose))

    try:
        config = resolve_config(
            cli_timeout_ms=timeout_ms,
            cli_verify_ssl=False if insecure else None,
        )
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    ctx.ensure_object(dict)
    ctx.obj["config"] = config


# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #


def _run_tool_command(ctx: typer.Context, name: str, arguments: dict[str, Any]) -> None:
    """Run tool *name* and print its text, or exit with the error's code."""
    from swagger_reader.exceptions import SwaggerReaderError
    from swagger_reader.output import error, print_data
    from swagger_reader.tools import run_tool

    config: ServerConfig = ctx.obj["config"]
    try:
        text = asyncio.run(
            run_tool(name, arguments, config, transport=ctx.obj.get("transport"))
        )
    except SwaggerReaderError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    print_data(text)


@app.command("serve")
def serve_command(ctx: typer.Context) -> None:
    """Run the MCP server on stdio."""
    from swagger_reader.server import serve

    asyncio.run(serve(ctx.obj["config"]))


@app.command("check")
def check_command(
    ctx: typer.Context,
    url: str = typer.Argument(..., help="URL of the Swagger/OpenAPI document."),
    no_fallback: bool = typer.Option(
        False, "--no-fallback", help="Fail instead of reading the raw JSON."
    ),
) -> None:
    """Check that a document is reachable and parses."""
    _run_tool_command(ctx, "validate_swagger", {"url": url, "use_fallback": not no_fallback})


@app.command("tags")
def tags_command(
    ctx: typer.Context,
    url: str = typer.Argument(..., help="URL of the Swagger/OpenAPI document."),
    no_fallback: bool = typer.Option(
        False, "--no-fallback", help="Fail instead of reading the raw JSON."
    ),
) -> None:
    """List the tags (controllers/modules) of a document."""
    _run_tool_command(
        ctx, "list_controller_tags", {"url": url, "use_fallback": not no_fallback}
    )


@app.command("read")
def read_command(
    ctx: typer.Context,
    url: str = typer.Argument(..., help="URL of the Swagger/OpenAPI document."),
    keyword: Optional[str] = typer.Option(
        None, "--keyword", "-k", help="Match path, summary or description."
    ),
    tag: Optional[str] = typer.Option(None, "--tag", "-t", help="Only this tag."),
    no_types: bool = typer.Option(
        False, "--no-types", help="Do not append type definitions."
    ),
    mock: bool = typer.Option(False, "--mock", help="Add mock responses."),
    max_depth: int = typer.Option(20, "--max-depth", help="Maximum JSON depth."),
    limit_paths: int = typer.Option(
        50, "--limit-paths", help="Maximum paths returned (0 = unlimited)."
    ),
    limit_ops: int = typer.Option(
        200, "--limit-ops", help="Maximum operations returned (0 = unlimited)."
    ),
    no_fallback: bool = typer.Option(
        False, "--no-fallback", help="Fail instead of reading the raw JSON."
    ),
) -> None:
    """Read endpoint definitions, optionally filtered.

    Example::

        swagger-reader read https://petstore.swagger.io/v2/swagger.json --tag pet
    """
    arguments: dict[str, Any] = {
        "url": url,
        "use_fallback": not no_fallback,
        "generate_types": not no_types,
        "generate_mock": mock,
        "max_depth": max_depth,
        "limit_paths": limit_paths,
        "limit_ops": limit_ops,
    }
    if keyword is not None:
        arguments["keyword"] = keyword
    if tag is not None:
        arguments["tag"] = tag
    _run_tool_command(ctx, "read_swagger_api", arguments)


# ------------------------------------------------------------------ #
# Entry points
# ------------------------------------------------------------------ #


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from swagger_reader.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def _run_guarded(entry: Callable[[], None]) -> None:
    _setup_signal_handlers()
    try:
        entry()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from swagger_reader.exceptions import SwaggerReaderError
        from swagger_reader.output import error

        if isinstance(exc, SwaggerReaderError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)


def main() -> None:
    """CLI entry point invoked by the ``swagger-reader`` console script.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _run_guarded(app)


def serve_main() -> None:
    """Entry point of the ``swagger-reader-mcp`` console script.

    Resolves configuration from the environment and user config file only,
    then serves MCP on stdio.
    """

    def _serve() -> None:
        from swagger_reader.config import resolve_config
        from swagger_reader.server import serve

        asyncio.run(serve(resolve_config()))

    _run_guarded(_serve)


__all__ = ["app", "main", "serve_main"]
