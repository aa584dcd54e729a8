"""Shared test fixtures for swagger_reader.

Provides reusable fixtures for loading document fixtures, serving them
through :class:`httpx.MockTransport`, isolating configuration, managing
output state, and running CLI commands. These fixtures are automatically
discovered by pytest and available to all test modules without explicit
imports.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any, Union

import httpx
import pytest

from swagger_reader.models import ServerConfig
from swagger_reader.output import OutputManager, reset_output, set_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"

Routes = dict[str, Union[dict[str, Any], httpx.Response, Callable[[httpx.Request], httpx.Response]]]


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Document fixtures (plain dicts loaded from JSON files)
# ---------------------------------------------------------------------------


def load_fixture(name: str) -> dict[str, Any]:
    with open(FIXTURES_DIR / name, encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def petstore_v2_raw() -> dict[str, Any]:
    """Load the Swagger 2.0 petstore document."""
    return load_fixture("petstore_v2.json")


@pytest.fixture
def petstore_v3_raw() -> dict[str, Any]:
    """Load the OpenAPI 3.0 petstore document."""
    return load_fixture("petstore_v3.json")


@pytest.fixture
def recursive_raw() -> dict[str, Any]:
    """Load an OpenAPI 3.0 document with a self-referencing schema."""
    return load_fixture("recursive_v3.json")


# ---------------------------------------------------------------------------
# Network fixtures
# ---------------------------------------------------------------------------


def route_handler(routes: Routes) -> Callable[[httpx.Request], httpx.Response]:
    """Return a handler answering from *routes*, keyed by full URL.

    A dict value is served as ``application/json``; a Response is returned
    as-is; a callable receives the request. Unknown URLs answer 404.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        route = routes.get(str(request.url))
        if route is None:
            return httpx.Response(404, text="not found")
        if callable(route):
            return route(request)
        if isinstance(route, httpx.Response):
            return route
        return httpx.Response(200, json=route)

    return handler


def make_transport(routes: Routes) -> httpx.MockTransport:
    return httpx.MockTransport(route_handler(routes))


class CallCounter:
    """Wraps a transport handler and counts requests per URL."""

    def __init__(self, routes: Routes) -> None:
        self.calls: list[str] = []
        self._route = route_handler(routes)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(str(request.url))
        return self._route(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def config() -> ServerConfig:
    """A short-timeout configuration for tests."""
    return ServerConfig(timeout_ms=2000, version="0.3.0-test")


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path so
    that tests never touch real user config, and clears all
    SWAGGER_READER_* environment variables.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("swagger_reader.config._is_xdg_platform", lambda: True)

    for var in ["SWAGGER_READER_TIMEOUT_MS", "SWAGGER_READER_VERIFY_SSL"]:
        monkeypatch.delenv(var, raising=False)

    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet, colourless output manager for the test."""
    output = OutputManager(no_color=True, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()


# ---------------------------------------------------------------------------
# Transport factories
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_transport() -> Callable[[Routes], httpx.MockTransport]:
    """Factory fixture: ``mock_transport({url: document})``."""
    return make_transport


@pytest.fixture
def call_counter() -> Callable[[Routes], CallCounter]:
    """Factory fixture: ``call_counter({url: document})`` records each request."""
    return CallCounter
