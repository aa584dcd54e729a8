"""Asynchronous document fetcher with a hard wall-clock timeout.

This module provides :class:`SpecFetcher`, a thin wrapper around
:class:`httpx.AsyncClient` used for every network read in one tool
invocation. It layers on:

- **Timeout race** -- :meth:`SpecFetcher.fetch_json` races the transfer
  against :func:`asyncio.wait_for`; on expiry the request task is cancelled,
  which aborts the in-flight transfer.
- **Status check** -- non-2xx responses raise
  :class:`~swagger_reader.exceptions.HttpStatusError`.
- **Content check** -- :meth:`~SpecFetcher.fetch_json` only accepts JSON
  content types; :meth:`~SpecFetcher.fetch_document` also accepts YAML.

A fresh fetcher is opened per invocation, so nothing is shared between
concurrent tool calls.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Optional

import httpx

from swagger_reader.exceptions import (
    ContentTypeError,
    FetchError,
    FetchTimeoutError,
    HttpStatusError,
    SpecParseError,
)
from swagger_reader.models import ServerConfig
from swagger_reader.output import debug
from swagger_reader.parser.loader import parse_content

_PREVIEW_CHARS = 100


class SpecFetcher:
    """Fetch and parse description documents over HTTP(S).

    Must be used as an async context manager so that the underlying
    transport is properly opened and closed.

    Args:
        config: Process configuration (timeout, TLS verification, version
            for the ``User-Agent`` header).
        transport: Optional :mod:`httpx` transport, e.g.
            :class:`httpx.MockTransport` in tests.

    Example::

        async with SpecFetcher(config) as fetcher:
            raw = await fetcher.fetch_json("https://example.com/swagger.json")
    """

    def __init__(
        self,
        config: ServerConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> SpecFetcher:
        self._client = httpx.AsyncClient(
            timeout=self._config.timeout_seconds,
            verify=self._config.verify_ssl,
            follow_redirects=True,
            headers={
                "User-Agent": self._config.user_agent,
                "Accept": "application/json, */*",
            },
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def timeout_ms(self) -> int:
        return self._config.timeout_ms

    # ------------------------------------------------------------------ #
    # Public fetch methods
    # ------------------------------------------------------------------ #

    async def fetch_json(self, url: str) -> Any:
        """Fetch *url* and parse its body as JSON within the timeout.

        A response without a ``Content-Type`` header is accepted and parsed
        as JSON; a declared non-JSON type is rejected before parsing.

        Raises:
            FetchTimeoutError: The transfer did not finish in time.
            HttpStatusError: The response status is not 2xx.
            ContentTypeError: The declared content type is not JSON.
            SpecParseError: The body is not valid JSON.
            FetchError: On network-level failures.
        """
        try:
            return await asyncio.wait_for(
                self._fetch_json(url), timeout=self._config.timeout_seconds
            )
        except asyncio.TimeoutError as exc:
            raise FetchTimeoutError(
                f"Request timed out after {self._config.timeout_ms} ms: {url}"
            ) from exc

    async def fetch_document(self, url: str) -> dict[str, Any]:
        """Fetch *url* and parse its body as a JSON or YAML object.

        Used by the resolver, which runs under its own overall timeout, so
        only the per-request :mod:`httpx` timeout applies here.

        Raises:
            HttpStatusError: The response status is not 2xx.
            SpecParseError: The body is neither a JSON nor a YAML object.
            FetchTimeoutError: The request exceeded the :mod:`httpx` timeout.
            FetchError: On network-level failures.
        """
        response = await self._get(url)
        content_type = response.headers.get("content-type", "").lower()
        hint = ""
        if "json" in content_type:
            hint = "json"
        elif "yaml" in content_type or "yml" in content_type:
            hint = "yaml"
        elif url.lower().endswith((".yaml", ".yml")):
            hint = "yaml"
        return parse_content(response.text, hint=hint)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    async def _fetch_json(self, url: str) -> Any:
        response = await self._get(url)

        content_type = response.headers.get("content-type")
        if content_type and "json" not in content_type.lower():
            raise ContentTypeError(content_type, response.text[:_PREVIEW_CHARS])

        try:
            return json.loads(response.text)
        except json.JSONDecodeError as exc:
            raise SpecParseError(f"Invalid JSON from {url}: {exc}") from exc

    async def _get(self, url: str) -> httpx.Response:
        if self._client is None:
            raise RuntimeError("SpecFetcher must be used as an async context manager")

        debug(f"GET {url}")
        try:
            response = await self._client.get(url)
        except httpx.TimeoutException as exc:
            raise FetchTimeoutError(
                f"Request timed out after {self._config.timeout_ms} ms: {url}"
            ) from exc
        except (httpx.RequestError, httpx.InvalidURL) as exc:
            raise FetchError(f"Failed to fetch {url}: {exc}") from exc

        if not response.is_success:
            raise HttpStatusError(response.status_code, response.reason_phrase)
        return response
