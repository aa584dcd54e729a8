"""Tests for swagger_reader.parser.acquire -- dereference with raw fallback."""

from __future__ import annotations

import asyncio
from typing import Any

import httpx
import pytest

from swagger_reader.exceptions import CompoundError, ResolutionError
from swagger_reader.models import DescriptionDocument, ServerConfig
from swagger_reader.parser.acquire import load_document
from swagger_reader.parser.fetcher import SpecFetcher

URL = "https://api.test/swagger.json"

DANGLING = {
    "swagger": "2.0",
    "info": {"title": "Broken refs"},
    "paths": {
        "/a": {"get": {"responses": {"200": {"schema": {"$ref": "#/definitions/Missing"}}}}}
    },
}


def _load(
    transport: httpx.MockTransport, config: ServerConfig, use_fallback: bool = True
) -> DescriptionDocument:
    async def run() -> DescriptionDocument:
        async with SpecFetcher(config, transport=transport) as fetcher:
            return await load_document(URL, fetcher, use_fallback=use_fallback)

    return asyncio.run(run())


class TestLoadDocument:
    def test_resolved_document(self, mock_transport, config, petstore_v2_raw: dict[str, Any]) -> None:
        doc = _load(mock_transport({URL: petstore_v2_raw}), config)

        schema = doc.paths["/pets/{petId}"]["get"]["responses"]["200"]["schema"]
        assert schema is doc.definitions["Pet"]

    def test_fallback_returns_raw_document(self, mock_transport, config) -> None:
        doc = _load(mock_transport({URL: DANGLING}), config)

        assert doc.title == "Broken refs"
        schema = doc.paths["/a"]["get"]["responses"]["200"]["schema"]
        assert schema == {"$ref": "#/definitions/Missing"}

    def test_fallback_attempted_exactly_once(self, call_counter, config) -> None:
        counter = call_counter(
            {URL: httpx.Response(200, text="<html>login</html>", headers={"content-type": "text/html"})}
        )

        with pytest.raises(CompoundError):
            _load(counter.transport, config)

        # One fetch by the resolver, one by the fallback reader
        assert counter.calls == [URL, URL]

    def test_compound_error_carries_both_messages(self, mock_transport, config) -> None:
        transport = mock_transport(
            {URL: httpx.Response(200, text="<html>login</html>", headers={"content-type": "text/html"})}
        )

        with pytest.raises(CompoundError) as exc_info:
            _load(transport, config)

        message = str(exc_info.value)
        assert "Resolver:" in message
        assert "Fallback:" in message
        assert "Document must be a JSON/YAML object" in message
        assert "Response is not JSON (Content-Type: text/html)" in message
        assert isinstance(exc_info.value.resolution_cause, ResolutionError)

    def test_no_fallback_propagates_resolver_error(self, call_counter, config) -> None:
        counter = call_counter({URL: DANGLING})

        with pytest.raises(ResolutionError, match="Missing"):
            _load(counter.transport, config, use_fallback=False)

        assert counter.calls == [URL]

    def test_resolution_timeout(self) -> None:
        config = ServerConfig(timeout_ms=100)

        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(5)
            return httpx.Response(200, json={})

        with pytest.raises(ResolutionError, match="timed out") as exc_info:
            _load(httpx.MockTransport(handler), config, use_fallback=False)
        assert exc_info.value.cause is not None

    def test_diagnostics_go_to_stderr(self, mock_transport, config, capsys) -> None:
        _load(mock_transport({URL: DANGLING}), config)

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Falling back" in captured.err


class TestMalformedReferences:
    DOC = {
        "swagger": "2.0",
        "info": {"title": "Bad external ref"},
        "paths": {"/a": {"get": {"responses": {"200": {"schema": {"$ref": "http://[bad/x.json#/X"}}}}}},
    }

    def test_falls_back_to_raw_read(self, call_counter, config) -> None:
        counter = call_counter({URL: self.DOC})

        doc = _load(counter.transport, config)

        assert doc.title == "Bad external ref"
        assert counter.calls == [URL, URL]

    def test_reported_as_resolution_error(self, mock_transport, config) -> None:
        with pytest.raises(ResolutionError, match="Malformed \\$ref") as exc_info:
            _load(mock_transport({URL: self.DOC}), config, use_fallback=False)

        assert isinstance(exc_info.value.cause, ValueError)

    def test_compound_error_when_raw_read_also_fails(self, config) -> None:
        responses = iter([httpx.Response(200, json=self.DOC), httpx.Response(503)])

        def handler(request: httpx.Request) -> httpx.Response:
            return next(responses)

        with pytest.raises(CompoundError) as exc_info:
            _load(httpx.MockTransport(handler), config)

        message = str(exc_info.value)
        assert "Malformed $ref" in message
        assert "HTTP 503" in message
