"""Tests for swagger_reader.parser.resolver."""

from __future__ import annotations

import asyncio
from typing import Any

import httpx
import pytest

from swagger_reader.exceptions import ResolutionError
from swagger_reader.models import ServerConfig
from swagger_reader.parser.fetcher import SpecFetcher
from swagger_reader.parser.resolver import dereference, resolve_refs


def _dereference(url: str, transport: httpx.MockTransport, config: ServerConfig) -> dict[str, Any]:
    async def run() -> dict[str, Any]:
        async with SpecFetcher(config, transport=transport) as fetcher:
            return await dereference(url, fetcher)

    return asyncio.run(run())


# ---------------------------------------------------------------------------
# resolve_refs (in-memory)
# ---------------------------------------------------------------------------


class TestResolveRefs:
    """Test internal pointer resolution."""

    def test_resolves_simple_ref(self) -> None:
        spec = {
            "paths": {
                "/pets": {
                    "get": {
                        "responses": {
                            "200": {
                                "content": {
                                    "application/json": {
                                        "schema": {"$ref": "#/components/schemas/Pet"}
                                    }
                                }
                            }
                        }
                    }
                }
            },
            "components": {
                "schemas": {
                    "Pet": {"type": "object", "properties": {"name": {"type": "string"}}}
                }
            },
        }

        resolved = resolve_refs(spec)

        schema = resolved["paths"]["/pets"]["get"]["responses"]["200"]["content"][
            "application/json"
        ]["schema"]
        assert schema == {"type": "object", "properties": {"name": {"type": "string"}}}

    def test_does_not_mutate_original(self) -> None:
        spec = {
            "definitions": {"Item": {"type": "string"}},
            "paths": {"/x": {"get": {"responses": {"200": {"schema": {"$ref": "#/definitions/Item"}}}}}},
        }

        resolve_refs(spec)

        assert spec["paths"]["/x"]["get"]["responses"]["200"]["schema"] == {
            "$ref": "#/definitions/Item"
        }

    def test_shared_target_is_same_object(self, petstore_v2_raw: dict[str, Any]) -> None:
        resolved = resolve_refs(petstore_v2_raw)

        pet = resolved["definitions"]["Pet"]
        get_one = resolved["paths"]["/pets/{petId}"]["get"]["responses"]["200"]["schema"]
        list_items = resolved["paths"]["/pets"]["get"]["responses"]["200"]["schema"]["items"]
        assert get_one is pet
        assert list_items is pet

    def test_recursive_schema_becomes_cycle(self, recursive_raw: dict[str, Any]) -> None:
        resolved = resolve_refs(recursive_raw)

        node = resolved["components"]["schemas"]["Node"]
        assert node["properties"]["parent"] is node
        assert node["properties"]["children"]["items"] is node

    def test_ref_chain_is_followed(self) -> None:
        spec = {
            "definitions": {
                "Alias": {"$ref": "#/definitions/Target"},
                "Target": {"type": "integer"},
            },
            "root": {"$ref": "#/definitions/Alias"},
        }

        resolved = resolve_refs(spec)

        assert resolved["root"] == {"type": "integer"}
        assert resolved["root"] is resolved["definitions"]["Target"]

    def test_sibling_keys_are_ignored(self) -> None:
        spec = {
            "definitions": {"A": {"type": "string"}},
            "x": {"$ref": "#/definitions/A", "description": "ignored"},
        }
        assert resolve_refs(spec)["x"] == {"type": "string"}

    def test_escaped_pointer_segments(self) -> None:
        spec = {
            "paths": {"/a/b": {"get": {"summary": "slash"}}},
            "x": {"$ref": "#/paths/~1a~1b/get"},
        }
        assert resolve_refs(spec)["x"] == {"summary": "slash"}

    def test_array_index_pointer(self) -> None:
        spec = {"list": [{"v": 1}, {"v": 2}], "x": {"$ref": "#/list/1"}}
        assert resolve_refs(spec)["x"] == {"v": 2}

    def test_dangling_pointer_fails(self) -> None:
        with pytest.raises(ResolutionError, match="key 'Missing' not found"):
            resolve_refs({"x": {"$ref": "#/definitions/Missing"}, "definitions": {}})

    def test_invalid_array_index_fails(self) -> None:
        with pytest.raises(ResolutionError, match="invalid array index"):
            resolve_refs({"list": [], "x": {"$ref": "#/list/5"}})

    def test_pure_ref_loop_fails(self) -> None:
        spec = {
            "definitions": {
                "A": {"$ref": "#/definitions/B"},
                "B": {"$ref": "#/definitions/A"},
            }
        }
        with pytest.raises(ResolutionError, match="Circular \\$ref chain"):
            resolve_refs(spec)

    def test_external_ref_without_document_fails(self) -> None:
        with pytest.raises(ResolutionError, match="External \\$ref not available"):
            resolve_refs({"x": {"$ref": "other.json#/Thing"}})

    def test_pointer_through_ref_node(self) -> None:
        spec = {
            "definitions": {
                "Base": {"type": "object", "properties": {"id": {"type": "integer"}}},
                "Wrapper": {"$ref": "#/definitions/Base"},
            },
            "x": {"$ref": "#/definitions/Wrapper/properties/id"},
        }

        resolved = resolve_refs(spec)

        assert resolved["x"] == {"type": "integer"}
        assert resolved["x"] is resolved["definitions"]["Base"]["properties"]["id"]

    def test_pointer_through_ref_loop_fails(self) -> None:
        spec = {
            "definitions": {"Loop": {"$ref": "#/definitions/Loop/properties/a"}},
            "x": {"$ref": "#/definitions/Loop"},
        }

        with pytest.raises(ResolutionError, match="Circular"):
            resolve_refs(spec)

    def test_malformed_ref(self) -> None:
        with pytest.raises(ResolutionError, match="Malformed \\$ref"):
            resolve_refs({"x": {"$ref": "http://[bad/x.json#/X"}})


# ---------------------------------------------------------------------------
# dereference (network-backed)
# ---------------------------------------------------------------------------


class TestDereference:
    """Test document loading and external references."""

    def test_resolves_external_relative_ref(self, mock_transport, config) -> None:
        transport = mock_transport(
            {
                "https://api.test/specs/main.json": {
                    "openapi": "3.0.0",
                    "paths": {
                        "/e": {
                            "get": {
                                "responses": {
                                    "200": {"schema": {"$ref": "common.json#/Error"}}
                                }
                            }
                        }
                    },
                },
                "https://api.test/specs/common.json": {
                    "Error": {"type": "object", "properties": {"code": {"type": "integer"}}}
                },
            }
        )

        resolved = _dereference("https://api.test/specs/main.json", transport, config)

        schema = resolved["paths"]["/e"]["get"]["responses"]["200"]["schema"]
        assert schema["properties"]["code"] == {"type": "integer"}

    def test_resolves_external_yaml(self, mock_transport, config) -> None:
        transport = mock_transport(
            {
                "https://api.test/main.json": {
                    "swagger": "2.0",
                    "definitions": {"Ext": {"$ref": "https://cdn.test/types.yaml#/Money"}},
                },
                "https://cdn.test/types.yaml": httpx.Response(
                    200,
                    text="Money:\n  type: number\n",
                    headers={"content-type": "application/yaml"},
                ),
            }
        )

        resolved = _dereference("https://api.test/main.json", transport, config)

        assert resolved["definitions"]["Ext"] == {"type": "number"}

    def test_external_document_fetched_once(self, call_counter, config) -> None:
        counter = call_counter(
            {
                "https://api.test/main.json": {
                    "swagger": "2.0",
                    "definitions": {
                        "A": {"$ref": "shared.json#/A"},
                        "B": {"$ref": "shared.json#/B"},
                    },
                },
                "https://api.test/shared.json": {"A": {"type": "string"}, "B": {"type": "integer"}},
            }
        )

        _dereference("https://api.test/main.json", counter.transport, config)

        assert counter.calls.count("https://api.test/shared.json") == 1

    def test_failed_external_fetch_is_resolution_error(self, mock_transport, config) -> None:
        transport = mock_transport(
            {
                "https://api.test/main.json": {
                    "swagger": "2.0",
                    "definitions": {"A": {"$ref": "missing.json#/A"}},
                }
            }
        )

        with pytest.raises(ResolutionError, match="missing.json") as exc_info:
            _dereference("https://api.test/main.json", transport, config)
        assert exc_info.value.cause is not None

    def test_non_http_external_ref_rejected(self, mock_transport, config) -> None:
        transport = mock_transport(
            {
                "https://api.test/main.json": {
                    "swagger": "2.0",
                    "definitions": {"A": {"$ref": "file:///etc/passwd#/A"}},
                }
            }
        )

        with pytest.raises(ResolutionError, match="Unsupported external"):
            _dereference("https://api.test/main.json", transport, config)

    def test_not_a_description_document(self, mock_transport, config) -> None:
        transport = mock_transport({"https://api.test/main.json": {"hello": "world"}})

        with pytest.raises(ResolutionError, match="Failed to load"):
            _dereference("https://api.test/main.json", transport, config)

    def test_root_http_error_wrapped(self, mock_transport, config) -> None:
        transport = mock_transport({})

        with pytest.raises(ResolutionError, match="HTTP 404") as exc_info:
            _dereference("https://api.test/main.json", transport, config)
        assert exc_info.value.cause.status_code == 404
