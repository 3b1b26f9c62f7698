"""Tests for the HTTP transport's JSON-RPC endpoints.

The Starlette app is driven without its lifespan; the search service is
injected over a fake backend so no Zoekt webserver is needed.
"""

import json

import mcp.types as types
import pytest
from starlette.testclient import TestClient

from tests.helpers.fake_backend import FakeSearchBackend, files_with_symbols
from zoekt_mcp.core.config.config import Config
from zoekt_mcp.core.config.zoekt_config import ZoektConfig
from zoekt_mcp.core.types import HealthCheck
from zoekt_mcp.mcp_server.http_server import HTTPMCPServer
from zoekt_mcp.mcp_server.stdio import StdioMCPServer
from zoekt_mcp.mcp_server.tools import TOOL_REGISTRY
from zoekt_mcp.pagination.cursor import encode_cursor
from zoekt_mcp.services.search_service import SearchService


def _config() -> Config:
    return Config(zoekt=ZoektConfig(url="http://zoekt:6070"))


@pytest.fixture
def http_backend() -> FakeSearchBackend:
    return FakeSearchBackend()


@pytest.fixture
def http_client(http_backend):
    server = HTTPMCPServer(_config(), service=SearchService(http_backend))
    return TestClient(server._create_app())


def _call(client: TestClient, name: str, arguments: dict, request_id: int = 7):
    return client.post(
        "/mcp/tools/call",
        json={
            "jsonrpc": "2.0",
            "method": "tools/call",
            "params": {"name": name, "arguments": arguments},
            "id": request_id,
        },
    )


class TestToolsCall:
    def test_success(self, http_client, http_backend):
        http_backend.results["sym:func"] = files_with_symbols(4)

        response = _call(http_client, "search_symbols", {"query": "func", "limit": 2})

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == 7
        result = body["result"]
        assert result["isError"] is False
        assert len(result["structuredContent"]["items"]) == 2
        assert json.loads(result["content"][0]["text"]) == result["structuredContent"]

    def test_tool_error_sets_error_flag(self, http_client, http_backend):
        response = _call(
            http_client,
            "search_symbols",
            {"query": "bar", "cursor": encode_cursor("sym:foo", 5)},
        )

        assert response.status_code == 200
        result = response.json()["result"]
        assert result["isError"] is True
        error = json.loads(result["content"][0]["text"])["error"]
        assert error["code"] == "INVALID_CURSOR"
        assert http_backend.calls == []

    def test_unknown_tool(self, http_client):
        response = _call(http_client, "search_semantic", {})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == -32602

    def test_missing_tool_name(self, http_client):
        response = http_client.post("/mcp/tools/call", json={"params": {}, "id": 1})

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Missing tool name"

    @pytest.mark.parametrize(
        "payload",
        [
            [1, 2],
            "search_symbols",
            {"params": [1, 2], "id": 4},
            {"params": "search_symbols", "id": 4},
        ],
    )
    def test_non_object_request_rejected(self, http_client, payload):
        response = http_client.post("/mcp/tools/call", json=payload)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == -32600

    def test_non_object_arguments_rejected(self, http_client, http_backend):
        response = http_client.post(
            "/mcp/tools/call",
            json={"params": {"name": "search_symbols", "arguments": ["foo"]}, "id": 5},
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == -32602
        assert http_backend.calls == []

    def test_parse_error(self, http_client):
        response = http_client.post(
            "/mcp/tools/call",
            content=b"{not json",
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == -32700


class TestToolsList:
    def test_lists_every_tool(self, http_client):
        response = http_client.post("/mcp/tools/list", json={"id": 3})

        body = response.json()
        assert body["id"] == 3
        names = {tool["name"] for tool in body["result"]["tools"]}
        assert names == set(TOOL_REGISTRY)
        for tool in body["result"]["tools"]:
            assert tool["inputSchema"]["type"] == "object"

    def test_sdk_tool_objects(self, http_backend):
        server = HTTPMCPServer(_config(), service=SearchService(http_backend))

        tools = {tool.name: tool for tool in server.mcp_tools()}

        assert set(tools) == set(TOOL_REGISTRY)
        assert tools["search_symbols"].annotations.readOnlyHint is True
        assert tools["search_symbols"].inputSchema["required"] == ["query"]


class TestHealthEndpoint:
    def test_healthy(self, http_client):
        response = http_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_unhealthy_returns_503(self):
        backend = FakeSearchBackend(health=HealthCheck(healthy=False, error="down"))
        server = HTTPMCPServer(_config(), service=SearchService(backend))

        response = TestClient(server._create_app()).get("/health")

        assert response.status_code == 503
        assert response.json()["zoekt_reachable"] is False


@pytest.mark.parametrize("server_class", [HTTPMCPServer, StdioMCPServer])
def test_transport_registers_tool_handlers(server_class, http_backend):
    server = server_class(_config(), service=SearchService(http_backend))

    assert types.CallToolRequest in server.server.request_handlers
    assert types.ListToolsRequest in server.server.request_handlers
