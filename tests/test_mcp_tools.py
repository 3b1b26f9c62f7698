"""Tests for the tool registry, argument handling and error payloads."""

import json

import pytest

from tests.helpers.fake_backend import file_match, files_with_symbols, symbol_chunk
from zoekt_mcp.core.exceptions import (
    BackendTimeoutError,
    BackendUnavailableError,
    InvalidArgumentError,
)
from zoekt_mcp.mcp_server.common import (
    format_error_response,
    handle_tool_call,
    parse_mcp_arguments,
)
from zoekt_mcp.mcp_server.exceptions import ToolExecutionError, ToolNotFoundError
from zoekt_mcp.mcp_server.tools import TOOL_REGISTRY, execute_tool
from zoekt_mcp.pagination.cursor import encode_cursor

EXPECTED_TOOLS = {
    "search_symbols",
    "search_files",
    "find_references",
    "search",
    "list_repos",
    "file_content",
    "get_health",
}


class TestRegistry:
    """Schema generation from tool signatures."""

    def test_all_tools_registered(self):
        assert set(TOOL_REGISTRY) == EXPECTED_TOOLS

    def test_service_not_exposed(self):
        for tool in TOOL_REGISTRY.values():
            assert "service" not in tool.parameters["properties"]
            assert tool.parameters["additionalProperties"] is False

    def test_search_symbols_schema(self):
        schema = TOOL_REGISTRY["search_symbols"].parameters
        props = schema["properties"]

        assert schema["required"] == ["query"]
        assert props["query"]["type"] == "string"
        assert props["limit"] == {
            "type": "integer",
            "description": "Maximum symbols per page (1-100)",
            "minimum": 1,
            "maximum": 100,
            "default": 30,
        }
        assert props["context_lines"]["minimum"] == 0
        assert props["context_lines"]["maximum"] == 10
        assert props["cursor"]["type"] == "string"
        assert "default" not in props["cursor"]

    def test_find_references_schema(self):
        schema = TOOL_REGISTRY["find_references"].parameters
        assert schema["required"] == ["symbol"]
        assert set(schema["properties"]) == {
            "symbol",
            "filters",
            "limit",
            "context_lines",
            "cursor",
        }

    def test_search_files_has_no_context_lines(self):
        assert "context_lines" not in TOOL_REGISTRY["search_files"].parameters["properties"]

    def test_tools_are_read_only(self):
        for tool in TOOL_REGISTRY.values():
            assert tool.annotations["readOnlyHint"] is True
            assert tool.output_schema is not None


class TestParseArguments:
    def test_string_numbers_converted(self):
        parsed = parse_mcp_arguments({"query": "x", "limit": "10", "context_lines": " 2 "})
        assert parsed == {"query": "x", "limit": 10, "context_lines": 2}

    def test_unconvertible_left_for_validation(self):
        assert parse_mcp_arguments({"limit": "ten"})["limit"] == "ten"

    def test_empty_cursor_dropped(self):
        assert "cursor" not in parse_mcp_arguments({"query": "x", "cursor": ""})

    def test_none(self):
        assert parse_mcp_arguments(None) == {}


class TestExecuteTool:
    """Direct tool execution against a fake backend."""

    @pytest.mark.asyncio
    async def test_search_symbols_page(self, backend, service):
        backend.results["sym:func"] = files_with_symbols(10)

        result = await execute_tool("search_symbols", service, {"query": "func", "limit": 5})

        assert len(result["items"]) == 5
        assert result["items"][0]["kind"] == "function"
        assert result["pagination"] == {"offset": 0, "limit": 5, "has_more": True}
        assert "next_cursor" in result

    @pytest.mark.asyncio
    async def test_unknown_tool(self, service):
        with pytest.raises(ToolNotFoundError):
            await execute_tool("search_semantic", service, {})

    @pytest.mark.asyncio
    async def test_missing_required_argument(self, service):
        with pytest.raises(Exception, match="Missing required argument"):
            await execute_tool("search_symbols", service, {})

    @pytest.mark.asyncio
    async def test_unknown_argument(self, service):
        with pytest.raises(Exception, match="Unknown argument"):
            await execute_tool("search_symbols", service, {"query": "x", "page": 2})

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "arguments",
        [
            {"query": "x", "limit": 0},
            {"query": "x", "limit": 101},
            {"query": "x", "limit": True},
            {"query": "x", "context_lines": 11},
            {"query": "x", "context_lines": -1},
            {"query": "   "},
        ],
    )
    async def test_invalid_arguments_never_reach_backend(
        self, backend, service, arguments
    ):
        with pytest.raises(Exception):
            await execute_tool("search_symbols", service, arguments)
        assert backend.calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "tool_name,arguments",
        [
            ("find_references", {"symbol": "foo", "filters": ["lang:go"]}),
            ("find_references", {"symbol": "foo", "filters": {"lang": "go"}}),
            ("list_repos", {"filter": ["api"]}),
            ("file_content", {"repository": "r", "path": "a.go", "branch": ["main"]}),
        ],
    )
    async def test_non_string_text_arguments_rejected(
        self, backend, service, tool_name, arguments
    ):
        with pytest.raises(InvalidArgumentError, match="must be a string"):
            await execute_tool(tool_name, service, arguments)
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_list_repos_total(self, backend, service):
        backend.results["type:repo"] = [
            file_match("a", repository="one"),
            file_match("b", repository="two"),
        ]

        result = await execute_tool("list_repos", service, {})

        assert result["total"] == 2
        assert result["repositories"][0] == {"name": "one", "branches": ["main"]}

    @pytest.mark.asyncio
    async def test_find_references_serialization(self, backend, service):
        backend.results["sym:Serve"] = [
            file_match("s.go", chunks=(symbol_chunk([("Serve", "func", 3)]),))
        ]

        result = await execute_tool("find_references", service, {"symbol": "Serve"})

        item = result["items"][0]
        assert item["type"] == "definition"
        assert item["symbol"]["name"] == "Serve"
        assert "next_cursor" not in result


class TestHandleToolCall:
    """Error reporting through the shared handler."""

    @pytest.mark.asyncio
    async def test_success_returns_structured_result(self, backend, service):
        result = await handle_tool_call("get_health", {}, service)
        assert result["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_invalid_cursor_payload(self, backend, service):
        cursor = encode_cursor("sym:foo", 5)

        with pytest.raises(ToolExecutionError) as exc:
            await handle_tool_call(
                "search_symbols", {"query": "bar", "cursor": cursor}, service
            )

        payload = json.loads(str(exc.value))
        assert payload == exc.value.payload
        assert payload["error"]["code"] == "INVALID_CURSOR"
        assert payload["error"]["type"] == "CursorQueryMismatchError"
        assert "hint" not in payload["error"]
        assert "traceback" not in payload["error"]
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_backend_timeout_payload(self, backend, service):
        backend.errors["sym:slow"] = BackendTimeoutError(
            "Search timed out after 30000ms. Try a more specific query."
        )

        with pytest.raises(ToolExecutionError) as exc:
            await handle_tool_call("search_symbols", {"query": "slow"}, service)

        error = exc.value.payload["error"]
        assert error["code"] == "TIMEOUT"
        assert error["message"].startswith("Search timed out after 30000ms")
        assert "more specific query terms" in error["hint"]

    @pytest.mark.asyncio
    async def test_invalid_argument_payload(self, service):
        with pytest.raises(ToolExecutionError) as exc:
            await handle_tool_call("search", {"query": "x", "limit": "500"}, service)

        assert exc.value.payload["error"]["code"] == "INVALID_ARGUMENT"
        assert "between 1 and 100" in exc.value.payload["error"]["message"]

    @pytest.mark.asyncio
    async def test_debug_mode_includes_traceback(self, backend, service):
        backend.errors["foo"] = BackendUnavailableError("Search backend unavailable")

        with pytest.raises(ToolExecutionError) as exc:
            await handle_tool_call("search", {"query": "foo"}, service, debug_mode=True)

        error = exc.value.payload["error"]
        assert error["code"] == "UNAVAILABLE"
        assert "Traceback" in error["traceback"]


class TestFormatErrorResponse:
    def test_shape(self):
        response = format_error_response(BackendUnavailableError("connection refused"))
        assert set(response["error"]) == {"type", "code", "message", "hint"}
        assert response["error"]["type"] == "BackendUnavailableError"
