"""HTTP MCP server implementation.

This module implements the HTTP/SSE transport for MCP, enabling:
- Multiple concurrent client connections over SSE
- Direct JSON-RPC tool calls over plain HTTP POST
- A health endpoint reporting server and backend status

Usage:
    zoekt-mcp --url http://localhost:6070 --transport http --port 3000
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import mcp.types as types
import uvicorn
from loguru import logger
from mcp.server import Server
from mcp.server.lowlevel import NotificationOptions
from mcp.server.models import InitializationOptions
from mcp.server.sse import SseServerTransport
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Mount, Route

from zoekt_mcp.core.config.config import Config
from zoekt_mcp.services.search_service import SearchService
from zoekt_mcp.version import __version__

from .base import SERVER_NAME, MCPServerBase
from .common import MAX_REQUEST_BODY_SIZE, format_json_response, handle_tool_call
from .exceptions import ToolExecutionError
from .tools import TOOL_REGISTRY


def _jsonrpc_error(
    code: int, message: str, request_id: Any, status_code: int
) -> JSONResponse:
    return JSONResponse(
        {"jsonrpc": "2.0", "error": {"code": code, "message": message}, "id": request_id},
        status_code=status_code,
    )


def _validate_body_size(request: Request) -> JSONResponse | None:
    """Reject requests whose declared body exceeds the size limit."""
    content_length = request.headers.get("content-length")
    if content_length:
        try:
            if int(content_length) > MAX_REQUEST_BODY_SIZE:
                return _jsonrpc_error(-32600, "Request body too large", None, 413)
        except ValueError:
            return _jsonrpc_error(-32600, "Invalid Content-Length", None, 400)
    return None


class HTTPMCPServer(MCPServerBase):
    """MCP server implementation for HTTP/SSE transport."""

    def __init__(
        self,
        config: Config,
        service: SearchService | None = None,
        host: str | None = None,
        port: int | None = None,
    ):
        """Initialize HTTP MCP server.

        Args:
            config: Validated configuration object
            service: Pre-built search service (tests); created on startup otherwise
            host: Host to bind to (default from config)
            port: Port to listen on (default from config)
        """
        super().__init__(config, service=service)
        self.host = host or config.server.host
        self.port = port or config.server.port

        self.app: Starlette | None = None
        self.sse_transport = SseServerTransport("/messages/")
        self.server: Server = Server(SERVER_NAME)

        self._register_tools()

    def _register_tools(self) -> None:
        """Register tool handlers with the MCP server."""

        @self.server.call_tool()
        async def handle_all_tools(
            tool_name: str, arguments: dict[str, Any]
        ) -> dict[str, Any]:
            return await handle_tool_call(
                tool_name=tool_name,
                arguments=arguments,
                service=self.ensure_service(),
                debug_mode=self.debug_mode,
            )

        @self.server.list_tools()
        async def list_tools() -> list[types.Tool]:
            """List available tools."""
            return self.mcp_tools()

    async def _handle_sse(self, request: Request) -> Response:
        """Handle SSE connection for MCP protocol."""
        client_id = request.headers.get("X-Client-ID", str(id(request)))
        self.debug_log(f"SSE connection from client {client_id}")

        try:
            async with self.sse_transport.connect_sse(
                request.scope, request.receive, request._send
            ) as (read_stream, write_stream):
                init_options = InitializationOptions(
                    server_name=SERVER_NAME,
                    server_version=__version__,
                    capabilities=self.server.get_capabilities(
                        notification_options=NotificationOptions(),
                        experimental_capabilities={},
                    ),
                )
                await self.server.run(read_stream, write_stream, init_options)
        finally:
            self.debug_log(f"SSE connection closed for client {client_id}")

        return Response()

    async def _handle_health(self, request: Request) -> JSONResponse:
        """Handle health check endpoint."""
        status = await self.ensure_service().get_health()
        status_code = 503 if status.status == "unhealthy" else 200
        return JSONResponse(status.to_dict(), status_code=status_code)

    async def _handle_mcp_tools_call(self, request: Request) -> JSONResponse:
        """Handle direct MCP tool call via HTTP POST.

        Accepts a JSON-RPC style request and returns a JSON-RPC response.
        Tool failures are reported as a result with ``isError`` set, not as
        a JSON-RPC protocol error.
        """
        if error := _validate_body_size(request):
            return error

        try:
            body: Any = await request.json()
        except (json.JSONDecodeError, ValueError):
            return _jsonrpc_error(-32700, "Parse error", None, 400)

        if not isinstance(body, dict):
            return _jsonrpc_error(-32600, "Invalid Request", None, 400)

        request_id = body.get("id", 1)
        params = body.get("params") or {}
        if not isinstance(params, dict):
            return _jsonrpc_error(-32600, "Invalid Request", request_id, 400)
        tool_name = params.get("name")
        arguments = params.get("arguments") or {}
        if not isinstance(arguments, dict):
            return _jsonrpc_error(
                -32602, "Tool arguments must be an object", request_id, 400
            )

        if not tool_name:
            return _jsonrpc_error(-32602, "Missing tool name", request_id, 400)
        if tool_name not in TOOL_REGISTRY:
            return _jsonrpc_error(-32602, f"Unknown tool: {tool_name}", request_id, 400)

        self.debug_log(f"Tool call: {tool_name}")
        try:
            result = await handle_tool_call(
                tool_name=tool_name,
                arguments=arguments,
                service=self.ensure_service(),
                debug_mode=self.debug_mode,
            )
        except ToolExecutionError as e:
            return JSONResponse(
                {
                    "jsonrpc": "2.0",
                    "result": {
                        "content": [{"type": "text", "text": str(e)}],
                        "isError": True,
                    },
                    "id": request_id,
                }
            )

        return JSONResponse(
            {
                "jsonrpc": "2.0",
                "result": {
                    "content": [{"type": "text", "text": format_json_response(result)}],
                    "structuredContent": result,
                    "isError": False,
                },
                "id": request_id,
            }
        )

    async def _handle_mcp_tools_list(self, request: Request) -> JSONResponse:
        """Handle MCP tools/list request via HTTP POST."""
        if error := _validate_body_size(request):
            return error

        request_id: Any = 1
        try:
            body = await request.json()
            if isinstance(body, dict):
                request_id = body.get("id", 1)
        except (json.JSONDecodeError, ValueError):
            # An empty body is accepted for listing
            pass

        return JSONResponse(
            {
                "jsonrpc": "2.0",
                "result": {"tools": self.list_tool_definitions()},
                "id": request_id,
            }
        )

    def _create_app(self) -> Starlette:
        """Create the Starlette application with routes."""
        routes = [
            # MCP endpoints
            Route("/sse", self._handle_sse, methods=["GET"]),
            Mount("/messages/", app=self.sse_transport.handle_post_message),
            # Direct JSON-RPC tool endpoints
            Route("/mcp/tools/call", self._handle_mcp_tools_call, methods=["POST"]),
            Route("/mcp/tools/list", self._handle_mcp_tools_list, methods=["POST"]),
            # Management endpoints
            Route("/health", self._handle_health, methods=["GET"]),
        ]

        @asynccontextmanager
        async def lifespan(app: Starlette) -> AsyncIterator[None]:
            """Application lifespan handler."""
            await self.initialize()
            self.debug_log("HTTP server initialization complete")
            try:
                yield
            finally:
                await self.cleanup()
                self.debug_log("HTTP server shutdown complete")

        return Starlette(routes=routes, lifespan=lifespan)

    async def run(self) -> None:
        """Run the HTTP server."""
        self.app = self._create_app()

        config = uvicorn.Config(
            app=self.app,
            host=self.host,
            port=self.port,
            log_level="warning",
            access_log=False,
        )
        server = uvicorn.Server(config)

        logger.info(f"Starting Zoekt MCP HTTP server on http://{self.host}:{self.port}")
        await server.serve()

    def run_sync(self) -> None:
        """Synchronous wrapper for running the server."""
        asyncio.run(self.run())
