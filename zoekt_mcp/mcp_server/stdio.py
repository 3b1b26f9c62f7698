"""Stdio MCP server implementation.

This module implements the stdio (stdin/stdout) JSON-RPC protocol for MCP
using the official SDK.

CRITICAL: NO stdout output allowed - breaks JSON-RPC protocol. Logging goes
to stderr or a file only.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import mcp.server.stdio
import mcp.types as types
from mcp.server import Server
from mcp.server.lowlevel import NotificationOptions
from mcp.server.models import InitializationOptions

from zoekt_mcp.core.config.config import Config
from zoekt_mcp.services.search_service import SearchService
from zoekt_mcp.version import __version__

from .base import SERVER_NAME, MCPServerBase
from .common import handle_tool_call


class StdioMCPServer(MCPServerBase):
    """MCP server implementation for stdio protocol."""

    def __init__(self, config: Config, service: SearchService | None = None):
        super().__init__(config, service=service)
        self.server: Server = Server(SERVER_NAME)
        self._register_tools()

    def _register_tools(self) -> None:
        """Register tool handlers with the stdio server."""

        # The SDK's call_tool decorator expects a SINGLE handler for ALL tools
        @self.server.call_tool()
        async def handle_all_tools(
            tool_name: str, arguments: dict[str, Any]
        ) -> dict[str, Any]:
            """Route every tool call through the shared handler.

            Errors propagate as ToolExecutionError; the SDK reports them as
            an error result whose text is the JSON error payload.
            """
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

    @asynccontextmanager
    async def server_lifespan(self) -> AsyncIterator[SearchService]:
        """Manage server lifecycle with proper initialization and cleanup."""
        try:
            await self.initialize()
            self.debug_log("Server initialization complete")
            yield self.ensure_service()
        finally:
            await self.cleanup()

    async def run(self) -> None:
        """Run the stdio server with proper lifecycle management."""
        init_options = InitializationOptions(
            server_name=SERVER_NAME,
            server_version=__version__,
            capabilities=self.server.get_capabilities(
                notification_options=NotificationOptions(),
                experimental_capabilities={},
            ),
        )

        async with self.server_lifespan():
            async with mcp.server.stdio.stdio_server() as (read_stream, write_stream):
                self.debug_log("Stdio server started, awaiting requests")
                await self.server.run(read_stream, write_stream, init_options)
