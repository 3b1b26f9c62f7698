"""Shared lifecycle for the stdio and HTTP MCP servers."""

from __future__ import annotations

from typing import Any

import mcp.types as types
from loguru import logger

from zoekt_mcp.core.config.config import Config
from zoekt_mcp.services.search_service import SearchService
from zoekt_mcp.zoekt.client import ZoektClient

from .exceptions import ServiceNotInitializedError
from .tools import TOOL_REGISTRY

SERVER_NAME = "zoekt-mcp"


class MCPServerBase:
    """Owns the Zoekt client and search service for one server process."""

    def __init__(self, config: Config, service: SearchService | None = None):
        """Initialize server base.

        Args:
            config: Validated configuration object
            service: Pre-built search service (tests); created on initialize otherwise
        """
        self.config = config
        self.debug_mode = config.debug
        self.service: SearchService | None = service
        self._client: ZoektClient | None = None
        self._initialized = service is not None

    def debug_log(self, message: str) -> None:
        logger.debug(message)

    async def initialize(self) -> None:
        """Create the backend client and search service."""
        if self._initialized:
            return
        if not self.config.zoekt.url:
            raise ServiceNotInitializedError("Zoekt URL is not configured")
        self._client = ZoektClient(self.config.zoekt.url, self.config.zoekt.timeout_ms)
        self.service = SearchService(self._client)
        self._initialized = True
        logger.info(
            f"Connected search service to Zoekt at {self.config.zoekt.url} "
            f"(timeout {self.config.zoekt.timeout_ms}ms)"
        )

    def ensure_service(self) -> SearchService:
        if self.service is None:
            raise ServiceNotInitializedError("Search service not initialized")
        return self.service

    async def cleanup(self) -> None:
        """Close the backend client."""
        if self._client is not None:
            await self._client.close()
            self._client = None
        self._initialized = False

    def list_tool_definitions(self) -> list[dict[str, Any]]:
        """Tool definitions in MCP wire form."""
        definitions = []
        for tool_name, tool in TOOL_REGISTRY.items():
            definition: dict[str, Any] = {
                "name": tool_name,
                "description": tool.description,
                "inputSchema": tool.parameters,
            }
            if tool.title:
                definition["title"] = tool.title
            if tool.output_schema:
                definition["outputSchema"] = tool.output_schema
            if tool.annotations:
                definition["annotations"] = tool.annotations
            definitions.append(definition)
        return definitions

    def mcp_tools(self) -> list[types.Tool]:
        """Tool definitions as SDK objects for ``list_tools`` handlers."""
        tools = []
        for tool_name, tool in TOOL_REGISTRY.items():
            annotations = None
            if tool.annotations:
                annotations = types.ToolAnnotations(**tool.annotations)
            tools.append(
                types.Tool(
                    name=tool_name,
                    description=tool.description,
                    inputSchema=tool.parameters,
                    title=tool.title,
                    outputSchema=tool.output_schema,
                    annotations=annotations,
                )
            )
        return tools
