"""Exception classes for the MCP tool layer.

This module defines exception types used by the tool registry and the
transports. It is intentionally kept separate from other modules to avoid
circular imports.
"""

from typing import Any

from zoekt_mcp.core.exceptions import InvalidArgumentError, ZoektMCPError


class MCPError(ZoektMCPError):
    """Base exception for MCP operations."""

    pass


class ServiceNotInitializedError(MCPError):
    """Raised when the search service is used before server initialization."""

    pass


class ToolNotFoundError(InvalidArgumentError):
    """Raised when a requested tool does not exist."""

    pass


class ToolExecutionError(MCPError):
    """Raised when a tool call fails.

    Carries the structured error payload so each transport can report it
    in its own envelope.
    """

    def __init__(self, message: str, payload: dict[str, Any] | None = None):
        super().__init__(message)
        self.payload = payload or {"error": {"message": message}}


__all__ = [
    "InvalidArgumentError",
    "MCPError",
    "ServiceNotInitializedError",
    "ToolExecutionError",
    "ToolNotFoundError",
]
