"""MCP tool registry and transports for Zoekt MCP."""

from .common import handle_tool_call
from .tools import TOOL_REGISTRY, execute_tool

__all__ = ["TOOL_REGISTRY", "execute_tool", "handle_tool_call"]
