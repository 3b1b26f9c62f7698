"""Zoekt MCP: paginated code-search tools over a Zoekt webserver."""

from zoekt_mcp.version import __version__

__all__ = ["__version__"]
