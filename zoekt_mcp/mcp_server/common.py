"""Common utilities and error handling for the MCP servers.

This module provides the single tool-call entry point shared by the stdio
and HTTP transports, along with argument parsing and error formatting.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from loguru import logger

from zoekt_mcp.core.error_classification import enhance_error

from .exceptions import ToolExecutionError

if TYPE_CHECKING:
    from zoekt_mcp.services.search_service import SearchService

# Request size limits
MAX_REQUEST_BODY_SIZE = 1024 * 1024  # 1MB

_INT_ARGUMENTS = ("limit", "context_lines")


def format_error_response(
    error: BaseException, include_traceback: bool = False
) -> dict[str, Any]:
    """Format exception as standardized error response.

    Args:
        error: Exception to format
        include_traceback: Whether to include full traceback (debug mode)

    Returns:
        Error dict with type, code, message and an optional hint
    """
    structured = enhance_error(error)
    response: dict[str, Any] = {
        "error": {
            "type": type(error).__name__,
            "code": structured.code.value,
            "message": structured.message,
        }
    }
    if structured.hint:
        response["error"]["hint"] = structured.hint

    if include_traceback:
        import traceback

        response["error"]["traceback"] = "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        )

    return response


def format_json_response(data: Any) -> str:
    """Format data as JSON string for MCP text content."""
    return json.dumps(data, default=str, ensure_ascii=False)


def parse_mcp_arguments(args: dict[str, Any] | None) -> dict[str, Any]:
    """Parse MCP tool arguments.

    Numeric arguments sent as strings are converted to ``int``; values that
    cannot be converted are passed through for the tool to reject.

    Args:
        args: Raw arguments from MCP request

    Returns:
        Parsed arguments
    """
    parsed = dict(args or {})
    for key in _INT_ARGUMENTS:
        value = parsed.get(key)
        if isinstance(value, str):
            try:
                parsed[key] = int(value.strip())
            except ValueError:
                pass
    # Treat an empty cursor as no cursor
    if parsed.get("cursor") == "":
        parsed.pop("cursor")
    return parsed


async def handle_tool_call(
    tool_name: str,
    arguments: dict[str, Any] | None,
    service: SearchService,
    debug_mode: bool = False,
) -> dict[str, Any]:
    """Unified tool call handler for all MCP transports.

    Single entry point for all tool executions across transports.
    Handles argument parsing, execution and error formatting.

    Args:
        tool_name: Name of the tool to execute from TOOL_REGISTRY
        arguments: Tool arguments as key-value pairs
        service: Search service used by every tool
        debug_mode: Whether to include stack traces in error responses

    Returns:
        Structured tool result

    Raises:
        ToolExecutionError: On any failure, carrying the formatted error
            payload for the transport to report with its error flag set
    """
    from .tools import execute_tool

    try:
        parsed_args = parse_mcp_arguments(arguments)
        return await execute_tool(
            tool_name=tool_name, service=service, arguments=parsed_args
        )
    except Exception as e:
        payload = format_error_response(e, include_traceback=debug_mode)
        logger.error(
            f"Tool {tool_name} failed: {payload['error']['code']}: {e}"
        )
        raise ToolExecutionError(format_json_response(payload), payload) from e
