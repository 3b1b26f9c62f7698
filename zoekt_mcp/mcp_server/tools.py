"""Declarative tool registry for the Zoekt MCP server.

This module defines all MCP tools in a single location, providing a unified
registry that both the stdio and HTTP servers use for tool definitions.

The registry pattern ensures consistent tool metadata and behavior.
"""

import inspect
import types
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Union, get_args, get_origin

from zoekt_mcp.core.exceptions import InvalidArgumentError
from zoekt_mcp.services.search_service import SearchService

from .exceptions import ToolNotFoundError

# Inclusive bounds for numeric tool parameters
PARAMETER_BOUNDS: dict[str, tuple[int, int]] = {
    "limit": (1, 100),
    "context_lines": (0, 10),
}

# Parameters injected by the server rather than supplied by the caller
_INFRASTRUCTURE_PARAMS = ("service",)


# =============================================================================
# Schema Generation Infrastructure
# =============================================================================
# These utilities generate JSON Schema from Python function signatures,
# enabling a single source of truth for tool definitions.


@dataclass
class Tool:
    """Tool definition with metadata and implementation."""

    name: str
    description: str
    parameters: dict[str, Any]
    implementation: Callable
    annotations: dict[str, Any] | None = None
    title: str | None = None
    output_schema: dict[str, Any] | None = None


# Tool registry - populated by @register_tool decorator
TOOL_REGISTRY: dict[str, Tool] = {}


def _python_type_to_json_schema_type(type_hint: Any) -> dict[str, Any]:
    """Convert Python type hint to JSON Schema type definition.

    Args:
        type_hint: Python type annotation

    Returns:
        JSON Schema type definition dict
    """
    if type_hint is None or type_hint is type(None):
        return {"type": "null"}

    origin = get_origin(type_hint)
    args = get_args(type_hint)

    # Optional[T] and T | None both collapse to T
    if origin is Union or isinstance(type_hint, types.UnionType):
        non_none_types = [arg for arg in args if arg is not type(None)]
        if len(non_none_types) == 1:
            return _python_type_to_json_schema_type(non_none_types[0])
        return {
            "anyOf": [_python_type_to_json_schema_type(t) for t in non_none_types]
        }

    if type_hint is str:
        return {"type": "string"}
    elif type_hint is int:
        return {"type": "integer"}
    elif type_hint is float:
        return {"type": "number"}
    elif type_hint is bool:
        return {"type": "boolean"}
    elif origin is list:
        item_type = args[0] if args else Any
        return {"type": "array", "items": _python_type_to_json_schema_type(item_type)}
    else:
        return {"type": "object"}


def _extract_param_descriptions_from_docstring(func: Callable) -> dict[str, str]:
    """Extract parameter descriptions from a Google-style Args section."""
    if not func.__doc__:
        return {}

    descriptions: dict[str, str] = {}
    in_args_section = False

    for line in func.__doc__.split("\n"):
        stripped = line.strip()

        if stripped == "Args:":
            in_args_section = True
            continue

        if in_args_section and (
            stripped.endswith(":") or (not stripped and descriptions)
        ):
            in_args_section = False

        if in_args_section and ":" in stripped:
            param_name, description = stripped.split(":", 1)
            descriptions[param_name.strip()] = description.strip()

    return descriptions


def _generate_json_schema_from_signature(func: Callable) -> dict[str, Any]:
    """Generate JSON Schema from function signature.

    Args:
        func: Function to analyze

    Returns:
        JSON Schema parameters dict compatible with MCP tool schema
    """
    sig = inspect.signature(func)
    properties: dict[str, Any] = {}
    required: list[str] = []

    param_descriptions = _extract_param_descriptions_from_docstring(func)

    for param_name, param in sig.parameters.items():
        if param_name in _INFRASTRUCTURE_PARAMS:
            continue

        type_hint = (
            param.annotation if param.annotation != inspect.Parameter.empty else Any
        )
        schema = _python_type_to_json_schema_type(type_hint)

        if param_name in param_descriptions:
            schema["description"] = param_descriptions[param_name]

        if param_name in PARAMETER_BOUNDS:
            schema["minimum"], schema["maximum"] = PARAMETER_BOUNDS[param_name]

        if param.default != inspect.Parameter.empty and param.default is not None:
            schema["default"] = param.default

        properties[param_name] = schema

        if param.default == inspect.Parameter.empty:
            required.append(param_name)

    return {
        "type": "object",
        "properties": properties,
        "required": required,
        "additionalProperties": False,
    }


def register_tool(
    description: str,
    name: str | None = None,
    annotations: dict[str, Any] | None = None,
    title: str | None = None,
    output_schema: dict[str, Any] | None = None,
) -> Callable[[Callable], Callable]:
    """Decorator to register a function as an MCP tool.

    Extracts JSON Schema from function signature and registers in TOOL_REGISTRY.

    Args:
        description: Comprehensive tool description for LLM users
        name: Optional tool name (defaults to function name)
        annotations: Optional MCP tool annotations (e.g., {"readOnlyHint": True})
        title: Human-readable display name
        output_schema: JSON Schema for structured output

    Returns:
        Decorator function
    """

    def decorator(func: Callable) -> Callable:
        tool_name = name or func.__name__
        TOOL_REGISTRY[tool_name] = Tool(
            name=tool_name,
            description=description,
            parameters=_generate_json_schema_from_signature(func),
            implementation=func,
            annotations=annotations,
            title=title,
            output_schema=output_schema,
        )
        return func

    return decorator


# =============================================================================
# Helper Functions
# =============================================================================


def validate_bounded_int(name: str, value: Any) -> int:
    """Check an integer tool argument against its inclusive bounds.

    Raises:
        InvalidArgumentError: If the value is not an integer or out of range
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(f"{name} must be an integer, got {value!r}")
    low, high = PARAMETER_BOUNDS[name]
    if not low <= value <= high:
        raise InvalidArgumentError(
            f"{name} must be between {low} and {high}, got {value}"
        )
    return value


def _require_text(name: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgumentError(f"{name} must be a non-empty string")
    return value


def _optional_text(name: str, value: Any) -> str | None:
    if value is not None and not isinstance(value, str):
        raise InvalidArgumentError(f"{name} must be a string, got {value!r}")
    return value


# =============================================================================
# Output Schemas
# =============================================================================

PAGINATION_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "offset": {"type": "integer", "description": "Offset of the first item"},
        "limit": {"type": "integer", "description": "Requested page size"},
        "has_more": {"type": "boolean", "description": "More items exist"},
    },
    "required": ["offset", "limit", "has_more"],
}

SYMBOL_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "kind": {
            "type": "string",
            "enum": [
                "function",
                "class",
                "method",
                "variable",
                "interface",
                "type",
                "constant",
                "property",
                "unknown",
            ],
        },
        "file": {"type": "string"},
        "repository": {"type": "string"},
        "line": {"type": "integer"},
        "column": {"type": "integer"},
        "parent": {"type": "string"},
        "parent_kind": {"type": "string"},
    },
    "required": ["name", "kind", "file", "repository", "line", "column"],
}

FILE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "file": {"type": "string"},
        "repository": {"type": "string"},
        "branches": {"type": "array", "items": {"type": "string"}},
        "language": {"type": "string"},
    },
    "required": ["file", "repository", "branches"],
}

REFERENCE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "type": {"type": "string", "enum": ["definition", "usage"]},
        "file": {"type": "string"},
        "repository": {"type": "string"},
        "line": {"type": "integer"},
        "column": {"type": "integer"},
        "context": {"type": "string"},
        "symbol": SYMBOL_SCHEMA,
    },
    "required": ["type", "file", "repository", "line", "column", "context"],
}


def _page_schema(item_schema: dict[str, Any]) -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {
            "items": {"type": "array", "items": item_schema},
            "pagination": PAGINATION_SCHEMA,
            "next_cursor": {
                "type": "string",
                "description": "Pass as cursor to fetch the next page",
            },
        },
        "required": ["items", "pagination"],
    }


SEARCH_OUTPUT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "query": {"type": "string"},
        "files": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "repository": {"type": "string"},
                    "file": {"type": "string"},
                    "branches": {"type": "array", "items": {"type": "string"}},
                    "language": {"type": "string"},
                    "matches": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {
                                "line": {"type": "integer"},
                                "content": {"type": "string"},
                            },
                            "required": ["line", "content"],
                        },
                    },
                },
                "required": ["repository", "file", "branches", "matches"],
            },
        },
        "stats": {
            "type": "object",
            "properties": {
                "match_count": {"type": "integer"},
                "file_count": {"type": "integer"},
                "duration_ms": {"type": "integer"},
            },
        },
    },
    "required": ["query", "files", "stats"],
}

REPOS_OUTPUT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "repositories": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "branches": {"type": "array", "items": {"type": "string"}},
                },
                "required": ["name", "branches"],
            },
        },
        "total": {"type": "integer"},
    },
    "required": ["repositories", "total"],
}

FILE_CONTENT_OUTPUT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "repository": {"type": "string"},
        "path": {"type": "string"},
        "branch": {"type": "string"},
        "content": {"type": "string"},
        "language": {"type": "string"},
    },
    "required": ["repository", "path", "branch", "content"],
}

HEALTH_OUTPUT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "status": {"type": "string", "enum": ["healthy", "degraded", "unhealthy"]},
        "server_version": {"type": "string"},
        "zoekt_reachable": {"type": "boolean"},
        "index_stats": {
            "type": "object",
            "properties": {
                "repository_count": {"type": "integer"},
                "document_count": {"type": "integer"},
                "index_bytes": {"type": "integer"},
                "content_bytes": {"type": "integer"},
            },
        },
        "error_message": {"type": "string"},
    },
    "required": ["status", "server_version", "zoekt_reachable"],
}

_READ_ONLY = {"readOnlyHint": True, "openWorldHint": True}


# =============================================================================
# Tools
# =============================================================================


@register_tool(
    description=(
        "Find symbol definitions (functions, classes, methods, variables, types) "
        "by name across indexed repositories. Free text is matched against "
        "symbol names; filters such as lang:, repo: and file: are preserved. "
        "Results are paginated; pass next_cursor back as cursor for more."
    ),
    name="search_symbols",
    title="Symbol Search",
    annotations=_READ_ONLY,
    output_schema=_page_schema(SYMBOL_SCHEMA),
)
async def search_symbols_impl(
    service: SearchService,
    query: str,
    limit: int = 30,
    context_lines: int = 3,
    cursor: str | None = None,
) -> dict[str, Any]:
    """Symbol search tool.

    Args:
        service: Search service
        query: Symbol name or pattern, optionally with Zoekt filters (lang:, repo:, file:)
        limit: Maximum symbols per page (1-100)
        context_lines: Context lines around each match (0-10)
        cursor: Cursor from a previous page of the same query
    """
    _require_text("query", query)
    limit = validate_bounded_int("limit", limit)
    context_lines = validate_bounded_int("context_lines", context_lines)
    page = await service.search_symbols(query, limit, context_lines, cursor)
    return page.to_dict()


@register_tool(
    description=(
        "Find files by name or path pattern across indexed repositories. "
        "Returns file metadata only (path, repository, branches, language), "
        "never file content. Results are paginated."
    ),
    name="search_files",
    title="File Search",
    annotations=_READ_ONLY,
    output_schema=_page_schema(FILE_SCHEMA),
)
async def search_files_impl(
    service: SearchService,
    query: str,
    limit: int = 30,
    cursor: str | None = None,
) -> dict[str, Any]:
    """File name search tool.

    Args:
        service: Search service
        query: File name or path pattern, optionally with Zoekt filters
        limit: Maximum files per page (1-100)
        cursor: Cursor from a previous page of the same query
    """
    _require_text("query", query)
    limit = validate_bounded_int("limit", limit)
    page = await service.search_files(query, limit, cursor)
    return page.to_dict()


@register_tool(
    description=(
        "Find where a symbol is defined and used. Definitions come first, "
        "followed by usages; a usage on the same line as a definition is "
        "omitted. Results are paginated."
    ),
    name="find_references",
    title="Find References",
    annotations=_READ_ONLY,
    output_schema=_page_schema(REFERENCE_SCHEMA),
)
async def find_references_impl(
    service: SearchService,
    symbol: str,
    filters: str | None = None,
    limit: int = 30,
    context_lines: int = 3,
    cursor: str | None = None,
) -> dict[str, Any]:
    """Reference lookup tool.

    Args:
        service: Search service
        symbol: Exact symbol name to look up
        filters: Extra Zoekt filters applied to both searches (e.g. "lang:go repo:api")
        limit: Maximum references per page (1-100)
        context_lines: Context lines around each match (0-10)
        cursor: Cursor from a previous page of the same lookup
    """
    _require_text("symbol", symbol)
    filters = _optional_text("filters", filters)
    limit = validate_bounded_int("limit", limit)
    context_lines = validate_bounded_int("context_lines", context_lines)
    page = await service.find_references(symbol, filters, limit, context_lines, cursor)
    return page.to_dict()


@register_tool(
    description=(
        "Search code across indexed repositories using Zoekt query syntax. "
        "Supports regex, file filters (file:, lang:), repo filters (repo:), "
        "symbol search (sym:), and boolean operators (and, or, not). Returns "
        "file-level matches with decoded content; not paginated."
    ),
    name="search",
    title="Code Search",
    annotations=_READ_ONLY,
    output_schema=SEARCH_OUTPUT_SCHEMA,
)
async def search_impl(
    service: SearchService,
    query: str,
    limit: int = 30,
    context_lines: int = 3,
) -> dict[str, Any]:
    """Raw code search tool.

    Args:
        service: Search service
        query: Zoekt search query
        limit: Maximum number of file matches to return (1-100)
        context_lines: Context lines around each match (0-10)
    """
    _require_text("query", query)
    limit = validate_bounded_int("limit", limit)
    context_lines = validate_bounded_int("context_lines", context_lines)
    return await service.search(query, limit, context_lines)


@register_tool(
    description="List all indexed repositories or filter by name pattern",
    name="list_repos",
    title="List Repositories",
    annotations=_READ_ONLY,
    output_schema=REPOS_OUTPUT_SCHEMA,
)
async def list_repos_impl(
    service: SearchService, filter: str | None = None
) -> dict[str, Any]:
    """Repository listing tool.

    Args:
        service: Search service
        filter: Optional case-insensitive regex matched against repository names
    """
    filter = _optional_text("filter", filter)
    repositories = await service.list_repos(filter)
    return {
        "repositories": [repo.to_dict() for repo in repositories],
        "total": len(repositories),
    }


@register_tool(
    description="Retrieve the full contents of a file from an indexed repository",
    name="file_content",
    title="File Content",
    annotations=_READ_ONLY,
    output_schema=FILE_CONTENT_OUTPUT_SCHEMA,
)
async def file_content_impl(
    service: SearchService,
    repository: str,
    path: str,
    branch: str = "HEAD",
) -> dict[str, Any]:
    """File content tool.

    Args:
        service: Search service
        repository: Full repository name (e.g. 'github.com/org/repo')
        path: Path to the file within the repository
        branch: Branch name (default: HEAD)
    """
    _require_text("repository", repository)
    _require_text("path", path)
    branch = _optional_text("branch", branch)
    content = await service.file_content(repository, path, branch or "HEAD")
    return content.to_dict()


@register_tool(
    description=(
        "Check the health of the MCP server and its Zoekt backend, including "
        "index statistics when available"
    ),
    name="get_health",
    title="Health Check",
    annotations=_READ_ONLY,
    output_schema=HEALTH_OUTPUT_SCHEMA,
)
async def get_health_impl(service: SearchService) -> dict[str, Any]:
    """Health check tool.

    Args:
        service: Search service
    """
    status = await service.get_health()
    return status.to_dict()


async def execute_tool(
    tool_name: str,
    service: SearchService,
    arguments: dict[str, Any],
) -> dict[str, Any]:
    """Execute a tool from the registry with proper argument handling.

    Args:
        tool_name: Name of the tool to execute
        service: SearchService instance
        arguments: Tool arguments from the request

    Returns:
        Tool execution result

    Raises:
        ToolNotFoundError: If tool not found in registry
        InvalidArgumentError: If an argument is unknown or out of range
    """
    if tool_name not in TOOL_REGISTRY:
        raise ToolNotFoundError(f"Unknown tool: {tool_name}")

    tool = TOOL_REGISTRY[tool_name]
    sig = inspect.signature(tool.implementation)

    unknown = set(arguments) - set(sig.parameters) - set(_INFRASTRUCTURE_PARAMS)
    if unknown:
        raise InvalidArgumentError(
            f"Unknown argument(s) for {tool_name}: {', '.join(sorted(unknown))}"
        )

    kwargs: dict[str, Any] = {}
    for param_name in sig.parameters.keys():
        if param_name == "service":
            kwargs["service"] = service
        elif param_name in arguments:
            kwargs[param_name] = arguments[param_name]

    missing = [
        p.name
        for p in sig.parameters.values()
        if p.default == inspect.Parameter.empty and p.name not in kwargs
    ]
    if missing:
        raise InvalidArgumentError(
            f"Missing required argument(s) for {tool_name}: {', '.join(missing)}"
        )

    return await tool.implementation(**kwargs)
