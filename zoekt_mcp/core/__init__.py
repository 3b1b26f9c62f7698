"""Core types, exceptions and error classification for Zoekt MCP."""

from .exceptions import (
    BackendError,
    BackendNotFoundError,
    BackendQueryError,
    BackendTimeoutError,
    BackendUnavailableError,
    ConfigurationError,
    CursorError,
    CursorQueryMismatchError,
    InvalidArgumentError,
    InvalidCursorOffsetError,
    MalformedCursorError,
    ZoektMCPError,
)
from .types import (
    FileResult,
    Page,
    ReferenceResult,
    ReferenceType,
    Symbol,
    SymbolKind,
)

__all__ = [
    "BackendError",
    "BackendNotFoundError",
    "BackendQueryError",
    "BackendTimeoutError",
    "BackendUnavailableError",
    "ConfigurationError",
    "CursorError",
    "CursorQueryMismatchError",
    "InvalidArgumentError",
    "InvalidCursorOffsetError",
    "MalformedCursorError",
    "ZoektMCPError",
    "FileResult",
    "Page",
    "ReferenceResult",
    "ReferenceType",
    "Symbol",
    "SymbolKind",
]
