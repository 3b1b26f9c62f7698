"""Core data model for Zoekt MCP.

Two groups of types live here:

- Normalized backend types (``FileMatch``, ``ChunkMatch``, ``LineMatch`` ...)
  produced once by the Zoekt adapter from the webserver's JSON. Extraction
  code only ever sees these, never raw response dictionaries.
- Item types (``Symbol``, ``FileResult``, ``ReferenceResult``) exposed to
  tool callers, plus the ``Page`` container returned by the paginator.

All instances are built per request and discarded with the response.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class SymbolKind(str, Enum):
    """Closed set of symbol kinds exposed to callers."""

    FUNCTION = "function"
    CLASS = "class"
    METHOD = "method"
    VARIABLE = "variable"
    INTERFACE = "interface"
    TYPE = "type"
    CONSTANT = "constant"
    PROPERTY = "property"
    UNKNOWN = "unknown"

    @classmethod
    def from_ctags(cls, kind: str | None) -> SymbolKind:
        """Map a free-form ctags kind string onto the closed enum.

        Lookup is case-insensitive; anything unrecognised becomes UNKNOWN.
        """
        if not kind:
            return cls.UNKNOWN
        return _CTAGS_KIND_ALIASES.get(kind.strip().lower(), cls.UNKNOWN)


_CTAGS_KIND_ALIASES: dict[str, SymbolKind] = {
    "function": SymbolKind.FUNCTION,
    "func": SymbolKind.FUNCTION,
    "def": SymbolKind.FUNCTION,
    "class": SymbolKind.CLASS,
    "method": SymbolKind.METHOD,
    "member": SymbolKind.METHOD,
    "variable": SymbolKind.VARIABLE,
    "var": SymbolKind.VARIABLE,
    "let": SymbolKind.VARIABLE,
    "const": SymbolKind.VARIABLE,
    "interface": SymbolKind.INTERFACE,
    "type": SymbolKind.TYPE,
    "typedef": SymbolKind.TYPE,
    "typealias": SymbolKind.TYPE,
    "constant": SymbolKind.CONSTANT,
    "enum": SymbolKind.CONSTANT,
    "enumerator": SymbolKind.CONSTANT,
    "property": SymbolKind.PROPERTY,
    "field": SymbolKind.PROPERTY,
}


class ReferenceType(str, Enum):
    """Discriminator for reference results."""

    DEFINITION = "definition"
    USAGE = "usage"


# =============================================================================
# Normalized backend types
# =============================================================================


@dataclass(frozen=True)
class Position:
    """A location inside a file as reported by the backend."""

    byte_offset: int = 0
    line_number: int = 0
    column: int = 0


@dataclass(frozen=True)
class MatchRange:
    """Start/end of a single highlighted match."""

    start: Position | None = None
    end: Position | None = None


@dataclass(frozen=True)
class SymbolInfo:
    """ctags metadata attached to one match range."""

    sym: str
    kind: str = ""
    parent: str = ""
    parent_kind: str = ""


@dataclass(frozen=True)
class ChunkMatch:
    """A contiguous chunk of matching content.

    ``symbol_info`` is positionally aligned with ``ranges``: entry ``i``
    describes ``ranges[i]``; ``None`` at an index means no symbol there.
    """

    content: str
    content_start: Position
    ranges: tuple[MatchRange, ...] = ()
    symbol_info: tuple[SymbolInfo | None, ...] = ()
    file_name: bool = False


@dataclass(frozen=True)
class LineMatch:
    """Legacy line-oriented match."""

    line: str
    line_number: int
    line_start: int = 0
    line_end: int = 0
    file_name: bool = False


@dataclass(frozen=True)
class FileMatch:
    """One file-level backend result.

    Exactly one of ``chunk_matches`` / ``line_matches`` is normally
    populated depending on which wire shape the backend emitted; the other
    is empty.
    """

    repository: str
    file_name: str
    branches: tuple[str, ...] = ()
    language: str = ""
    chunk_matches: tuple[ChunkMatch, ...] = ()
    line_matches: tuple[LineMatch, ...] = ()

    @property
    def match_format(self) -> str:
        """Which match shape this file carries: 'chunk', 'line' or 'none'."""
        if self.chunk_matches:
            return "chunk"
        if self.line_matches:
            return "line"
        return "none"


@dataclass(frozen=True)
class SearchStats:
    """Subset of backend statistics the tools report on."""

    match_count: int = 0
    file_count: int = 0
    duration_ns: int = 0
    content_bytes_loaded: int = 0
    index_bytes_loaded: int = 0


@dataclass(frozen=True)
class SearchResult:
    """Normalized response of a single backend search call."""

    file_matches: tuple[FileMatch, ...] = ()
    stats: SearchStats = field(default_factory=SearchStats)


# =============================================================================
# Item types
# =============================================================================


@dataclass
class Symbol:
    """A code symbol extracted from ctags metadata."""

    name: str
    kind: SymbolKind
    file: str
    repository: str
    line: int
    column: int
    parent: str | None = None
    parent_kind: SymbolKind | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "name": self.name,
            "kind": self.kind.value,
            "file": self.file,
            "repository": self.repository,
            "line": self.line,
            "column": self.column,
        }
        if self.parent:
            result["parent"] = self.parent
            result["parent_kind"] = (
                self.parent_kind.value if self.parent_kind else SymbolKind.UNKNOWN.value
            )
        return result


@dataclass
class FileResult:
    """File metadata only. Never carries content."""

    file: str
    repository: str
    branches: list[str] = field(default_factory=list)
    language: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "file": self.file,
            "repository": self.repository,
            "branches": list(self.branches),
        }
        if self.language:
            result["language"] = self.language
        return result


@dataclass
class ReferenceResult:
    """A definition or usage location of a symbol."""

    type: ReferenceType
    file: str
    repository: str
    line: int
    column: int
    context: str
    symbol: Symbol | None = None

    @property
    def dedup_key(self) -> str:
        # Column is deliberately not part of the key.
        return f"{self.repository}:{self.file}:{self.line}"

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "type": self.type.value,
            "file": self.file,
            "repository": self.repository,
            "line": self.line,
            "column": self.column,
            "context": self.context,
        }
        if self.symbol is not None:
            result["symbol"] = self.symbol.to_dict()
        return result


@dataclass
class Page(Generic[T]):
    """One page of items plus the continuation cursor, if any."""

    items: list[T]
    offset: int
    limit: int
    has_more: bool
    next_cursor: str | None = None
    total_extracted: int = 0

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "items": [
                item.to_dict() if hasattr(item, "to_dict") else item
                for item in self.items
            ],
            "pagination": {
                "offset": self.offset,
                "limit": self.limit,
                "has_more": self.has_more,
            },
        }
        if self.next_cursor is not None:
            result["next_cursor"] = self.next_cursor
        return result


# =============================================================================
# Supplementary tool types
# =============================================================================


@dataclass
class Repository:
    """An indexed repository and the branches seen for it."""

    name: str
    branches: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "branches": list(self.branches)}


@dataclass
class IndexStats:
    """Index statistics derived from a ``type:repo`` query."""

    repository_count: int = 0
    document_count: int = 0
    index_bytes: int = 0
    content_bytes: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "repository_count": self.repository_count,
            "document_count": self.document_count,
            "index_bytes": self.index_bytes,
            "content_bytes": self.content_bytes,
        }


@dataclass
class HealthCheck:
    """Outcome of probing the backend ``/healthz`` endpoint."""

    healthy: bool
    error: str | None = None


@dataclass
class HealthStatus:
    """Overall health of the server and its backend."""

    status: str
    server_version: str
    zoekt_reachable: bool
    index_stats: IndexStats | None = None
    error_message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "status": self.status,
            "server_version": self.server_version,
            "zoekt_reachable": self.zoekt_reachable,
        }
        if self.index_stats is not None:
            result["index_stats"] = self.index_stats.to_dict()
        if self.error_message:
            result["error_message"] = self.error_message
        return result


@dataclass
class FileContent:
    """Raw content of one indexed file."""

    repository: str
    path: str
    branch: str
    content: str
    language: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "repository": self.repository,
            "path": self.path,
            "branch": self.branch,
            "content": self.content,
        }
        if self.language:
            result["language"] = self.language
        return result
