"""Normalization of Zoekt webserver JSON into immutable result types.

The webserver has emitted matches under two keys over time (``FileMatches``
and the newer ``Files``), names the repository either ``Repository`` or
``Repo``, and may put statistics under ``Result.Stats`` or flatten them onto
``Result``. All of that is resolved here, once; nothing downstream reads raw
response dictionaries.

Zoekt serializes empty slices as ``null``, so every list field is read with
an ``or []`` fallback.
"""

from typing import Any

from zoekt_mcp.core.types import (
    ChunkMatch,
    FileMatch,
    LineMatch,
    MatchRange,
    Position,
    SearchResult,
    SearchStats,
    SymbolInfo,
)


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    return 0


def normalize_position(raw: dict[str, Any] | None) -> Position | None:
    if not isinstance(raw, dict):
        return None
    return Position(
        byte_offset=_as_int(raw.get("ByteOffset")),
        line_number=_as_int(raw.get("LineNumber")),
        column=_as_int(raw.get("Column")),
    )


def normalize_symbol_info(raw: dict[str, Any] | None) -> SymbolInfo | None:
    if not isinstance(raw, dict):
        return None
    return SymbolInfo(
        sym=raw.get("Sym") or "",
        kind=raw.get("Kind") or "",
        parent=raw.get("Parent") or "",
        parent_kind=raw.get("ParentKind") or "",
    )


def normalize_match_range(raw: dict[str, Any] | None) -> MatchRange:
    # Unusable entries keep their slot so SymbolInfo stays index-aligned.
    if not isinstance(raw, dict):
        return MatchRange()
    return MatchRange(
        start=normalize_position(raw.get("Start")),
        end=normalize_position(raw.get("End")),
    )


def normalize_chunk_match(raw: dict[str, Any]) -> ChunkMatch:
    ranges = tuple(normalize_match_range(r) for r in raw.get("Ranges") or [])
    symbol_info = tuple(
        normalize_symbol_info(s) for s in raw.get("SymbolInfo") or []
    )
    return ChunkMatch(
        content=raw.get("Content") or "",
        content_start=normalize_position(raw.get("ContentStart")) or Position(),
        ranges=ranges,
        symbol_info=symbol_info,
        file_name=bool(raw.get("FileName", False)),
    )


def normalize_line_match(raw: dict[str, Any]) -> LineMatch:
    return LineMatch(
        line=raw.get("Line") or "",
        line_number=_as_int(raw.get("LineNumber")),
        line_start=_as_int(raw.get("LineStart")),
        line_end=_as_int(raw.get("LineEnd")),
        file_name=bool(raw.get("FileName", False)),
    )


def normalize_file_match(raw: dict[str, Any]) -> FileMatch:
    return FileMatch(
        repository=raw.get("Repository") or raw.get("Repo") or "",
        file_name=raw.get("FileName") or "",
        branches=tuple(raw.get("Branches") or ()),
        language=raw.get("Language") or "",
        chunk_matches=tuple(
            normalize_chunk_match(c)
            for c in raw.get("ChunkMatches") or []
            if isinstance(c, dict)
        ),
        line_matches=tuple(
            normalize_line_match(m)
            for m in raw.get("LineMatches") or []
            if isinstance(m, dict)
        ),
    )


def _stat(result: dict[str, Any], key: str) -> int:
    if key in result and result[key] is not None:
        return _as_int(result[key])
    stats = result.get("Stats")
    if isinstance(stats, dict):
        return _as_int(stats.get(key))
    return 0


def normalize_stats(result: dict[str, Any]) -> SearchStats:
    return SearchStats(
        match_count=_stat(result, "MatchCount"),
        file_count=_stat(result, "FileCount"),
        duration_ns=_stat(result, "Duration"),
        content_bytes_loaded=_stat(result, "ContentBytesLoaded"),
        index_bytes_loaded=_stat(result, "IndexBytesLoaded"),
    )


def normalize_search_response(payload: dict[str, Any]) -> SearchResult:
    """Convert a ``/api/search`` response body into a ``SearchResult``.

    Args:
        payload: Decoded JSON body, ``{"Result": {...}}``

    Returns:
        SearchResult with normalized file matches and statistics
    """
    result = payload.get("Result") if isinstance(payload, dict) else None
    if not isinstance(result, dict):
        return SearchResult()

    raw_matches = result.get("Files") or result.get("FileMatches") or []
    file_matches = tuple(
        normalize_file_match(m) for m in raw_matches if isinstance(m, dict)
    )
    return SearchResult(file_matches=file_matches, stats=normalize_stats(result))
