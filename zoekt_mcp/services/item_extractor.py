"""Item extraction from file-level Zoekt matches.

Zoekt returns one result per file; callers page over finer-grained items.
The extractors here flatten a list of normalized ``FileMatch`` objects into
symbols, file records or references, preserving backend order. Pagination
slices the flattened list, so a page may span file boundaries.
"""

from __future__ import annotations

import base64
import binascii
from collections.abc import Iterator, Sequence
from typing import Protocol, TypeVar

from zoekt_mcp.core.types import (
    ChunkMatch,
    FileMatch,
    FileResult,
    Position,
    ReferenceResult,
    ReferenceType,
    Symbol,
    SymbolKind,
)

T_co = TypeVar("T_co", covariant=True)


def decode_content(encoded: str) -> str:
    """Decode base64 content from Zoekt.

    Falls back to returning the input unchanged when it is not valid base64
    or does not decode to UTF-8 text.
    """
    if not encoded:
        return ""
    try:
        return base64.b64decode(encoded, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return encoded


def _range_start(chunk: ChunkMatch, index: int) -> Position:
    if index < len(chunk.ranges):
        start = chunk.ranges[index].start
        if start is not None:
            return start
    return chunk.content_start


def _usage_positions(chunk: ChunkMatch) -> list[Position]:
    """First range start on each line of a chunk, in range order."""
    positions: list[Position] = []
    seen_lines: set[int] = set()
    for i in range(max(len(chunk.ranges), 1)):
        position = _range_start(chunk, i)
        if position.line_number in seen_lines:
            continue
        seen_lines.add(position.line_number)
        positions.append(position)
    return positions


def _iter_symbols(file_match: FileMatch) -> Iterator[tuple[ChunkMatch, Symbol]]:
    """Yield ``(chunk, symbol)`` for every populated symbol-info slot."""
    for chunk in file_match.chunk_matches:
        for i, info in enumerate(chunk.symbol_info):
            if info is None or not info.sym:
                continue
            position = _range_start(chunk, i)
            symbol = Symbol(
                name=info.sym,
                kind=SymbolKind.from_ctags(info.kind),
                file=file_match.file_name,
                repository=file_match.repository,
                line=position.line_number,
                column=position.column,
            )
            if info.parent:
                symbol.parent = info.parent
                symbol.parent_kind = SymbolKind.from_ctags(info.parent_kind)
            yield chunk, symbol


class ItemExtractor(Protocol[T_co]):
    """Flattens file matches into an ordered list of items."""

    def extract(self, file_matches: Sequence[FileMatch]) -> list[T_co]:
        ...


class SymbolExtractor:
    """One ``Symbol`` per ctags entry attached to a chunk match range."""

    def extract(self, file_matches: Sequence[FileMatch]) -> list[Symbol]:
        return [symbol for fm in file_matches for _, symbol in _iter_symbols(fm)]


class FileExtractor:
    """One ``FileResult`` per file match. Content is never copied."""

    def extract(self, file_matches: Sequence[FileMatch]) -> list[FileResult]:
        return [
            FileResult(
                file=fm.file_name,
                repository=fm.repository,
                branches=list(fm.branches),
                language=fm.language or None,
            )
            for fm in file_matches
        ]


class DefinitionExtractor:
    """Symbol definitions tagged as references, with chunk context."""

    def extract(self, file_matches: Sequence[FileMatch]) -> list[ReferenceResult]:
        results: list[ReferenceResult] = []
        for fm in file_matches:
            for chunk, symbol in _iter_symbols(fm):
                results.append(
                    ReferenceResult(
                        type=ReferenceType.DEFINITION,
                        file=fm.file_name,
                        repository=fm.repository,
                        line=symbol.line,
                        column=symbol.column,
                        context=decode_content(chunk.content).strip(),
                        symbol=symbol,
                    )
                )
        return results


class UsageExtractor:
    """Usages from content matches in either wire shape.

    A chunk match yields one usage per distinct line among its ranges, each
    carrying the whole chunk as context. A line match yields one usage
    unless it is a file-name match.
    """

    def extract(self, file_matches: Sequence[FileMatch]) -> list[ReferenceResult]:
        results: list[ReferenceResult] = []
        for fm in file_matches:
            for chunk in fm.chunk_matches:
                if chunk.file_name:
                    continue
                context = decode_content(chunk.content).strip()
                for position in _usage_positions(chunk):
                    results.append(
                        ReferenceResult(
                            type=ReferenceType.USAGE,
                            file=fm.file_name,
                            repository=fm.repository,
                            line=position.line_number,
                            column=position.column,
                            context=context,
                        )
                    )
            for line_match in fm.line_matches:
                if line_match.file_name:
                    continue
                results.append(
                    ReferenceResult(
                        type=ReferenceType.USAGE,
                        file=fm.file_name,
                        repository=fm.repository,
                        line=line_match.line_number,
                        column=line_match.line_start,
                        context=decode_content(line_match.line).strip(),
                    )
                )
        return results


def extract_symbols(file_matches: Sequence[FileMatch]) -> list[Symbol]:
    return SymbolExtractor().extract(file_matches)


def extract_files(file_matches: Sequence[FileMatch]) -> list[FileResult]:
    return FileExtractor().extract(file_matches)


def extract_definitions(file_matches: Sequence[FileMatch]) -> list[ReferenceResult]:
    return DefinitionExtractor().extract(file_matches)


def extract_usages(file_matches: Sequence[FileMatch]) -> list[ReferenceResult]:
    return UsageExtractor().extract(file_matches)
