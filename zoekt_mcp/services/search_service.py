"""Search service for Zoekt MCP - implements the code-search tool operations.

Each operation builds its own query, cursor identity and extractor per call;
the only state shared across calls is the backend client. Pagination is
delegated to ``Paginator`` so cursor validation always happens before the
backend is contacted.
"""

from __future__ import annotations

import asyncio
import re
import time
from collections.abc import Awaitable
from pathlib import PurePosixPath
from typing import Any, TypeVar

from loguru import logger

from zoekt_mcp.core.exceptions import InvalidArgumentError
from zoekt_mcp.core.types import (
    FileContent,
    FileResult,
    HealthStatus,
    IndexStats,
    Page,
    ReferenceResult,
    Repository,
    SearchResult,
    Symbol,
)
from zoekt_mcp.interfaces.search_backend import SearchBackend
from zoekt_mcp.pagination.paginator import Paginator
from zoekt_mcp.version import __version__

from .deduplicator import deduplicate_references
from .item_extractor import (
    decode_content,
    extract_definitions,
    extract_files,
    extract_symbols,
    extract_usages,
)
from .query_transformer import (
    build_reference_queries,
    reference_cursor_query,
    wrap_filename_query,
    wrap_symbol_query,
)

T = TypeVar("T")

REPO_QUERY = "type:repo"
LIST_REPOS_MAX_RESULTS = 1000
STATS_MAX_RESULTS = 10000
DEFAULT_BRANCH = "HEAD"

_LANGUAGE_BY_EXTENSION = {
    "ts": "typescript",
    "tsx": "typescript",
    "js": "javascript",
    "jsx": "javascript",
    "py": "python",
    "go": "go",
    "rs": "rust",
    "java": "java",
    "kt": "kotlin",
    "rb": "ruby",
    "php": "php",
    "c": "c",
    "h": "c",
    "cpp": "cpp",
    "hpp": "cpp",
    "cs": "csharp",
    "swift": "swift",
    "sh": "bash",
    "bash": "bash",
    "zsh": "bash",
    "json": "json",
    "yaml": "yaml",
    "yml": "yaml",
    "toml": "toml",
    "md": "markdown",
    "sql": "sql",
    "html": "html",
    "css": "css",
}


def detect_language(path: str) -> str | None:
    """Best-effort language name from a file extension."""
    suffix = PurePosixPath(path).suffix.lower().lstrip(".")
    return _LANGUAGE_BY_EXTENSION.get(suffix)


async def _gather_or_cancel(*coros: Awaitable[T]) -> list[T]:
    """Run awaitables concurrently; on the first failure cancel the rest."""
    tasks = [asyncio.ensure_future(coro) for coro in coros]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


class SearchService:
    """Tool operations over a ``SearchBackend``."""

    def __init__(self, backend: SearchBackend):
        """Initialize search service.

        Args:
            backend: Backend client used for every search call
        """
        self._backend = backend

    @property
    def backend(self) -> SearchBackend:
        return self._backend

    async def search_symbols(
        self,
        query: str,
        limit: int = 30,
        context_lines: int = 3,
        cursor: str | None = None,
    ) -> Page[Symbol]:
        """Find symbol definitions matching a query.

        Args:
            query: Zoekt query; free text is wrapped in ``sym:``
            limit: Page size
            context_lines: Context lines requested from the backend
            cursor: Continuation cursor from a previous page

        Returns:
            Page of Symbol items
        """
        start = time.perf_counter()
        wrapped = wrap_symbol_query(query)
        logger.info(f"search_symbols request: query={wrapped!r} limit={limit}")

        async def fetch(fetch_limit: int) -> list[Symbol]:
            result = await self._backend.search(wrapped, fetch_limit, context_lines)
            return extract_symbols(result.file_matches)

        page = await Paginator(wrapped, fetch).page(limit, cursor)
        logger.info(
            f"search_symbols complete: {len(page.items)} items "
            f"(offset={page.offset}, has_more={page.has_more}) in {_elapsed_ms(start)}ms"
        )
        return page

    async def search_files(
        self, query: str, limit: int = 30, cursor: str | None = None
    ) -> Page[FileResult]:
        """Find files whose names match a query."""
        start = time.perf_counter()
        wrapped = wrap_filename_query(query)
        logger.info(f"search_files request: query={wrapped!r} limit={limit}")

        async def fetch(fetch_limit: int) -> list[FileResult]:
            result = await self._backend.search(wrapped, fetch_limit, 0)
            return extract_files(result.file_matches)

        page = await Paginator(wrapped, fetch).page(limit, cursor)
        logger.info(
            f"search_files complete: {len(page.items)} items "
            f"(offset={page.offset}, has_more={page.has_more}) in {_elapsed_ms(start)}ms"
        )
        return page

    async def find_references(
        self,
        symbol: str,
        filters: str | None = None,
        limit: int = 30,
        context_lines: int = 3,
        cursor: str | None = None,
    ) -> Page[ReferenceResult]:
        """Find definitions and usages of a symbol.

        Definitions and usages are fetched concurrently; if either call
        fails the whole operation fails. The page is cut from all
        definitions followed by usages that do not share a line with a
        definition.

        Args:
            symbol: Symbol name to look up
            filters: Extra Zoekt filters applied to both searches
            limit: Page size
            context_lines: Context lines requested from the backend
            cursor: Continuation cursor from a previous page

        Returns:
            Page of ReferenceResult items
        """
        start = time.perf_counter()
        definition_query, usage_query = build_reference_queries(symbol, filters)
        identity = reference_cursor_query(definition_query, usage_query)
        logger.info(
            f"find_references request: symbol={symbol!r} filters={filters!r} limit={limit}"
        )

        async def fetch(fetch_limit: int) -> list[ReferenceResult]:
            definition_result, usage_result = await _gather_or_cancel(
                self._backend.search(definition_query, fetch_limit, context_lines),
                self._backend.search(usage_query, fetch_limit, context_lines),
            )
            definitions = extract_definitions(definition_result.file_matches)
            usages = deduplicate_references(
                definitions, extract_usages(usage_result.file_matches)
            )
            logger.debug(
                f"find_references extracted {len(definitions)} definitions, "
                f"{len(usages)} usages after dedup"
            )
            return [*definitions, *usages]

        page = await Paginator(identity, fetch).page(limit, cursor)
        logger.info(
            f"find_references complete: {len(page.items)} items "
            f"(offset={page.offset}, has_more={page.has_more}) in {_elapsed_ms(start)}ms"
        )
        return page

    async def search(
        self, query: str, limit: int = 30, context_lines: int = 3
    ) -> dict[str, Any]:
        """Raw content search returning file-level matches with decoded text."""
        start = time.perf_counter()
        logger.info(f"search request: query={query!r} limit={limit}")
        result = await self._backend.search(query, limit, context_lines)

        files: list[dict[str, Any]] = []
        for fm in result.file_matches:
            matches: list[dict[str, Any]] = []
            for chunk in fm.chunk_matches:
                matches.append(
                    {
                        "line": chunk.content_start.line_number,
                        "content": decode_content(chunk.content),
                    }
                )
            for line_match in fm.line_matches:
                matches.append(
                    {
                        "line": line_match.line_number,
                        "content": decode_content(line_match.line).strip(),
                    }
                )
            entry: dict[str, Any] = {
                "repository": fm.repository,
                "file": fm.file_name,
                "branches": list(fm.branches) or [DEFAULT_BRANCH],
                "matches": matches,
            }
            if fm.language:
                entry["language"] = fm.language
            files.append(entry)

        stats = result.stats
        logger.info(
            f"search complete: {stats.match_count} matches in {len(files)} files "
            f"in {_elapsed_ms(start)}ms"
        )
        return {
            "query": query,
            "files": files,
            "stats": {
                "match_count": stats.match_count,
                "file_count": stats.file_count,
                "duration_ms": stats.duration_ns // 1_000_000,
            },
        }

    async def list_repos(self, filter: str | None = None) -> list[Repository]:
        """List indexed repositories, optionally filtered by a name regex.

        Raises:
            InvalidArgumentError: If ``filter`` is not a valid regular expression
        """
        start = time.perf_counter()
        logger.info(f"list_repos request: filter={filter!r}")

        pattern: re.Pattern[str] | None = None
        if filter:
            try:
                pattern = re.compile(filter, re.IGNORECASE)
            except re.error as e:
                raise InvalidArgumentError(
                    f"Invalid repository filter '{filter}': {e}"
                ) from e

        query = f"{REPO_QUERY} {filter}" if filter else REPO_QUERY
        result = await self._backend.search(query, LIST_REPOS_MAX_RESULTS, 0)

        branches_by_repo: dict[str, list[str]] = {}
        for fm in result.file_matches:
            if not fm.repository:
                continue
            branches = branches_by_repo.setdefault(fm.repository, [])
            for branch in fm.branches or (DEFAULT_BRANCH,):
                if branch not in branches:
                    branches.append(branch)

        repositories = [
            Repository(name=name, branches=branches)
            for name, branches in branches_by_repo.items()
            if pattern is None or pattern.search(name)
        ]
        logger.info(
            f"list_repos complete: {len(repositories)} repositories in {_elapsed_ms(start)}ms"
        )
        return repositories

    async def file_content(
        self, repository: str, path: str, branch: str = DEFAULT_BRANCH
    ) -> FileContent:
        start = time.perf_counter()
        logger.info(f"file_content request: {repository}/{path}@{branch}")
        content = await self._backend.get_file_content(repository, path, branch)
        if content.language is None:
            content.language = detect_language(path)
        logger.info(
            f"file_content complete: {len(content.content)} chars in {_elapsed_ms(start)}ms"
        )
        return content

    async def get_index_stats(self) -> IndexStats:
        """Index statistics derived from a ``type:repo`` query."""
        result: SearchResult = await self._backend.search(
            REPO_QUERY, STATS_MAX_RESULTS, 0
        )
        repos = {fm.repository for fm in result.file_matches if fm.repository}
        return IndexStats(
            repository_count=len(repos),
            document_count=result.stats.file_count,
            index_bytes=result.stats.index_bytes_loaded,
            content_bytes=result.stats.content_bytes_loaded,
        )

    async def get_health(self) -> HealthStatus:
        """Report server and backend health. Never raises."""
        start = time.perf_counter()
        try:
            health = await self._backend.check_health()
            if not health.healthy:
                logger.warning(f"Zoekt backend unhealthy: {health.error}")
                return HealthStatus(
                    status="unhealthy",
                    server_version=__version__,
                    zoekt_reachable=False,
                    error_message=health.error or "Zoekt backend is not reachable",
                )

            try:
                stats = await self.get_index_stats()
            except Exception as e:
                logger.warning(f"Index stats unavailable: {e}")
                return HealthStatus(
                    status="degraded",
                    server_version=__version__,
                    zoekt_reachable=True,
                    error_message=f"Failed to get index stats: {e}",
                )

            logger.info(f"get_health complete: healthy in {_elapsed_ms(start)}ms")
            return HealthStatus(
                status="healthy",
                server_version=__version__,
                zoekt_reachable=True,
                index_stats=stats,
            )
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            return HealthStatus(
                status="unhealthy",
                server_version=__version__,
                zoekt_reachable=False,
                error_message=str(e) or type(e).__name__,
            )
