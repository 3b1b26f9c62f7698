"""HTTP client for the Zoekt webserver API.

Implements the ``SearchBackend`` protocol on top of ``httpx.AsyncClient``.
Every call is bounded by the configured deadline; when it fires the request
is cancelled and surfaced as ``BackendTimeoutError``. Connection failures
become ``BackendUnavailableError`` and non-success responses become
``BackendQueryError`` (or ``BackendNotFoundError`` for a missing file).
No call is retried here.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
from loguru import logger

from zoekt_mcp.core.exceptions import (
    BackendNotFoundError,
    BackendQueryError,
    BackendTimeoutError,
    BackendUnavailableError,
)
from zoekt_mcp.core.types import FileContent, HealthCheck, SearchResult

from .normalize import normalize_search_response


class ZoektClient:
    """Async client for zoekt-webserver.

    Attributes:
        base_url: Webserver URL without trailing slash
        timeout_ms: Deadline applied to each request
    """

    DEFAULT_TIMEOUT_MS = 30000

    def __init__(self, base_url: str, timeout_ms: int | None = None):
        """Initialize the client.

        Args:
            base_url: Base URL of zoekt-webserver (e.g., http://localhost:6070)
            timeout_ms: Per-request deadline in milliseconds (default 30000)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout_ms = timeout_ms or self.DEFAULT_TIMEOUT_MS

        # Lazy-initialized HTTP client
        self._client: httpx.AsyncClient | None = None

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout_seconds),
                follow_redirects=True,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        operation: str,
        send: Callable[[httpx.AsyncClient], Awaitable[httpx.Response]],
    ) -> httpx.Response:
        """Send one request under the deadline and map transport failures."""
        client = await self._get_client()
        try:
            return await asyncio.wait_for(send(client), timeout=self.timeout_seconds)
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            logger.error(f"{operation} timed out after {self.timeout_ms}ms")
            raise BackendTimeoutError(
                f"Search timed out after {self.timeout_ms}ms. "
                "Try a more specific query."
            ) from e
        except httpx.TransportError as e:
            logger.error(f"{operation} failed: backend unreachable at {self.base_url}: {e}")
            raise BackendUnavailableError(
                f"Search backend unavailable at {self.base_url}. "
                "Ensure zoekt-webserver is running."
            ) from e

    @staticmethod
    def _is_success(response: httpx.Response) -> bool:
        return 200 <= response.status_code < 300

    @staticmethod
    def _error_text(response: httpx.Response) -> str:
        text = response.text or ""
        return text.strip() or response.reason_phrase or f"HTTP {response.status_code}"

    async def search(
        self, query: str, limit: int, context_lines: int = 3
    ) -> SearchResult:
        """Search for code across indexed repositories.

        Args:
            query: Zoekt query string
            limit: Maximum number of file-level matches to return
            context_lines: Lines of context around each match

        Returns:
            Normalized SearchResult

        Raises:
            BackendTimeoutError: If the deadline fires
            BackendUnavailableError: If the webserver cannot be reached
            BackendQueryError: If the query is rejected or the body is not JSON
        """
        body = {
            "Q": query,
            "Opts": {
                "NumContextLines": context_lines,
                "MaxDocDisplayCount": limit,
                "ChunkMatches": True,
            },
        }
        logger.debug(f"Zoekt search: q={query!r} limit={limit} context={context_lines}")

        response = await self._request(
            "search",
            lambda client: client.post(f"{self.base_url}/api/search", json=body),
        )
        if not self._is_success(response):
            message = self._error_text(response)
            logger.error(f"Zoekt rejected query {query!r}: {response.status_code} {message}")
            raise BackendQueryError(
                f"Query error: {message}", status_code=response.status_code
            )

        try:
            payload: Any = response.json()
        except ValueError as e:
            raise BackendQueryError(
                f"Query error: backend returned invalid JSON: {e}",
                status_code=response.status_code,
            ) from e

        result = normalize_search_response(payload)
        logger.debug(
            f"Zoekt search returned {len(result.file_matches)} file matches "
            f"({result.stats.match_count} matches)"
        )
        return result

    async def get_file_content(
        self, repository: str, path: str, branch: str = "HEAD"
    ) -> FileContent:
        """Fetch raw file content via ``/print``.

        Raises:
            BackendNotFoundError: If the webserver answers 404
            BackendQueryError: For any other non-success status
        """
        params = {"r": repository, "f": path, "b": branch, "format": "raw"}
        response = await self._request(
            "file_content",
            lambda client: client.get(f"{self.base_url}/print", params=params),
        )
        if response.status_code == 404:
            raise BackendNotFoundError(
                f"File not found: {repository}/{path}", status_code=404
            )
        if not self._is_success(response):
            raise BackendQueryError(
                f"Failed to get file content: {self._error_text(response)}",
                status_code=response.status_code,
            )
        return FileContent(
            repository=repository, path=path, branch=branch, content=response.text
        )

    async def check_health(self) -> HealthCheck:
        """Probe ``/healthz``. Never raises."""
        try:
            response = await self._request(
                "health",
                lambda client: client.get(f"{self.base_url}/healthz"),
            )
            if not self._is_success(response):
                return HealthCheck(healthy=False, error=self._error_text(response))
            # A healthy webserver answers with a JSON document
            response.json()
            return HealthCheck(healthy=True)
        except Exception as e:
            logger.warning(f"Zoekt health check failed: {e}")
            return HealthCheck(healthy=False, error=str(e) or type(e).__name__)
