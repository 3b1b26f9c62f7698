"""SearchBackend protocol - the only outbound dependency of the search tools."""

from typing import Protocol

from zoekt_mcp.core.types import FileContent, HealthCheck, SearchResult


class SearchBackend(Protocol):
    """Abstract protocol for code-search backends.

    Implementations issue the HTTP call, enforce the per-call deadline and
    normalize the response into ``SearchResult`` before returning. Errors are
    raised as ``BackendError`` subclasses; implementations never retry.
    """

    async def search(
        self, query: str, limit: int, context_lines: int = 3
    ) -> SearchResult:
        """Run a query and return at most ``limit`` file-level matches."""
        ...

    async def get_file_content(
        self, repository: str, path: str, branch: str = "HEAD"
    ) -> FileContent:
        """Fetch the raw content of one indexed file."""
        ...

    async def check_health(self) -> HealthCheck:
        """Probe backend liveness. Must not raise."""
        ...

    async def close(self) -> None:
        """Release connections held by the backend client."""
        ...
