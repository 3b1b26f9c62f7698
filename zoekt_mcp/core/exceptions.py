"""Exception hierarchy for Zoekt MCP.

Cursor errors are detected locally, before any backend call is made.
Backend errors are raised by the HTTP adapter after an attempted call and
carry a machine-readable code. Nothing in the core retries on either class.
"""

from __future__ import annotations


class ZoektMCPError(Exception):
    """Base exception for all Zoekt MCP errors."""

    pass


class ConfigurationError(ZoektMCPError):
    """Raised when the server configuration is missing or invalid."""

    pass


# =============================================================================
# Cursor errors
# =============================================================================


class CursorError(ZoektMCPError):
    """Base class for pagination cursor rejections."""

    code = "INVALID_CURSOR"


class MalformedCursorError(CursorError):
    """Raised when a cursor cannot be decoded into a valid structure."""

    def __init__(self, message: str = "Invalid cursor format") -> None:
        super().__init__(message)


class CursorQueryMismatchError(CursorError):
    """Raised when a cursor was issued for a different query."""

    def __init__(
        self,
        message: str = (
            "Cursor does not match current query. "
            "Cursors are only valid for the same query."
        ),
    ) -> None:
        super().__init__(message)


class InvalidCursorOffsetError(CursorError):
    """Raised when a cursor decodes to a negative offset."""

    def __init__(self, message: str = "Invalid cursor: negative offset") -> None:
        super().__init__(message)


# =============================================================================
# Backend errors
# =============================================================================


class BackendError(ZoektMCPError):
    """Error raised after an attempted call to the Zoekt backend.

    Attributes:
        code: One of UNAVAILABLE, TIMEOUT, QUERY_ERROR, NOT_FOUND
        status_code: HTTP status returned by the backend, when there was one
    """

    code = "QUERY_ERROR"

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class BackendUnavailableError(BackendError):
    """Raised when the backend cannot be reached."""

    code = "UNAVAILABLE"


class BackendTimeoutError(BackendError):
    """Raised when a backend call is aborted by its deadline."""

    code = "TIMEOUT"


class BackendQueryError(BackendError):
    """Raised when the backend rejects a query or returns a non-success status."""

    code = "QUERY_ERROR"


class BackendNotFoundError(BackendError):
    """Raised when the backend reports a missing repository or file."""

    code = "NOT_FOUND"


class InvalidArgumentError(ZoektMCPError):
    """Raised when a tool argument is outside its accepted range or form."""

    code = "INVALID_ARGUMENT"
