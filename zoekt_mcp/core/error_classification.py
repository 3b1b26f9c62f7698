"""Error classification for Zoekt MCP tool responses.

Turns any exception raised while serving a tool call into a
``StructuredError`` with a machine-readable code and, where the error text
matches a known pattern, an actionable hint.

Hints are best-effort pattern matches on backend error text; they are not
authoritative. Typed errors (cursor and backend errors) keep their own code.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from zoekt_mcp.core.exceptions import BackendError, CursorError, InvalidArgumentError


class ErrorCode(str, Enum):
    """Machine-readable error codes surfaced to tool callers."""

    UNAVAILABLE = "UNAVAILABLE"
    QUERY_ERROR = "QUERY_ERROR"
    TIMEOUT = "TIMEOUT"
    NOT_FOUND = "NOT_FOUND"
    INVALID_CURSOR = "INVALID_CURSOR"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"


@dataclass
class StructuredError:
    """Error payload with an optional hint for resolution."""

    code: ErrorCode
    message: str
    hint: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"code": self.code.value, "message": self.message}
        if self.hint:
            result["hint"] = self.hint
        if self.details:
            result["details"] = dict(self.details)
        return result


VALID_QUERY_FIELDS = [
    "file:", "f:",
    "repo:", "r:",
    "lang:", "l:",
    "branch:", "b:",
    "sym:",
    "content:", "c:",
    "case:",
    "type:", "t:",
    "archived:", "a:",
    "fork:",
    "public:",
    "regex:",
]

_REGEX_ERROR_MARKERS = (
    "regexp",
    "regex",
    "parse error",
    "invalid pattern",
    "unterminated",
    "unbalanced",
    "missing )",
    "missing ]",
    "bad escape",
    "invalid escape",
)

_UNKNOWN_FIELD_PATTERNS = (
    re.compile(r"unknown (?:field|operator)[:\s]+[\"']?(\w+)[\"']?", re.IGNORECASE),
    re.compile(r"invalid (?:field|operator)[:\s]+[\"']?(\w+)[\"']?", re.IGNORECASE),
    re.compile(r"unrecognized (?:field|operator)[:\s]+[\"']?(\w+)[\"']?", re.IGNORECASE),
)

_TIMEOUT_MARKERS = ("timeout", "timed out", "deadline exceeded")

_UNAVAILABLE_MARKERS = (
    "unavailable",
    "connection refused",
    "econnrefused",
    "enotfound",
    "network error",
    "fetch failed",
    "cannot connect",
)

_NOT_FOUND_MARKERS = ("not found", "404", "no such file")

REGEX_HINT = (
    "Check regex syntax. Use /pattern/ for regex patterns, or \"text\" for "
    "literal text. Common issues: unescaped special characters "
    "(.*+?^$[]{}|\\), unbalanced parentheses."
)
TIMEOUT_HINT = (
    "Search timed out. Try: (1) more specific query terms, (2) add repo: or "
    "file: filters, (3) use lang: to limit language scope, (4) reduce result "
    "limit."
)
UNAVAILABLE_HINT = (
    "Zoekt backend is not reachable. Verify zoekt-webserver is running and "
    "accessible."
)
NOT_FOUND_HINT = (
    "The requested resource was not found. Verify the repository name and "
    "file path are correct."
)
DEFAULT_HINT = (
    "Check query syntax. See Zoekt documentation for supported operators and "
    "fields."
)


def is_regex_error(message: str) -> bool:
    lowered = message.lower()
    return any(marker in lowered for marker in _REGEX_ERROR_MARKERS)


def extract_unknown_field(message: str) -> str | None:
    """Pull the offending field name out of an unknown-field error, if any."""
    for pattern in _UNKNOWN_FIELD_PATTERNS:
        match = pattern.search(message)
        if match:
            return match.group(1)
    return None


def is_timeout_error(message: str) -> bool:
    lowered = message.lower()
    return any(marker in lowered for marker in _TIMEOUT_MARKERS)


def is_unavailable_error(message: str) -> bool:
    lowered = message.lower()
    return any(marker in lowered for marker in _UNAVAILABLE_MARKERS)


def is_not_found_error(message: str) -> bool:
    lowered = message.lower()
    return any(marker in lowered for marker in _NOT_FOUND_MARKERS)


def enhance_error(error: BaseException | str) -> StructuredError:
    """Classify an error and attach an actionable hint.

    Args:
        error: Exception (or bare message) raised while serving a tool call

    Returns:
        StructuredError with code, original message and an optional hint
    """
    message = str(error)

    if isinstance(error, CursorError):
        return StructuredError(
            code=ErrorCode.INVALID_CURSOR,
            message=message,
            details={"error_type": type(error).__name__},
        )

    if isinstance(error, InvalidArgumentError):
        return StructuredError(
            code=ErrorCode.INVALID_ARGUMENT,
            message=message,
            details={"error_type": "invalid_argument"},
        )

    typed_code: ErrorCode | None = None
    if isinstance(error, BackendError):
        typed_code = ErrorCode(error.code)

    structured = _classify_message(message)
    if typed_code is not None and structured.code != typed_code:
        # Typed code wins over the text pattern
        structured = StructuredError(
            code=typed_code,
            message=message,
            hint=_hint_for_code(typed_code),
            details={"error_type": typed_code.value.lower()},
        )
    if isinstance(error, BackendError) and error.status_code is not None:
        structured.details["status_code"] = error.status_code
    return structured


def _classify_message(message: str) -> StructuredError:
    if is_regex_error(message):
        return StructuredError(
            code=ErrorCode.QUERY_ERROR,
            message=message,
            hint=REGEX_HINT,
            details={"error_type": "regex_syntax"},
        )

    unknown_field = extract_unknown_field(message)
    if unknown_field:
        return StructuredError(
            code=ErrorCode.QUERY_ERROR,
            message=message,
            hint=(
                f'Unknown query field "{unknown_field}". '
                f"Valid fields: {', '.join(VALID_QUERY_FIELDS)}"
            ),
            details={"error_type": "unknown_field", "field": unknown_field},
        )

    if is_timeout_error(message):
        return StructuredError(
            code=ErrorCode.TIMEOUT,
            message=message,
            hint=TIMEOUT_HINT,
            details={"error_type": "timeout"},
        )

    if is_unavailable_error(message):
        return StructuredError(
            code=ErrorCode.UNAVAILABLE,
            message=message,
            hint=UNAVAILABLE_HINT,
            details={"error_type": "connection"},
        )

    if is_not_found_error(message):
        return StructuredError(
            code=ErrorCode.NOT_FOUND,
            message=message,
            hint=NOT_FOUND_HINT,
            details={"error_type": "not_found"},
        )

    return StructuredError(
        code=ErrorCode.QUERY_ERROR,
        message=message,
        hint=DEFAULT_HINT,
        details={"error_type": "unknown"},
    )


def _hint_for_code(code: ErrorCode) -> str | None:
    return {
        ErrorCode.TIMEOUT: TIMEOUT_HINT,
        ErrorCode.UNAVAILABLE: UNAVAILABLE_HINT,
        ErrorCode.NOT_FOUND: NOT_FOUND_HINT,
        ErrorCode.QUERY_ERROR: DEFAULT_HINT,
    }.get(code)
