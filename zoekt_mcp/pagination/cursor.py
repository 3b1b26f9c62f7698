"""Opaque pagination cursors.

A cursor is the base64 encoding of ``{"q": <query hash>, "o": <offset>}``.
It binds a position to one wrapped query string and never carries the page
size, so a caller may change ``limit`` between pages without invalidating
the cursor. Nothing is stored server-side.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import json
from dataclasses import dataclass

from zoekt_mcp.core.exceptions import (
    CursorQueryMismatchError,
    InvalidCursorOffsetError,
    MalformedCursorError,
)

QUERY_HASH_LENGTH = 16


@dataclass(frozen=True)
class Cursor:
    """Decoded cursor state."""

    query_hash: str
    offset: int


def hash_query(query: str) -> str:
    """Deterministic fixed-length digest of a wrapped query, for equality checks only."""
    return hashlib.sha256(query.encode("utf-8")).hexdigest()[:QUERY_HASH_LENGTH]


def encode_cursor(query: str, offset: int) -> str:
    payload = {"q": hash_query(query), "o": offset}
    raw = json.dumps(payload, separators=(",", ":")).encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


def decode_cursor(token: str | None) -> Cursor | None:
    """Decode a cursor token.

    Returns None for any structural failure instead of raising. Tokens from
    older releases may carry an ``l`` (page size) field; it is ignored.
    """
    if not token or not isinstance(token, str):
        return None
    try:
        raw = base64.b64decode(token.encode("ascii"), validate=True)
        payload = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError):
        return None

    if not isinstance(payload, dict):
        return None
    query_hash = payload.get("q")
    offset = payload.get("o")
    if not isinstance(query_hash, str):
        return None
    # bool is an int subclass; reject it explicitly
    if not isinstance(offset, int) or isinstance(offset, bool):
        return None
    return Cursor(query_hash=query_hash, offset=offset)


def validate_cursor(token: str, query: str) -> Cursor:
    """Decode a cursor and check it against the current wrapped query.

    Args:
        token: Cursor string supplied by the caller
        query: The wrapped query the current request will execute

    Returns:
        The decoded cursor

    Raises:
        MalformedCursorError: If the token cannot be decoded
        CursorQueryMismatchError: If the token was issued for another query
        InvalidCursorOffsetError: If the decoded offset is negative
    """
    cursor = decode_cursor(token)
    if cursor is None:
        raise MalformedCursorError()
    if cursor.query_hash != hash_query(query):
        raise CursorQueryMismatchError()
    if cursor.offset < 0:
        raise InvalidCursorOffsetError()
    return cursor


def generate_next_cursor(
    query: str, current_offset: int, limit: int, total_extracted: int
) -> str | None:
    """Cursor for the next page, or None when the current page reaches the end."""
    next_offset = current_offset + limit
    if next_offset < total_extracted:
        return encode_cursor(query, next_offset)
    return None
