"""Cursor encoding and page slicing."""

from .cursor import (
    Cursor,
    decode_cursor,
    encode_cursor,
    generate_next_cursor,
    hash_query,
    validate_cursor,
)
from .paginator import Paginator, compute_fetch_limit, resolve_offset, slice_page

__all__ = [
    "Cursor",
    "Paginator",
    "compute_fetch_limit",
    "decode_cursor",
    "encode_cursor",
    "generate_next_cursor",
    "hash_query",
    "resolve_offset",
    "slice_page",
    "validate_cursor",
]
