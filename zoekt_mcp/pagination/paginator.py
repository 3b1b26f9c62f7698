"""Stateless cursor pagination over extracted items.

Each request re-runs the query with an inflated file limit
(``limit + offset + 1``), extracts items from the full response and slices
``items[offset:offset + limit]``. The extra file is a sentinel for detecting
whether anything exists past the current page. Deep pages cost more because
the whole prefix is fetched again; no state is kept between requests.

The fetch window assumes items are spread roughly evenly across files. A
single dense file can make a page shorter than ``limit`` even though
unfetched files hold more items.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from typing import Generic, TypeVar

from zoekt_mcp.core.types import Page

from .cursor import generate_next_cursor, validate_cursor

T = TypeVar("T")

# Produces the complete ordered item list for a given file-level fetch limit
ItemFetcher = Callable[[int], Awaitable[Sequence[T]]]


def compute_fetch_limit(limit: int, offset: int) -> int:
    return limit + offset + 1


def resolve_offset(cursor: str | None, query: str) -> int:
    """Starting offset for a request; 0 when no cursor is supplied.

    Raises:
        CursorError: If the cursor is malformed, bound to another query, or
            carries a negative offset
    """
    if cursor is None or cursor == "":
        return 0
    return validate_cursor(cursor, query).offset


def slice_page(items: Sequence[T], query: str, offset: int, limit: int) -> Page[T]:
    """Cut one page out of a fully materialized item list."""
    end = offset + limit
    page_items = list(items[offset:end])
    has_more = len(items) > end
    next_cursor = (
        generate_next_cursor(query, offset, limit, len(items)) if has_more else None
    )
    return Page(
        items=page_items,
        offset=offset,
        limit=limit,
        has_more=has_more,
        next_cursor=next_cursor,
        total_extracted=len(items),
    )


class Paginator(Generic[T]):
    """Validates the cursor, fetches, and slices one page.

    The cursor is checked before any fetch, so a rejected cursor never
    reaches the backend.
    """

    def __init__(self, query: str, fetch: ItemFetcher[T]):
        """Initialize paginator.

        Args:
            query: Identity the cursor is bound to (the wrapped query string)
            fetch: Coroutine function returning all items for a fetch limit
        """
        self.query = query
        self._fetch = fetch

    async def page(self, limit: int, cursor: str | None = None) -> Page[T]:
        offset = resolve_offset(cursor, self.query)
        items = await self._fetch(compute_fetch_limit(limit, offset))
        return slice_page(items, self.query, offset, limit)
