"""Query rewriting, item extraction and the search tool operations."""

from .deduplicator import deduplicate_references
from .item_extractor import (
    decode_content,
    extract_definitions,
    extract_files,
    extract_symbols,
    extract_usages,
)
from .query_transformer import wrap_filename_query, wrap_symbol_query
from .search_service import SearchService

__all__ = [
    "SearchService",
    "decode_content",
    "deduplicate_references",
    "extract_definitions",
    "extract_files",
    "extract_symbols",
    "extract_usages",
    "wrap_filename_query",
    "wrap_symbol_query",
]
