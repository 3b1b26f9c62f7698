"""Protocols decoupling the search tools from concrete backends."""

from .search_backend import SearchBackend

__all__ = ["SearchBackend"]
