"""Zoekt webserver adapter."""

from .client import ZoektClient
from .normalize import normalize_search_response

__all__ = ["ZoektClient", "normalize_search_response"]
