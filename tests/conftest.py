import os

import pytest

from tests.helpers.fake_backend import FakeSearchBackend
from zoekt_mcp.services.search_service import SearchService

_ENV_PREFIXES = ("ZOEKT_", "MCP_")
_ENV_NAMES = ("LOG_LEVEL",)


@pytest.fixture
def clean_environment(monkeypatch):
    """Ensure tests run with a clean environment.

    - Unset ZOEKT_* and MCP_* variables that select backend and transport.
    - Unset LOG_LEVEL so logging defaults apply.
    """
    to_clear = [k for k in os.environ.keys() if k.startswith(_ENV_PREFIXES)]
    to_clear += list(_ENV_NAMES)
    for k in to_clear:
        monkeypatch.delenv(k, raising=False)
    yield


@pytest.fixture
def backend() -> FakeSearchBackend:
    return FakeSearchBackend()


@pytest.fixture
def service(backend: FakeSearchBackend) -> SearchService:
    return SearchService(backend)
