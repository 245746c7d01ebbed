"""
Shared pytest fixtures and configuration for all tests.

Store-backed tests run against a real SQLite file in ``tmp_path``; unit
tests that need to control failures use an ``AsyncMock`` store instead.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from stubidp.config import reset_settings
from stubidp.database.store import SQLiteStore


@pytest.fixture(autouse=True)
def _clean_settings(monkeypatch):
    """Keep the process environment from leaking into Settings."""
    for name in (
        "DATABASE_DIALECT",
        "DATABASE_URL",
        "OIDC_ISSUER",
        "CLIENT_ID",
        "CLIENT_SECRET",
        "REDIRECT_URI",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest_asyncio.fixture
async def sqlite_store(tmp_path):
    """Initialized SQLite store backed by a temporary file."""
    store = SQLiteStore.from_path(str(tmp_path / "stubidp.db"))
    await store.initialize()
    yield store
    await store.close()


@pytest.fixture
def mock_store():
    """Store double whose calls can be asserted and made to fail."""
    store = MagicMock()
    store.dialect = "sqlite"
    store.insert_or_replace = AsyncMock(return_value=None)
    store.select_one = AsyncMock(return_value=None)
    store.update_by_key = AsyncMock(return_value=1)
    store.delete_where = AsyncMock(return_value=0)
    store.delete_expired = AsyncMock(return_value=0)
    return store
