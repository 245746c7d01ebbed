"""
Tests for stubidp/database/store.py.

Row operations run on a real SQLite file; the PostgreSQL store is checked
by compiling its statements, without a server.
"""

import pytest
from sqlalchemy.dialects import postgresql as pg_dialect

from stubidp.database.base import RelationalStore
from stubidp.database.store import (
    PostgresStore,
    SQLiteStore,
    normalize_postgres_url,
    normalize_sqlite_url,
)


class TestUrlNormalization:
    """Test connection URL handling."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("postgres://u:p@db/idp", "postgresql+psycopg://u:p@db/idp"),
            ("postgresql://u:p@db/idp", "postgresql+psycopg://u:p@db/idp"),
            ("postgresql+psycopg://u:p@db/idp", "postgresql+psycopg://u:p@db/idp"),
        ],
    )
    def test_postgres(self, raw, expected):
        assert normalize_postgres_url(raw) == expected

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("./data/idp.db", "sqlite+aiosqlite:///./data/idp.db"),
            ("/var/lib/idp.db", "sqlite+aiosqlite:////var/lib/idp.db"),
            ("sqlite:///idp.db", "sqlite+aiosqlite:///idp.db"),
            ("sqlite+aiosqlite:///idp.db", "sqlite+aiosqlite:///idp.db"),
            (":memory:", "sqlite+aiosqlite:///:memory:"),
        ],
    )
    def test_sqlite(self, raw, expected):
        assert normalize_sqlite_url(raw) == expected


class TestSQLiteStore:
    """Test SQLiteStore row operations."""

    @pytest.mark.asyncio
    async def test_implements_protocol(self, sqlite_store):
        assert isinstance(sqlite_store, RelationalStore)
        assert sqlite_store.dialect == "sqlite"

    @pytest.mark.asyncio
    async def test_initialize_is_repeatable(self, sqlite_store):
        await sqlite_store.initialize()

    @pytest.mark.asyncio
    async def test_insert_or_replace_overwrites_all_columns(self, sqlite_store):
        await sqlite_store.insert_or_replace(
            "access_tokens",
            "id",
            {"id": "at-1", "grant_id": "g1", "expires_at": 100, "payload": {"a": 1}},
        )
        await sqlite_store.insert_or_replace(
            "access_tokens",
            "id",
            {"id": "at-1", "payload": {"b": 2}},
        )

        row = await sqlite_store.select_one("access_tokens", "id", "at-1")
        assert row == {"id": "at-1", "grant_id": None, "expires_at": None, "payload": {"b": 2}}

    @pytest.mark.asyncio
    async def test_select_one_missing(self, sqlite_store):
        assert await sqlite_store.select_one("sessions", "uid", "nobody") is None

    @pytest.mark.asyncio
    async def test_update_by_key_reports_rowcount(self, sqlite_store):
        await sqlite_store.insert_or_replace("sessions", "id", {"id": "s1", "payload": {}})

        assert await sqlite_store.update_by_key("sessions", "id", "s1", {"payload": {"x": 1}}) == 1
        assert await sqlite_store.update_by_key("sessions", "id", "s2", {"payload": {}}) == 0

    @pytest.mark.asyncio
    async def test_delete_where(self, sqlite_store):
        for token_id, grant_id in (("a", "g1"), ("b", "g1"), ("c", "g2")):
            await sqlite_store.insert_or_replace(
                "refresh_tokens", "id", {"id": token_id, "grant_id": grant_id, "payload": {}}
            )

        assert await sqlite_store.delete_where("refresh_tokens", "grant_id", "g1") == 2
        assert await sqlite_store.select_one("refresh_tokens", "id", "c") is not None

    @pytest.mark.asyncio
    async def test_delete_expired_skips_rows_without_expiry(self, sqlite_store):
        rows = (("old", 10), ("new", 10_000), ("forever", None))
        for session_id, expires_at in rows:
            await sqlite_store.insert_or_replace(
                "sessions", "id", {"id": session_id, "expires_at": expires_at, "payload": {}}
            )

        assert await sqlite_store.delete_expired("sessions", 1_000) == 1
        assert await sqlite_store.select_one("sessions", "id", "forever") is not None

    @pytest.mark.asyncio
    async def test_select_one_live_at_skips_expired_rows(self, sqlite_store):
        for code_id, expires_at in (("dc-old", 10), ("dc-new", 5_000)):
            await sqlite_store.insert_or_replace(
                "device_codes",
                "id",
                {"id": code_id, "user_code": "ABCD", "expires_at": expires_at, "payload": {}},
            )

        row = await sqlite_store.select_one("device_codes", "user_code", "ABCD", live_at=1_000)
        assert row["id"] == "dc-new"

        row = await sqlite_store.select_one("device_codes", "user_code", "ABCD", live_at=5_000)
        assert row["id"] == "dc-new"

        assert await sqlite_store.select_one(
            "device_codes", "user_code", "ABCD", live_at=5_001
        ) is None

    @pytest.mark.asyncio
    async def test_delete_expired_restricted_to_column(self, sqlite_store):
        rows = (("a", "u1", 10), ("b", "u1", 10_000), ("c", "u2", 10))
        for session_id, uid, expires_at in rows:
            await sqlite_store.insert_or_replace(
                "sessions",
                "id",
                {"id": session_id, "uid": uid, "expires_at": expires_at, "payload": {}},
            )

        assert await sqlite_store.delete_expired("sessions", 1_000, "uid", "u1") == 1
        assert await sqlite_store.select_one("sessions", "id", "b") is not None
        assert await sqlite_store.select_one("sessions", "id", "c") is not None

    @pytest.mark.asyncio
    async def test_memory_database_is_shared_across_calls(self):
        store = SQLiteStore.from_path(":memory:")
        await store.initialize()
        try:
            await store.insert_or_replace("grants", "id", {"id": "g1", "payload": {}})
            assert await store.select_one("grants", "id", "g1") is not None
        finally:
            await store.close()


class TestPostgresStore:
    """Test PostgresStore statement construction."""

    @pytest.fixture
    def store(self):
        return PostgresStore.from_url("postgresql://u:p@localhost/idp")

    def _compile(self, stmt) -> str:
        return str(stmt.compile(dialect=pg_dialect.dialect()))

    def test_engine_uses_psycopg(self, store):
        assert store.dialect == "postgres"
        assert store.engine.url.drivername == "postgresql+psycopg"

    def test_upsert_compiles_to_on_conflict(self, store):
        table = store.metadata.tables["sessions"]
        sql = self._compile(store._upsert_statement(table, "id", {"id": "s1", "payload": {}}))

        assert "ON CONFLICT (id) DO UPDATE" in sql
        assert "expires_at = excluded.expires_at" in sql

    def test_client_upsert_keys_on_client_id(self, store):
        table = store.metadata.tables["clients"]
        values = {"client_id": "client-1", "client_secret": "s", "payload": {}}
        sql = self._compile(store._upsert_statement(table, "client_id", values))

        assert "INSERT INTO clients" in sql
        assert "ON CONFLICT (client_id) DO UPDATE" in sql
        assert "client_secret = excluded.client_secret" in sql
        assert "redirect_uris = excluded.redirect_uris" in sql
        assert "client_id = excluded.client_id" not in sql
