"""
SQLAlchemy implementations of the RelationalStore protocol.

Both dialects share one Core implementation. They differ only in the
dialect ``insert`` construct used for upserts, the JSON column type
declared by their schema, and how the engine is bootstrapped.
"""

import logging
from typing import Any

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from .schema import get_metadata

logger = logging.getLogger(__name__)


def normalize_postgres_url(url: str) -> str:
    """Point a PostgreSQL URL at the async psycopg driver."""
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


def normalize_sqlite_url(path: str) -> str:
    """Turn a database file path into an aiosqlite URL."""
    if path.startswith("sqlite+"):
        return path
    if path.startswith("sqlite://"):
        return path.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return f"sqlite+aiosqlite:///{path}"


class SQLAlchemyStore:
    """Shared SQLAlchemy Core implementation of RelationalStore."""

    dialect: str = ""

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self.metadata = get_metadata(self.dialect)

    def _insert(self, table: sa.Table):
        raise NotImplementedError

    def _table(self, name: str) -> sa.Table:
        return self.metadata.tables[name]

    async def initialize(self) -> None:
        """Create tables and indexes if they don't exist"""
        async with self.engine.begin() as conn:
            await conn.run_sync(self.metadata.create_all)
        logger.info("Initialized %s schema (%d tables)", self.dialect, len(self.metadata.tables))

    async def close(self) -> None:
        await self.engine.dispose()

    def _upsert_statement(self, tbl: sa.Table, key_column: str, values: dict[str, Any]):
        stmt = self._insert(tbl).values(**values)
        # every non-key column is overwritten, including ones left out of values
        overwrite = {
            column.name: stmt.excluded[column.name]
            for column in tbl.columns
            if column.name != key_column
        }
        return stmt.on_conflict_do_update(
            index_elements=[tbl.c[key_column]],
            set_=overwrite,
        )

    async def insert_or_replace(
        self,
        table: str,
        key_column: str,
        values: dict[str, Any],
    ) -> None:
        stmt = self._upsert_statement(self._table(table), key_column, values)
        async with self.engine.begin() as conn:
            await conn.execute(stmt)

    async def select_one(
        self,
        table: str,
        column: str,
        value: Any,
        live_at: int | None = None,
    ) -> dict[str, Any] | None:
        tbl = self._table(table)
        stmt = sa.select(tbl).where(tbl.c[column] == value)
        if live_at is not None:
            stmt = stmt.where(
                sa.or_(tbl.c.expires_at.is_(None), tbl.c.expires_at >= live_at)
            )
        stmt = stmt.limit(1)
        async with self.engine.connect() as conn:
            result = await conn.execute(stmt)
            row = result.mappings().first()
        return dict(row) if row is not None else None

    async def update_by_key(
        self,
        table: str,
        key_column: str,
        key: Any,
        values: dict[str, Any],
    ) -> int:
        tbl = self._table(table)
        stmt = sa.update(tbl).where(tbl.c[key_column] == key).values(**values)
        async with self.engine.begin() as conn:
            result = await conn.execute(stmt)
            return result.rowcount

    async def delete_where(self, table: str, column: str, value: Any) -> int:
        tbl = self._table(table)
        stmt = sa.delete(tbl).where(tbl.c[column] == value)
        async with self.engine.begin() as conn:
            result = await conn.execute(stmt)
            return result.rowcount

    async def delete_expired(
        self,
        table: str,
        now: int,
        column: str | None = None,
        value: Any = None,
    ) -> int:
        tbl = self._table(table)
        stmt = sa.delete(tbl).where(
            tbl.c.expires_at.is_not(None),
            tbl.c.expires_at < now,
        )
        if column is not None:
            stmt = stmt.where(tbl.c[column] == value)
        async with self.engine.begin() as conn:
            result = await conn.execute(stmt)
            return result.rowcount


class PostgresStore(SQLAlchemyStore):
    """PostgreSQL store using JSONB payload columns."""

    dialect = "postgres"

    def _insert(self, table: sa.Table):
        return postgresql.insert(table)

    @classmethod
    def from_url(cls, url: str) -> "PostgresStore":
        engine = create_async_engine(normalize_postgres_url(url), pool_pre_ping=True)
        logger.info("Connecting to PostgreSQL database")
        return cls(engine)


class SQLiteStore(SQLAlchemyStore):
    """Embedded SQLite store using JSON-as-text payload columns."""

    dialect = "sqlite"

    def _insert(self, table: sa.Table):
        return sqlite.insert(table)

    @classmethod
    def from_path(cls, path: str) -> "SQLiteStore":
        url = normalize_sqlite_url(path)
        if url.endswith(":memory:"):
            # a single shared connection, otherwise each checkout sees an empty database
            engine = create_async_engine(url, poolclass=StaticPool)
        else:
            engine = create_async_engine(url)
        logger.info("Connecting to SQLite database at %s", path)
        return cls(engine)
