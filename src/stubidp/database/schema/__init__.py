"""Relational schema for the eight model tables, one variant per dialect."""

import sqlalchemy as sa

from . import postgresql, sqlite

SCHEMAS: dict[str, sa.MetaData] = {
    "postgres": postgresql.metadata,
    "sqlite": sqlite.metadata,
}


def get_metadata(dialect: str) -> sa.MetaData:
    return SCHEMAS[dialect]


__all__ = ["SCHEMAS", "get_metadata"]
