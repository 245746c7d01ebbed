"""Relational store package for OIDC model persistence.

Supports two backends: PostgreSQL and SQLite.
"""

from .base import RelationalStore
from .factory import create_store
from .store import PostgresStore, SQLiteStore

__all__ = [
    "PostgresStore",
    "RelationalStore",
    "SQLiteStore",
    "create_store",
]
