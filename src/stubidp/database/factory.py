"""
Factory for creating the relational store selected by configuration.
"""

import logging

from stubidp.config import Settings
from stubidp.core.exceptions import ConfigurationError

from .base import RelationalStore
from .store import PostgresStore, SQLiteStore

logger = logging.getLogger(__name__)


def create_store(settings: Settings) -> RelationalStore | None:
    """
    Create the store for the configured dialect.

    Args:
        settings: Application settings

    Returns:
        The dialect's store, or None when no dialect is configured and the
        OIDC engine should keep its in-memory storage
    """
    dialect = settings.database_dialect
    if dialect is None:
        return None

    if not settings.database_url:
        msg = f"DATABASE_URL is required for {dialect}"
        raise ConfigurationError(msg)

    logger.info("Initializing database connection (dialect=%s)", dialect)
    if dialect == "postgres":
        return PostgresStore.from_url(settings.database_url)
    if dialect == "sqlite":
        return SQLiteStore.from_path(settings.database_url)

    msg = f"Unsupported database dialect: {dialect}"
    raise ConfigurationError(msg)
