"""OIDC engine configuration.

Builds the configuration mapping handed to the external OIDC engine: the
issuer, the single statically registered client, enabled features, and,
when persistence is configured, the adapter factory the engine calls once
per model kind.
"""

import logging
from collections.abc import Callable
from typing import Any

from stubidp.adapter import StorageAdapter
from stubidp.config import Settings, get_settings
from stubidp.core.exceptions import ConfigurationError
from stubidp.core.logging import configure_logging
from stubidp.database import create_store
from stubidp.database.base import RelationalStore

logger = logging.getLogger(__name__)

AdapterFactory = Callable[[str], StorageAdapter]


def create_adapter_factory(store: RelationalStore) -> AdapterFactory:
    """Return a factory producing one adapter per model name."""

    def adapter_factory(name: str) -> StorageAdapter:
        return StorageAdapter(store, name)

    return adapter_factory


def static_client(settings: Settings) -> dict[str, Any]:
    if not (settings.client_id and settings.client_secret and settings.redirect_uri):
        msg = "CLIENT_ID, CLIENT_SECRET and REDIRECT_URI are required"
        raise ConfigurationError(msg)
    return {
        "client_id": settings.client_id,
        "client_secret": settings.client_secret,
        "redirect_uris": [settings.redirect_uri],
        "response_types": ["code"],
        "grant_types": ["authorization_code"],
    }


def build_provider_configuration(
    settings: Settings,
    store: RelationalStore | None = None,
) -> dict[str, Any]:
    """Build the engine configuration.

    Without a store the ``adapter`` key is left out and the engine keeps
    its built-in in-memory storage.
    """
    configuration: dict[str, Any] = {
        "issuer": settings.oidc_issuer,
        "clients": [static_client(settings)],
        "features": {
            "devInteractions": {"enabled": True},
        },
    }

    if store is not None:
        configuration["adapter"] = create_adapter_factory(store)
        logger.info("Provider persistence enabled (dialect=%s)", store.dialect)
    else:
        logger.info("Provider persistence disabled; engine uses in-memory storage")

    return configuration


async def create_provider(
    settings: Settings | None = None,
) -> tuple[dict[str, Any], RelationalStore | None]:
    """Set up logging and storage from settings and build the engine configuration.

    The returned store (None without persistence) is already initialized;
    the caller closes it on shutdown.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    store = create_store(settings)
    if store is not None:
        await store.initialize()

    try:
        configuration = build_provider_configuration(settings, store)
    except ConfigurationError:
        if store is not None:
            await store.close()
        raise
    return configuration, store
