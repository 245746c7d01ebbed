"""Core functionality for the stubidp OIDC provider."""

from .exceptions import (
    AdapterError,
    ConfigurationError,
    NotFoundError,
    StorageError,
    StubIdPError,
    UnknownModelError,
    ValidationError,
)
from .logging import configure_logging, logger, request_id_ctx

__all__ = [
    "AdapterError",
    "ConfigurationError",
    "NotFoundError",
    "StorageError",
    "StubIdPError",
    "UnknownModelError",
    "ValidationError",
    "configure_logging",
    "logger",
    "request_id_ctx",
]
