"""stubidp: minimal OpenID-Connect provider wrapper with relational persistence."""

from stubidp.adapter import StorageAdapter
from stubidp.models import ModelKind, resolve
from stubidp.provider import build_provider_configuration, create_provider

__all__ = [
    "ModelKind",
    "StorageAdapter",
    "build_provider_configuration",
    "create_provider",
    "resolve",
]
