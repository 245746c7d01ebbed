"""Custom exceptions for the stubidp OIDC provider."""


class StubIdPError(Exception):
    """Base exception for all stubidp errors."""


# ========================================
# Configuration Exceptions
# ========================================


class ConfigurationError(StubIdPError):
    """Configuration validation failed."""


# ========================================
# Adapter Exceptions
# ========================================


class AdapterError(StubIdPError):
    """Base exception for storage adapter errors.

    Carries the model kind and adapter operation that failed, plus the
    underlying cause when one exists.
    """

    def __init__(
        self,
        message: str,
        *,
        model: str,
        operation: str,
        cause: BaseException | None = None,
    ) -> None:
        self.message = message
        self.model = model
        self.operation = operation
        self.cause = cause
        super().__init__(message)


class ValidationError(AdapterError):
    """Caller input was rejected before any storage access."""


class NotFoundError(AdapterError):
    """The row a mutation requires does not exist."""


class UnknownModelError(AdapterError):
    """Model name is not one of the supported kinds."""


class StorageError(AdapterError):
    """The backing store failed while reading, writing or deleting."""
