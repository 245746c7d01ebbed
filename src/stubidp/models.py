"""Registry of the model kinds persisted on behalf of the OIDC engine.

Each kind maps to one relational table. The definitions here are
dialect-neutral: they name tables and columns, and the store resolves the
names against the dialect's schema.
"""

from dataclasses import dataclass, field
from enum import Enum

from stubidp.core.exceptions import UnknownModelError


@dataclass(frozen=True)
class ModelDefinition:
    """Table layout facts the storage adapter needs for one kind."""

    table_name: str
    key_column: str = "id"
    expires: bool = True
    # payload key -> promoted column, copied at upsert time
    lookup_columns: dict[str, str] = field(default_factory=dict)
    # payload keys usable with find_by_secondary_key
    secondary_keys: frozenset[str] = frozenset()
    # column matched by revoke_by_grant_id, None when unsupported
    relation_column: str | None = None


_GRANT_BOUND = {"grantId": "grant_id"}


class ModelKind(str, Enum):
    """The eight model kinds the OIDC engine asks an adapter for."""

    SESSION = "Session"
    ACCESS_TOKEN = "AccessToken"
    AUTHORIZATION_CODE = "AuthorizationCode"
    REFRESH_TOKEN = "RefreshToken"
    DEVICE_CODE = "DeviceCode"
    BACKCHANNEL_AUTHENTICATION_REQUEST = "BackchannelAuthenticationRequest"
    CLIENT = "Client"
    GRANT = "Grant"

    @property
    def definition(self) -> ModelDefinition:
        return MODEL_DEFINITIONS[self]


MODEL_DEFINITIONS: dict[ModelKind, ModelDefinition] = {
    ModelKind.SESSION: ModelDefinition(
        table_name="sessions",
        lookup_columns={"uid": "uid"},
        secondary_keys=frozenset({"uid"}),
    ),
    ModelKind.ACCESS_TOKEN: ModelDefinition(
        table_name="access_tokens",
        lookup_columns=_GRANT_BOUND,
        relation_column="grant_id",
    ),
    ModelKind.AUTHORIZATION_CODE: ModelDefinition(
        table_name="authorization_codes",
        lookup_columns=_GRANT_BOUND,
        relation_column="grant_id",
    ),
    ModelKind.REFRESH_TOKEN: ModelDefinition(
        table_name="refresh_tokens",
        lookup_columns=_GRANT_BOUND,
        relation_column="grant_id",
    ),
    ModelKind.DEVICE_CODE: ModelDefinition(
        table_name="device_codes",
        lookup_columns={"grantId": "grant_id", "userCode": "user_code"},
        secondary_keys=frozenset({"userCode"}),
        relation_column="grant_id",
    ),
    ModelKind.BACKCHANNEL_AUTHENTICATION_REQUEST: ModelDefinition(
        table_name="backchannel_authentication_requests",
        lookup_columns=_GRANT_BOUND,
        relation_column="grant_id",
    ),
    ModelKind.CLIENT: ModelDefinition(
        table_name="clients",
        key_column="client_id",
        expires=False,
    ),
    ModelKind.GRANT: ModelDefinition(
        table_name="grants",
        lookup_columns={"clientId": "client_id", "accountId": "account_id"},
        # a grant is revoked together with everything bound to its id
        relation_column="id",
    ),
}


def resolve(name: str) -> ModelKind:
    """Return the model kind for ``name``.

    Raises:
        UnknownModelError: ``name`` is not one of the eight kinds.
    """
    try:
        return ModelKind(name)
    except ValueError:
        raise UnknownModelError(
            f"Unknown model: {name}",
            model=str(name),
            operation="resolve",
        ) from None
