"""Table layout shared by both dialects.

The dialect modules call :func:`build_metadata` with their JSON column type;
everything else about the tables is identical.
"""

from collections.abc import Callable

import sqlalchemy as sa
from sqlalchemy.types import TypeEngine

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "pk": "pk_%(table_name)s",
}

JsonType = Callable[[], TypeEngine]

GRANT_BOUND_TABLES = (
    "access_tokens",
    "authorization_codes",
    "refresh_tokens",
    "backchannel_authentication_requests",
)


def _expiring_table(
    metadata: sa.MetaData,
    name: str,
    json_type: JsonType,
    *lookup_columns: str,
) -> sa.Table:
    columns = [sa.Column(column, sa.Text, index=True) for column in lookup_columns]
    return sa.Table(
        name,
        metadata,
        sa.Column("id", sa.Text, primary_key=True),
        *columns,
        sa.Column("expires_at", sa.Integer, index=True),
        sa.Column("payload", json_type()),
    )


def build_metadata(json_type: JsonType) -> sa.MetaData:
    """Declare the eight model tables using ``json_type`` for JSON columns."""
    metadata = sa.MetaData(naming_convention=NAMING_CONVENTION)

    sa.Table(
        "clients",
        metadata,
        sa.Column("client_id", sa.Text, primary_key=True),
        sa.Column("client_secret", sa.Text),
        sa.Column("redirect_uris", json_type()),
        sa.Column("response_types", json_type()),
        sa.Column("grant_types", json_type()),
        sa.Column("token_endpoint_auth_method", sa.Text),
        sa.Column("client_name", sa.Text),
        sa.Column("logo_uri", sa.Text),
        sa.Column("policy_uri", sa.Text),
        sa.Column("tos_uri", sa.Text),
        sa.Column("initiate_login_uri", sa.Text),
        sa.Column("post_logout_redirect_uris", json_type()),
        sa.Column("id_token_signed_response_alg", sa.Text),
        sa.Column("userinfo_signed_response_alg", sa.Text),
        sa.Column("payload", json_type()),
    )

    _expiring_table(metadata, "sessions", json_type, "uid")
    for name in GRANT_BOUND_TABLES:
        _expiring_table(metadata, name, json_type, "grant_id")
    _expiring_table(metadata, "device_codes", json_type, "grant_id", "user_code")
    _expiring_table(metadata, "grants", json_type, "client_id", "account_id")

    return metadata
