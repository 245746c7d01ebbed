"""Row encoding for model payloads.

Most kinds store the engine's payload verbatim next to a few lookup columns
copied out of it. Clients are different: the well-known registration
fields get their own columns and only the unrecognised remainder is kept as
a payload map.
"""

from dataclasses import dataclass, field
from typing import Any

from stubidp.models import ModelDefinition, ModelKind

Payload = dict[str, Any]

CLIENT_FIELDS = (
    "client_secret",
    "redirect_uris",
    "response_types",
    "grant_types",
    "token_endpoint_auth_method",
    "client_name",
    "logo_uri",
    "policy_uri",
    "tos_uri",
    "initiate_login_uri",
    "post_logout_redirect_uris",
    "id_token_signed_response_alg",
    "userinfo_signed_response_alg",
)


@dataclass
class GenericPayload:
    """Payload stored as-is, with lookup columns copied out of it."""

    data: Payload

    def to_row(self, definition: ModelDefinition) -> dict[str, Any]:
        row: dict[str, Any] = {"payload": self.data}
        for key, column in definition.lookup_columns.items():
            value = self.data.get(key)
            row[column] = str(value) if value is not None else None
        return row

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "GenericPayload":
        return cls(dict(row.get("payload") or {}))

    def to_payload(self) -> Payload:
        return self.data


@dataclass
class ClientPayload:
    """Client metadata split into promoted columns and a residual map.

    A well-known field whose value is None stays in ``residual`` so the
    original payload can be rebuilt key for key.
    """

    client_id: str
    fields: dict[str, Any] = field(default_factory=dict)
    residual: Payload = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Payload) -> "ClientPayload":
        fields: dict[str, Any] = {}
        residual: Payload = {}
        for key, value in payload.items():
            if key == "client_id":
                continue
            if key in CLIENT_FIELDS and value is not None:
                fields[key] = value
            else:
                residual[key] = value
        return cls(client_id=payload.get("client_id", ""), fields=fields, residual=residual)

    def to_row(self) -> dict[str, Any]:
        row: dict[str, Any] = {"client_id": self.client_id}
        for name in CLIENT_FIELDS:
            row[name] = self.fields.get(name)
        row["payload"] = self.residual
        return row

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "ClientPayload":
        fields = {name: row[name] for name in CLIENT_FIELDS if row.get(name) is not None}
        return cls(
            client_id=row["client_id"],
            fields=fields,
            residual=dict(row.get("payload") or {}),
        )

    def to_payload(self) -> Payload:
        return {"client_id": self.client_id, **self.fields, **self.residual}


def encode(kind: ModelKind, payload: Payload) -> GenericPayload | ClientPayload:
    if kind is ModelKind.CLIENT:
        return ClientPayload.from_payload(payload)
    return GenericPayload(payload)


def decode(kind: ModelKind, row: dict[str, Any]) -> Payload:
    """Rebuild the engine-facing payload from a stored row."""
    if kind is ModelKind.CLIENT:
        return ClientPayload.from_row(row).to_payload()
    return GenericPayload.from_row(row).to_payload()
