"""Pydantic models for validating OIDC engine payloads.

Validation is optional: callers may check a payload before handing it to
``StorageAdapter.upsert``; the adapter itself never validates. Unknown keys
are allowed everywhere since the engine adds fields freely.
"""

from dataclasses import dataclass, field
from typing import Annotated, Any, Literal

from pydantic import AfterValidator, AnyUrl, BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from stubidp.models import ModelKind, resolve

ResponseType = Literal[
    "code",
    "token",
    "id_token",
    "code token",
    "code id_token",
    "token id_token",
    "code token id_token",
]

GrantType = Literal[
    "authorization_code",
    "implicit",
    "refresh_token",
    "client_credentials",
    "urn:ietf:params:oauth:grant-type:device_code",
    "urn:openid:params:grant-type:ciba",
]

TokenEndpointAuthMethod = Literal[
    "client_secret_basic",
    "client_secret_post",
    "client_secret_jwt",
    "private_key_jwt",
    "none",
]

_URL = TypeAdapter(AnyUrl)


def _check_url(value: str) -> str:
    try:
        _URL.validate_python(value)
    except PydanticValidationError:
        raise ValueError("Invalid URL") from None
    return value


# checked as a URL but kept exactly as written
Url = Annotated[str, AfterValidator(_check_url)]


class _Payload(BaseModel):
    model_config = ConfigDict(extra="allow")


class ClientPayloadModel(_Payload):
    """Client registration metadata."""

    client_id: str = Field(min_length=1)
    client_secret: str | None = None
    redirect_uris: list[Url] | None = None
    response_types: list[ResponseType] | None = None
    grant_types: list[GrantType] | None = None
    token_endpoint_auth_method: TokenEndpointAuthMethod | None = None
    client_name: str | None = None
    logo_uri: Url | None = None
    policy_uri: Url | None = None
    tos_uri: Url | None = None
    initiate_login_uri: Url | None = None
    post_logout_redirect_uris: list[Url] | None = None
    id_token_signed_response_alg: str | None = None
    userinfo_signed_response_alg: str | None = None


class SessionPayloadModel(_Payload):
    uid: str | None = None
    accountId: str | None = None
    loginTs: float | None = None
    acr: str | None = None
    amr: list[str] | None = None


class TokenPayloadModel(_Payload):
    """Access tokens, authorization codes, refresh tokens and CIBA requests."""

    accountId: str | None = None
    clientId: str | None = None
    grantId: str | None = None
    scope: str | None = None
    sid: str | None = None
    iat: float | None = None
    exp: float | None = None
    consumed: float | None = None


class DeviceCodePayloadModel(_Payload):
    userCode: str | None = None
    deviceCode: str | None = None
    clientId: str | None = None
    scope: str | None = None
    params: dict[str, Any] | None = None


class ScopeSet(BaseModel):
    scope: str | None = None


class GrantPayloadModel(_Payload):
    accountId: str | None = None
    clientId: str | None = None
    openid: ScopeSet | None = None
    resources: dict[str, str] | None = None
    rejected: ScopeSet | None = None


PAYLOAD_MODELS: dict[ModelKind, type[_Payload]] = {
    ModelKind.SESSION: SessionPayloadModel,
    ModelKind.ACCESS_TOKEN: TokenPayloadModel,
    ModelKind.AUTHORIZATION_CODE: TokenPayloadModel,
    ModelKind.REFRESH_TOKEN: TokenPayloadModel,
    ModelKind.DEVICE_CODE: DeviceCodePayloadModel,
    ModelKind.BACKCHANNEL_AUTHENTICATION_REQUEST: TokenPayloadModel,
    ModelKind.CLIENT: ClientPayloadModel,
    ModelKind.GRANT: GrantPayloadModel,
}


@dataclass
class FieldViolation:
    """One rejected field: dotted location and reason."""

    field: str
    message: str


@dataclass
class ValidationResult:
    success: bool
    data: dict[str, Any] | None = None
    errors: list[FieldViolation] = field(default_factory=list)


def _validate(model: type[_Payload], payload: Any) -> ValidationResult:
    try:
        parsed = model.model_validate(payload)
    except PydanticValidationError as e:
        errors = [
            FieldViolation(
                field=".".join(str(part) for part in error["loc"]) or "<root>",
                message=error["msg"],
            )
            for error in e.errors()
        ]
        return ValidationResult(success=False, errors=errors)
    return ValidationResult(success=True, data=parsed.model_dump(mode="json", exclude_unset=True))


def validate_payload(model_name: str, payload: Any) -> ValidationResult:
    """Validate ``payload`` against the schema for ``model_name``.

    Raises:
        UnknownModelError: ``model_name`` is not a known kind
    """
    return _validate(PAYLOAD_MODELS[resolve(model_name)], payload)


def validate_client_payload(payload: Any) -> ValidationResult:
    return _validate(ClientPayloadModel, payload)


def validate_session_payload(payload: Any) -> ValidationResult:
    return _validate(SessionPayloadModel, payload)


def validate_token_payload(payload: Any) -> ValidationResult:
    return _validate(TokenPayloadModel, payload)


def validate_device_code_payload(payload: Any) -> ValidationResult:
    return _validate(DeviceCodePayloadModel, payload)


def validate_grant_payload(payload: Any) -> ValidationResult:
    return _validate(GrantPayloadModel, payload)
