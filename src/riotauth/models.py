"""Canonical Pydantic models shared across all riotauth modules.

The models fall into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`ProviderConfig`, :class:`RequestConfig`, :class:`OutputConfig`,
    and :class:`GlobalConfig`.

**Session models** -- produced and consumed by the token lifecycle:
    :class:`TokenPayload`, :class:`DerivedCredentials`, :class:`Credentials`,
    :class:`CookieRecord`, :class:`InteractiveLogin`, :class:`SilentStatus`
    and :class:`SilentOutcome`.

All models use Pydantic v2.
"""

from __future__ import annotations

import enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Configuration ---

DEFAULT_AUTHORIZE_URL = (
    "https://auth.riotgames.com/authorize"
    "?redirect_uri=https%3A%2F%2Fplayvalorant.com%2Fopt_in"
    "&client_id=play-valorant-web-prod"
    "&response_type=token%20id_token"
    "&nonce=1"
    "&scope=account%20openid"
)


class ProviderConfig(BaseModel):
    """Fixed endpoints and names of the identity provider.

    The defaults target Riot's production auth service.  They are exposed
    as configuration so a staging deployment or a test server can be
    substituted without code changes.
    """

    authorize_url: str = Field(
        default=DEFAULT_AUTHORIZE_URL,
        description="Authorization URL loaded by the login surface and replayed for silent re-auth",
    )
    callback_prefix: str = Field(
        default="https://playvalorant.com/opt_in",
        description="Redirect target whose fragment carries the token fields",
    )
    entitlement_url: str = Field(
        default="https://entitlements.auth.riotgames.com/api/token/v1",
        description="Endpoint exchanging an access token for an entitlement token",
    )
    userinfo_url: str = Field(
        default="https://auth.riotgames.com/userinfo",
        description="Endpoint returning the account's stable identifier",
    )
    auth_domain: str = Field(
        default="auth.riotgames.com",
        description="Cookie domain of the authentication service",
    )
    login_cookie_name: str = Field(
        default="ssid",
        description="Durable cookie whose presence allows silent re-authentication",
    )
    user_agent: str = Field(
        default="",
        description="User-Agent header sent to the provider",
    )


class RequestConfig(BaseModel):
    """HTTP timeouts used when talking to the provider."""

    timeout: float = Field(
        default=30.0, description="Timeout in seconds for the derivation lookups"
    )
    silent_timeout: float = Field(
        default=10.0,
        description="Timeout in seconds for the silent re-auth request; "
        "a timeout falls back to interactive login",
    )


class OutputConfig(BaseModel):
    """Default output settings for the CLI."""

    format: Literal["auto", "json", "plain", "rich"] = Field(
        default="auto", description="Record format when neither --json nor --plain is given"
    )
    color: Literal["auto", "always", "never"] = Field(
        default="auto", description="Colour policy when --no-color is not given"
    )


class GlobalConfig(BaseModel):
    """Top-level configuration stored in ``config.json``.

    Example::

        {
            "provider": {"login_cookie_name": "ssid"},
            "request": {"silent_timeout": 5.0},
            "expiry_margin_seconds": 300
        }
    """

    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    request: RequestConfig = Field(default_factory=RequestConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    expiry_margin_seconds: int = Field(
        default=300,
        ge=0,
        description="Seconds subtracted from the token lifetime when computing expiresAt",
    )
    store_path: Optional[str] = Field(
        default=None, description="Override for the credential store file"
    )


# --- Session ---


class TokenPayload(BaseModel):
    """Raw token fields extracted from an authorization redirect."""

    access_token: str = Field(min_length=1)
    expires_in: int = Field(gt=0, description="Token lifetime in seconds")


class DerivedCredentials(BaseModel):
    """The two credentials derived from a single access token."""

    entitlement_token: str
    user_id: str


class Credentials(BaseModel):
    """Snapshot of the credential set handed to callers.

    Frozen so that callers sharing one result cannot disturb each other.
    """

    model_config = ConfigDict(frozen=True)

    entitlement_token: str
    access_token: str
    user_id: str


class CookieRecord(BaseModel):
    """One HTTP cookie in the session jar.

    ``expiry`` is in milliseconds since the epoch; ``None`` marks a
    session-only cookie that must never be persisted.
    """

    model_config = ConfigDict(populate_by_name=True)

    domain: str
    path: str = "/"
    name: str
    value: str
    expiry: Optional[int] = None
    secure: bool = False
    http_only: bool = Field(default=False, alias="httpOnly")

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.domain, self.path, self.name)

    @property
    def is_durable(self) -> bool:
        return self.expiry is not None


class InteractiveLogin(BaseModel):
    """What a login surface hands back after reaching the callback."""

    payload: TokenPayload
    cookies: list[CookieRecord] = Field(default_factory=list)


class SilentStatus(str, enum.Enum):
    """Branches of a silent re-authentication attempt."""

    OK = "ok"
    FAILED = "failed"
    NO_VALID_COOKIE = "no_valid_cookie"


class SilentOutcome(BaseModel):
    """Result of a silent re-authentication attempt.

    Only ``OK`` carries a payload.  ``reason`` describes a ``FAILED``
    attempt for logging.
    """

    status: SilentStatus
    payload: Optional[TokenPayload] = None
    reason: Optional[str] = None

    @classmethod
    def ok(cls, payload: TokenPayload) -> SilentOutcome:
        return cls(status=SilentStatus.OK, payload=payload)

    @classmethod
    def failed(cls, reason: str) -> SilentOutcome:
        return cls(status=SilentStatus.FAILED, reason=reason)

    @classmethod
    def no_valid_cookie(cls) -> SilentOutcome:
        return cls(status=SilentStatus.NO_VALID_COOKIE)
