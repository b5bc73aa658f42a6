"""Shared test fixtures for riotauth.

Provides fake collaborators for the token lifecycle (login surface,
deriver, clock), httpx mock transports for the provider endpoints, an
isolated XDG environment, and output-state cleanup.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Callable, Optional

import httpx
import pytest

from riotauth.auth.login import LoginSurface
from riotauth.exceptions import DerivationFailed, LoginAbandoned
from riotauth.models import (
    CookieRecord,
    DerivedCredentials,
    InteractiveLogin,
    ProviderConfig,
    TokenPayload,
)
from riotauth.output import reset_output

NOW_MS = 1_700_000_000_000
"""Fixed "now" used by the fake clock."""

DAY_MS = 24 * 60 * 60 * 1000


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeClock:
    """Controllable epoch-milliseconds clock."""

    def __init__(self, now_ms: int = NOW_MS) -> None:
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms


class FakeLoginSurface(LoginSurface):
    """Login surface returning canned results.

    Args:
        results: Returned (or raised, for exceptions) one per call; the
            last one repeats.
        gate: Optional event every call waits on before answering.
    """

    def __init__(
        self,
        results: Optional[list[object]] = None,
        gate: Optional[asyncio.Event] = None,
    ) -> None:
        self._results = results or [
            InteractiveLogin(payload=TokenPayload(access_token="tok1", expires_in=3600))
        ]
        self._gate = gate
        self.calls = 0
        self.cleared_domains: list[str] = []

    async def perform_interactive_login(self) -> InteractiveLogin:
        self.calls += 1
        if self._gate is not None:
            await self._gate.wait()
        result = self._results[min(self.calls, len(self._results)) - 1]
        if isinstance(result, BaseException):
            raise result
        assert isinstance(result, InteractiveLogin)
        return result

    async def clear_session_cookies(self, domain: str) -> None:
        self.cleared_domains.append(domain)


class FakeDeriver:
    """Deriver returning canned values keyed by access token."""

    def __init__(
        self,
        values: Optional[dict[str, DerivedCredentials]] = None,
        fail: bool = False,
    ) -> None:
        self._values = values or {}
        self.fail = fail
        self.tokens: list[str] = []

    async def derive(self, access_token: str) -> DerivedCredentials:
        self.tokens.append(access_token)
        if self.fail:
            raise DerivationFailed("entitlement lookup failed with status 500")
        return self._values.get(
            access_token,
            DerivedCredentials(
                entitlement_token=access_token.replace("tok", "ent"),
                user_id=access_token.replace("tok", "u"),
            ),
        )


def make_login_cookie(
    expiry: int, name: str = "ssid", value: str = "ssid-value"
) -> CookieRecord:
    return CookieRecord(
        domain="auth.riotgames.com",
        path="/",
        name=name,
        value=value,
        expiry=expiry,
        secure=True,
        http_only=True,
    )


def redirect_handler(
    location: Optional[str],
    status_code: int = 303,
    calls: Optional[list[httpx.Request]] = None,
    set_cookie: Optional[str] = None,
) -> Callable[[httpx.Request], httpx.Response]:
    """Build a MockTransport handler answering the authorization URL."""

    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        headers: list[tuple[str, str]] = []
        if location is not None:
            headers.append(("location", location))
        if set_cookie is not None:
            headers.append(("set-cookie", set_cookie))
        return httpx.Response(status_code, headers=headers)

    return handler


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def provider() -> ProviderConfig:
    return ProviderConfig()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG dirs at *tmp_path* and clear RIOTAUTH_* variables."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("riotauth.config.platform.system", lambda: "Linux")
    for var in ["RIOTAUTH_CONFIG", "RIOTAUTH_STORE"]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path
