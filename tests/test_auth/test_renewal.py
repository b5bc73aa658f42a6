"""Tests for the silent-then-interactive renewal strategy."""

from __future__ import annotations

import httpx
import pytest

from conftest import (
    DAY_MS,
    NOW_MS,
    FakeClock,
    FakeLoginSurface,
    make_login_cookie,
    redirect_handler,
)
from riotauth.auth.jar import SessionJar
from riotauth.auth.renewal import RenewalStrategy
from riotauth.auth.silent import SilentReauthenticator
from riotauth.exceptions import LoginAbandoned, MalformedRedirect
from riotauth.models import CookieRecord, InteractiveLogin, ProviderConfig, TokenPayload


def _strategy(
    provider: ProviderConfig,
    login: FakeLoginSurface,
    location: str | None = "https://playvalorant.com/opt_in#access_token=silent&expires_in=3600",
    calls: list[httpx.Request] | None = None,
) -> RenewalStrategy:
    silent = SilentReauthenticator(
        provider,
        transport=httpx.MockTransport(redirect_handler(location, calls=calls)),
        clock=FakeClock(),
    )
    return RenewalStrategy(silent, login)


class TestRenewalStrategy:
    @pytest.mark.asyncio
    async def test_silent_success_skips_login(self, provider: ProviderConfig) -> None:
        login = FakeLoginSurface()
        jar = SessionJar([make_login_cookie(NOW_MS + DAY_MS)])

        payload = await _strategy(provider, login).renew(jar)

        assert payload.access_token == "silent"
        assert login.calls == 0

    @pytest.mark.asyncio
    async def test_no_cookie_goes_straight_to_login(self, provider: ProviderConfig) -> None:
        login = FakeLoginSurface()
        calls: list[httpx.Request] = []

        payload = await _strategy(provider, login, calls=calls).renew(SessionJar())

        assert payload.access_token == "tok1"
        assert login.calls == 1
        assert calls == []

    @pytest.mark.asyncio
    async def test_expired_cookie_never_attempts_silent(self, provider: ProviderConfig) -> None:
        login = FakeLoginSurface()
        calls: list[httpx.Request] = []
        jar = SessionJar([make_login_cookie(NOW_MS - DAY_MS)])

        await _strategy(provider, login, calls=calls).renew(jar)

        assert calls == []
        assert login.calls == 1

    @pytest.mark.asyncio
    async def test_malformed_silent_redirect_falls_back(self, provider: ProviderConfig) -> None:
        login = FakeLoginSurface()
        jar = SessionJar([make_login_cookie(NOW_MS + DAY_MS)])

        payload = await _strategy(
            provider, login, location="https://playvalorant.com/opt_in#error=login_required"
        ).renew(jar)

        assert payload.access_token == "tok1"
        assert login.calls == 1

    @pytest.mark.asyncio
    async def test_login_cookies_absorbed(self, provider: ProviderConfig) -> None:
        durable = make_login_cookie(NOW_MS + 30 * DAY_MS, value="fresh")
        session_only = CookieRecord(domain="auth.riotgames.com", name="tdid", value="x")
        login = FakeLoginSurface(
            [
                InteractiveLogin(
                    payload=TokenPayload(access_token="tok1", expires_in=3600),
                    cookies=[durable, session_only],
                )
            ]
        )
        jar = SessionJar()

        await _strategy(provider, login).renew(jar)

        assert [(c.name, c.value) for c in jar] == [("ssid", "fresh")]

    @pytest.mark.asyncio
    async def test_abandoned_login_propagates(self, provider: ProviderConfig) -> None:
        login = FakeLoginSurface([LoginAbandoned("window closed")])
        with pytest.raises(LoginAbandoned):
            await _strategy(provider, login).renew(SessionJar())

    @pytest.mark.asyncio
    async def test_malformed_login_callback_propagates(self, provider: ProviderConfig) -> None:
        login = FakeLoginSurface([MalformedRedirect("no fragment")])
        with pytest.raises(MalformedRedirect):
            await _strategy(provider, login).renew(SessionJar())
