"""Tests for entitlement / user-id derivation."""

from __future__ import annotations

import httpx
import pytest

from riotauth.auth.deriver import CredentialDeriver
from riotauth.exceptions import DerivationFailed
from riotauth.models import ProviderConfig


def _handler(
    entitlement: httpx.Response | None = None,
    userinfo: httpx.Response | None = None,
    seen: list[httpx.Request] | None = None,
):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        if request.url.host == "entitlements.auth.riotgames.com":
            return entitlement or httpx.Response(200, json={"entitlements_token": "ent1"})
        if request.url.path == "/userinfo":
            return userinfo or httpx.Response(200, json={"sub": "u1", "country": "usa"})
        return httpx.Response(404)

    return handler


def _deriver(provider: ProviderConfig, handler) -> CredentialDeriver:
    return CredentialDeriver(provider, transport=httpx.MockTransport(handler))


class TestCredentialDeriver:
    @pytest.mark.asyncio
    async def test_derives_both(self, provider: ProviderConfig) -> None:
        seen: list[httpx.Request] = []
        derived = await _deriver(provider, _handler(seen=seen)).derive("tok1")

        assert derived.entitlement_token == "ent1"
        assert derived.user_id == "u1"
        assert [r.method for r in seen] == ["POST", "POST"]
        assert all(r.headers["authorization"] == "Bearer tok1" for r in seen)

    @pytest.mark.asyncio
    async def test_entitlement_failure(self, provider: ProviderConfig) -> None:
        handler = _handler(entitlement=httpx.Response(500))
        with pytest.raises(DerivationFailed, match="500"):
            await _deriver(provider, handler).derive("tok1")

    @pytest.mark.asyncio
    async def test_userinfo_failure_after_entitlement(self, provider: ProviderConfig) -> None:
        handler = _handler(userinfo=httpx.Response(401))
        with pytest.raises(DerivationFailed, match="401"):
            await _deriver(provider, handler).derive("tok1")

    @pytest.mark.asyncio
    async def test_missing_field(self, provider: ProviderConfig) -> None:
        handler = _handler(userinfo=httpx.Response(200, json={"country": "usa"}))
        with pytest.raises(DerivationFailed, match="'sub'"):
            await _deriver(provider, handler).derive("tok1")

    @pytest.mark.asyncio
    async def test_invalid_json(self, provider: ProviderConfig) -> None:
        handler = _handler(entitlement=httpx.Response(200, text="<html>"))
        with pytest.raises(DerivationFailed, match="invalid JSON"):
            await _deriver(provider, handler).derive("tok1")

    @pytest.mark.asyncio
    async def test_network_error(self, provider: ProviderConfig) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        with pytest.raises(DerivationFailed):
            await _deriver(provider, handler).derive("tok1")
