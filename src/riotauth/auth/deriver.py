"""Derive the entitlement token and the player UUID from an access token."""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from riotauth.exceptions import DerivationFailed
from riotauth.models import DerivedCredentials, ProviderConfig

logger = logging.getLogger(__name__)


class CredentialDeriver:
    """Present a fresh access token to the entitlement and user-info endpoints.

    Both lookups must succeed; the caller never sees one derived value
    without the other.

    Args:
        provider: Endpoint URLs.
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport (tests use :class:`httpx.MockTransport`).
    """

    def __init__(
        self,
        provider: ProviderConfig,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._provider = provider
        self._timeout = timeout
        self._transport = transport

    async def derive(self, access_token: str) -> DerivedCredentials:
        """Look up both derived credentials in sequence.

        Raises:
            DerivationFailed: On any transport error, non-2xx status,
                non-JSON body, or missing field.
        """
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            entitlement = await self._lookup(
                client, self._provider.entitlement_url, access_token, "entitlements_token"
            )
            user_id = await self._lookup(
                client, self._provider.userinfo_url, access_token, "sub"
            )
        return DerivedCredentials(entitlement_token=entitlement, user_id=user_id)

    async def _lookup(
        self,
        client: httpx.AsyncClient,
        url: str,
        access_token: str,
        field: str,
    ) -> str:
        try:
            response = await client.post(
                url,
                headers={
                    "Authorization": f"Bearer {access_token}",
                    "Content-Type": "application/json",
                    "User-Agent": self._provider.user_agent,
                },
            )
            response.raise_for_status()
            data: Any = response.json()
        except httpx.HTTPStatusError as exc:
            raise DerivationFailed(
                f"Lookup {url} failed with status {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise DerivationFailed(f"Lookup {url} failed: {exc!r}") from exc
        except ValueError as exc:
            raise DerivationFailed(f"Lookup {url} returned invalid JSON: {exc}") from exc

        value = data.get(field) if isinstance(data, dict) else None
        if not isinstance(value, str) or not value:
            raise DerivationFailed(f"Lookup {url} response missing '{field}' field")
        return value
