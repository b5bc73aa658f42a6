"""Silent re-authentication by replaying the login cookie.

While the jar holds an unexpired login cookie, a plain GET of the
authorization URL (redirects *not* followed) answers with a redirect whose
``Location`` fragment carries a fresh access token.  Any failure is
reported as :attr:`~riotauth.models.SilentStatus.FAILED` rather than
raised, so the caller can fall back to interactive login with a plain
conditional.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

import httpx

from riotauth.auth.fragment import parse_token_fragment
from riotauth.auth.jar import SessionJar
from riotauth.exceptions import MalformedRedirect, SilentReauthFailed
from riotauth.models import ProviderConfig, SilentOutcome, TokenPayload

logger = logging.getLogger(__name__)


class SilentReauthenticator:
    """Replay the session cookies against the authorization endpoint.

    Args:
        provider: Provider endpoints and cookie names.
        timeout: Seconds before the request is abandoned.  A timeout counts
            as a failed attempt.
        transport: Optional httpx transport (tests use
            :class:`httpx.MockTransport`).
        clock: Returns the current time in epoch milliseconds.
    """

    def __init__(
        self,
        provider: ProviderConfig,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        self._provider = provider
        self._timeout = timeout
        self._transport = transport
        self._clock = clock or (lambda: int(time.time() * 1000))

    @property
    def auth_url(self) -> str:
        return f"https://{self._provider.auth_domain}/"

    def has_login_cookie(self, jar: SessionJar) -> bool:
        return jar.has_login_cookie(
            self.auth_url, self._provider.login_cookie_name, now_ms=self._clock()
        )

    async def attempt(self, jar: SessionJar) -> SilentOutcome:
        """Try to obtain a token without UI.

        Cookies set by the response are merged into *jar*.
        """
        if not self.has_login_cookie(jar):
            return SilentOutcome.no_valid_cookie()
        logger.info("Trying to re-auth with login cookie")
        try:
            payload = await self._replay(jar)
        except SilentReauthFailed as exc:
            return SilentOutcome.failed(str(exc))
        return SilentOutcome.ok(payload)

    async def _replay(self, jar: SessionJar) -> TokenPayload:
        async with httpx.AsyncClient(
            cookies=jar.to_httpx(now_ms=self._clock()),
            follow_redirects=False,
            timeout=self._timeout,
            transport=self._transport,
        ) as client:
            try:
                response = await client.get(
                    self._provider.authorize_url,
                    headers={"User-Agent": self._provider.user_agent},
                )
            except httpx.HTTPError as exc:
                raise SilentReauthFailed(f"Re-auth request failed: {exc!r}") from exc
            jar.update_from_httpx(client.cookies)

        if not response.is_redirect:
            raise SilentReauthFailed(
                f"Expected a redirect from the authorization endpoint, "
                f"got HTTP {response.status_code}"
            )
        location = response.headers.get("location")
        try:
            return parse_token_fragment(location)
        except MalformedRedirect as exc:
            raise SilentReauthFailed(str(exc)) from exc
