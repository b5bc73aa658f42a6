"""Renewal strategy: silent re-authentication first, interactive login second."""

from __future__ import annotations

import logging

from riotauth.auth.jar import SessionJar
from riotauth.auth.login import LoginSurface
from riotauth.auth.silent import SilentReauthenticator
from riotauth.models import SilentStatus, TokenPayload

logger = logging.getLogger(__name__)


class RenewalStrategy:
    """Obtain a fresh raw token payload.

    A valid login cookie in the jar enables a silent attempt.  Whatever the
    reason it does not produce a token, the login surface is shown instead
    and the durable cookies it yields are added to the jar.

    Args:
        silent: Performs the cookie replay.
        login_surface: Shows the interactive login.
    """

    def __init__(self, silent: SilentReauthenticator, login_surface: LoginSurface) -> None:
        self._silent = silent
        self._login_surface = login_surface

    async def renew(self, jar: SessionJar) -> TokenPayload:
        """Return a fresh payload, mutating *jar* with any new cookies.

        Raises:
            LoginAbandoned: The interactive login was closed early.
            MalformedRedirect: The login callback carried no usable token.
        """
        outcome = await self._silent.attempt(jar)
        if outcome.status is SilentStatus.OK and outcome.payload is not None:
            return outcome.payload

        if outcome.status is SilentStatus.FAILED:
            logger.warning("Silent re-auth failed, falling back to login: %s", outcome.reason)
        logger.info("Requesting login")
        login = await self._login_surface.perform_interactive_login()
        stored = jar.absorb_login_cookies(login.cookies)
        logger.debug("Stored %d durable cookies from login", stored)
        return login.payload
