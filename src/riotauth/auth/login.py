"""Interactive login surfaces.

A login surface shows the provider's login UI and reports every redirect
the login page performs.  :class:`RedirectLoginSurface` watches those
redirects, and on the first one that reaches the callback URL it parses
the token fragment, harvests the durable cookies of the auth domain, and
closes the surface.  Running out of redirects before the callback means
the user abandoned the login.

:class:`BrowserLoginSurface` is the shipped implementation: it opens the
authorization URL in the user's web browser and asks them to paste the
URL they were redirected to.  The callback lives on the provider's own
domain, so a local callback server cannot capture it.

See Also:
    :class:`~riotauth.auth.renewal.RenewalStrategy` -- falls back to a login
    surface when silent re-authentication is not possible.
"""

from __future__ import annotations

import asyncio
import logging
import sys
import threading
import time
import webbrowser
from abc import ABC, abstractmethod
from typing import AsyncIterator, Callable, Optional

import typer

from riotauth.auth.fragment import is_callback, parse_token_fragment
from riotauth.exceptions import LoginAbandoned
from riotauth.models import CookieRecord, InteractiveLogin, ProviderConfig

logger = logging.getLogger(__name__)


class LoginSurface(ABC):
    """Abstract interactive login."""

    @abstractmethod
    async def perform_interactive_login(self) -> InteractiveLogin:
        """Run the login and return the token payload plus harvested cookies.

        Raises:
            LoginAbandoned: The user closed the surface before the callback.
            MalformedRedirect: The callback was reached but its fragment
                could not be parsed.
        """
        ...

    async def clear_session_cookies(self, domain: str) -> None:
        """Forget the surface's own cookies for *domain*.  Default: nothing to clear."""
        return None


class RedirectLoginSurface(LoginSurface):
    """Login surface driven by a stream of redirect targets.

    Subclasses provide :meth:`redirects`, :meth:`harvest_cookies` and
    :meth:`close`.

    Args:
        provider: Supplies ``callback_prefix`` and ``auth_domain``.
    """

    def __init__(self, provider: ProviderConfig) -> None:
        self._provider = provider

    @abstractmethod
    def redirects(self) -> AsyncIterator[str]:
        """Yield each URL the login page redirects to.  Ends when the surface is closed."""
        ...

    @abstractmethod
    async def harvest_cookies(self, domain: str) -> list[CookieRecord]:
        """Return the surface's cookies for *domain* and remove them from it."""
        ...

    async def close(self) -> None:
        return None

    async def perform_interactive_login(self) -> InteractiveLogin:
        try:
            async for url in self.redirects():
                logger.info("Login window redirecting...")
                if not is_callback(url, self._provider.callback_prefix):
                    continue
                logger.info("Redirecting to url with tokens")
                payload = parse_token_fragment(url)
                cookies = await self.harvest_cookies(self._provider.auth_domain)
                return InteractiveLogin(payload=payload, cookies=cookies)
        finally:
            await self.close()
        logger.info("Login window was closed")
        raise LoginAbandoned("Login window was closed before completing sign-in")


class BrowserLoginSurface(RedirectLoginSurface):
    """Open the system browser and read the callback URL from the terminal.

    After the callback URL the user may also paste the value of the login
    cookie.  A pasted cookie is stored with a lifetime of
    *cookie_lifetime_days* so later renewals can re-authenticate silently.

    Args:
        provider: Provider endpoints.
        prompt: Callable used to ask for input; defaults to :func:`typer.prompt`.
        open_browser: Callable opening a URL; defaults to :func:`webbrowser.open`.
        cookie_lifetime_days: Lifetime assigned to a pasted login cookie.

    Raises:
        LoginAbandoned: From :meth:`perform_interactive_login` if stdin is
            not a TTY, the user enters nothing, or input is interrupted.
    """

    def __init__(
        self,
        provider: ProviderConfig,
        prompt: Optional[Callable[..., str]] = None,
        open_browser: Optional[Callable[[str], object]] = None,
        cookie_lifetime_days: int = 30,
    ) -> None:
        super().__init__(provider)
        self._prompt = prompt or typer.prompt
        self._open_browser = open_browser or webbrowser.open
        self._cookie_lifetime_ms = cookie_lifetime_days * 24 * 60 * 60 * 1000
        self._pasted_cookies: list[CookieRecord] = []

    async def _ask(self, text: str) -> str:
        try:
            answer = await asyncio.to_thread(
                self._prompt, text, default="", show_default=False
            )
        except (EOFError, KeyboardInterrupt, typer.Abort):
            return ""
        return (answer or "").strip()

    async def redirects(self) -> AsyncIterator[str]:
        self._pasted_cookies = []
        if not sys.stdin.isatty():
            raise LoginAbandoned(
                "Interactive login requires an interactive terminal "
                "(stdin must be a TTY)"
            )

        url = self._provider.authorize_url
        threading.Thread(target=self._open_browser, args=(url,), daemon=True).start()
        typer.echo(f"Sign in using your browser: {url}", err=True)

        while True:
            redirect = await self._ask(
                "Paste the URL you were redirected to (empty to cancel)"
            )
            if not redirect:
                return
            if not is_callback(redirect, self._provider.callback_prefix):
                typer.echo(
                    f"That URL does not start with {self._provider.callback_prefix}",
                    err=True,
                )
                continue
            cookie_value = await self._ask(
                f"Paste the '{self._provider.login_cookie_name}' cookie to allow "
                "silent renewal (optional)"
            )
            if cookie_value:
                self._pasted_cookies = [
                    CookieRecord(
                        domain=self._provider.auth_domain,
                        path="/",
                        name=self._provider.login_cookie_name,
                        value=cookie_value,
                        expiry=int(time.time() * 1000) + self._cookie_lifetime_ms,
                        secure=True,
                        http_only=True,
                    )
                ]
            yield redirect

    async def harvest_cookies(self, domain: str) -> list[CookieRecord]:
        harvested = [c for c in self._pasted_cookies if c.domain == domain]
        self._pasted_cookies = []
        return harvested
