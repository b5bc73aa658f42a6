"""Extract token fields from an authorization redirect URL.

The provider answers the implicit-grant authorization request with a
redirect whose *fragment* carries the token::

    https://playvalorant.com/opt_in#access_token=eyJ...&expires_in=3600&token_type=Bearer
"""

from __future__ import annotations

from typing import Optional
from urllib.parse import parse_qs, urlparse

from riotauth.exceptions import MalformedRedirect
from riotauth.models import TokenPayload


def is_callback(url: Optional[str], callback_prefix: str) -> bool:
    """Return ``True`` if *url* points at the login callback."""
    return bool(url) and url.startswith(callback_prefix)  # type: ignore[union-attr]


def parse_token_fragment(url: Optional[str]) -> TokenPayload:
    """Parse ``access_token`` and ``expires_in`` out of *url*'s fragment.

    Raises:
        MalformedRedirect: If the URL is empty, has no fragment, or the
            fragment lacks either field or carries a non-positive lifetime.
    """
    if not url:
        raise MalformedRedirect("Redirect URL is empty")
    try:
        fragment = urlparse(url).fragment
    except ValueError as exc:
        raise MalformedRedirect(f"Bad redirect URL: {exc}") from exc
    if not fragment:
        raise MalformedRedirect("Redirect URL has no fragment")

    params = parse_qs(fragment)
    access_token = params.get("access_token", [""])[0]
    expires_in = params.get("expires_in", [""])[0]
    if not access_token:
        raise MalformedRedirect("Redirect fragment is missing 'access_token'")
    if not expires_in:
        raise MalformedRedirect("Redirect fragment is missing 'expires_in'")
    try:
        lifetime = int(expires_in)
    except ValueError:
        raise MalformedRedirect(
            f"Redirect fragment has a non-numeric 'expires_in': {expires_in!r}"
        ) from None
    if lifetime <= 0:
        raise MalformedRedirect(f"Redirect fragment has a non-positive 'expires_in': {lifetime}")
    return TokenPayload(access_token=access_token, expires_in=lifetime)
