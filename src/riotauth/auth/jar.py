"""Session cookie jar with a versioned, durable-only serialisation.

The jar holds the cookies of the provider's authentication domain.  One of
them, the *login cookie* (``ssid`` for Riot), lets the authorization
endpoint issue a fresh token without any user interaction for as long as
it has not expired.

Serialised form (see :meth:`SessionJar.to_blob`)::

    {"version": 1,
     "cookies": [{"domain": "auth.riotgames.com", "path": "/", "name": "ssid",
                  "value": "...", "expiry": 1767225600000,
                  "secure": true, "httpOnly": true}]}

Session-only cookies (``expiry`` of ``None``) live in memory but are never
written to the blob.
"""

from __future__ import annotations

import json
import time
from typing import Any, Iterable, Optional
from urllib.parse import urlparse

import httpx

from riotauth.models import CookieRecord

BLOB_VERSION = 1


def _now_ms() -> int:
    return int(time.time() * 1000)


def _domain_matches(host: str, domain: str) -> bool:
    domain = domain.lstrip(".").lower()
    host = host.lower()
    return host == domain or host.endswith("." + domain)


def _path_matches(request_path: str, cookie_path: str) -> bool:
    if not cookie_path or cookie_path == "/":
        return True
    if request_path == cookie_path:
        return True
    prefix = cookie_path if cookie_path.endswith("/") else cookie_path + "/"
    return request_path.startswith(prefix)


class SessionJar:
    """Cookies keyed by ``(domain, path, name)``.

    Args:
        cookies: Initial cookies.  Later entries replace earlier ones with
            the same key.
    """

    def __init__(self, cookies: Iterable[CookieRecord] = ()) -> None:
        self._cookies: dict[tuple[str, str, str], CookieRecord] = {}
        for cookie in cookies:
            self.set_cookie(cookie)

    def __len__(self) -> int:
        return len(self._cookies)

    def __iter__(self):
        return iter(list(self._cookies.values()))

    def set_cookie(self, cookie: CookieRecord) -> None:
        self._cookies[cookie.key] = cookie

    def remove_cookie(self, domain: str, path: str, name: str) -> None:
        self._cookies.pop((domain, path, name), None)

    def clear(self) -> None:
        self._cookies.clear()

    def copy(self) -> SessionJar:
        return SessionJar(self._cookies.values())

    def get_cookies(self, url: str, now_ms: Optional[int] = None) -> list[CookieRecord]:
        """Return the unexpired cookies that would be sent to *url*."""
        now = _now_ms() if now_ms is None else now_ms
        parsed = urlparse(url)
        host = parsed.hostname or ""
        path = parsed.path or "/"
        is_https = parsed.scheme == "https"
        return [
            cookie
            for cookie in self._cookies.values()
            if _domain_matches(host, cookie.domain)
            and _path_matches(path, cookie.path)
            and (is_https or not cookie.secure)
            and (cookie.expiry is None or cookie.expiry > now)
        ]

    def has_login_cookie(
        self, url: str, name: str, now_ms: Optional[int] = None
    ) -> bool:
        """Return ``True`` if a durable cookie *name* for *url* expires in the future."""
        now = _now_ms() if now_ms is None else now_ms
        return any(
            cookie.name == name and cookie.expiry is not None and cookie.expiry > now
            for cookie in self.get_cookies(url, now_ms=now)
        )

    def absorb_login_cookies(self, cookies: Iterable[CookieRecord]) -> int:
        """Add the durable cookies harvested from an interactive login.

        Session-only cookies are discarded.

        Returns:
            The number of cookies stored.
        """
        stored = 0
        for cookie in cookies:
            if not cookie.is_durable:
                continue
            self.set_cookie(cookie)
            stored += 1
        return stored

    # ------------------------------------------------------------------
    # httpx bridge
    # ------------------------------------------------------------------

    def to_httpx(self, now_ms: Optional[int] = None) -> httpx.Cookies:
        """Build an :class:`httpx.Cookies` holding every unexpired cookie."""
        now = _now_ms() if now_ms is None else now_ms
        cookies = httpx.Cookies()
        for cookie in self._cookies.values():
            if cookie.expiry is not None and cookie.expiry <= now:
                continue
            cookies.set(cookie.name, cookie.value, domain=cookie.domain, path=cookie.path)
        return cookies

    def update_from_httpx(self, cookies: httpx.Cookies) -> None:
        """Merge cookies held by an httpx client back into the jar.

        Expiry and flags come from the response's ``Set-Cookie`` attributes;
        values set by :meth:`to_httpx` carry no expiry there, so an existing
        record keeps its own expiry when only the value is echoed back.
        A ``Domain=`` attribute is stored without its leading dot, so a
        refreshed cookie replaces the record it was sent from.
        """
        before = dict(self._cookies)
        for c in cookies.jar:
            domain = c.domain.lstrip(".")
            expiry = int(c.expires * 1000) if c.expires is not None else None
            sent = before.get((domain, c.path, c.name))
            if expiry is None and sent is not None and sent.value == c.value:
                continue
            self.set_cookie(
                CookieRecord(
                    domain=domain,
                    path=c.path,
                    name=c.name,
                    value=c.value or "",
                    expiry=expiry,
                    secure=bool(c.secure),
                    http_only=c.has_nonstandard_attr("HttpOnly"),
                )
            )

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------

    def to_blob(self) -> str:
        """Serialise the durable cookies to the versioned JSON blob."""
        data: dict[str, Any] = {
            "version": BLOB_VERSION,
            "cookies": [
                cookie.model_dump(mode="json", by_alias=True)
                for cookie in self._cookies.values()
                if cookie.is_durable
            ],
        }
        return json.dumps(data, separators=(",", ":"))

    @classmethod
    def from_blob(cls, blob: str) -> SessionJar:
        """Rebuild a jar from :meth:`to_blob` output.

        Raises:
            ValueError: If the blob is not valid JSON, has an unknown
                version, or contains malformed cookie entries.
        """
        data = json.loads(blob)
        if not isinstance(data, dict):
            raise ValueError("cookie blob is not a JSON object")
        version = data.get("version")
        if version != BLOB_VERSION:
            raise ValueError(f"unsupported cookie blob version: {version!r}")
        entries = data.get("cookies", [])
        if not isinstance(entries, list):
            raise ValueError("cookie blob 'cookies' is not a list")
        return cls(
            CookieRecord.model_validate(entry)
            for entry in entries
            if isinstance(entry, dict) and entry.get("expiry") is not None
        )
