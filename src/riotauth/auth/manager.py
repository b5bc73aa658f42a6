"""Token lifecycle manager -- freshness checks and single-flight renewal.

:class:`TokenLifecycleManager` owns the credential set (access token,
entitlement token, player UUID, and their common expiry) and the session
jar.  :meth:`~TokenLifecycleManager.acquire` serves the cached set while
it is fresh and otherwise renews it:

1. :class:`~riotauth.auth.renewal.RenewalStrategy` produces a raw token
   (silent re-auth, falling back to interactive login).
2. :class:`~riotauth.auth.deriver.CredentialDeriver` derives the
   entitlement token and the UUID from it.
3. All five persisted keys are written as one group.
4. Only then is the in-memory state replaced.

Concurrent callers share one in-flight renewal and all observe its
outcome.  A failed renewal leaves memory and store exactly as they were
and surfaces as :class:`~riotauth.exceptions.AuthenticationFailed`.

The persisted record is read at most once per manager, on the first call;
afterwards the in-memory state is authoritative.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from riotauth.auth.deriver import CredentialDeriver
from riotauth.auth.jar import SessionJar
from riotauth.auth.login import BrowserLoginSurface, LoginSurface
from riotauth.auth.renewal import RenewalStrategy
from riotauth.auth.silent import SilentReauthenticator
from riotauth.exceptions import AuthenticationFailed, StoreError
from riotauth.models import Credentials, GlobalConfig
from riotauth.store.base import KeyValueStore

logger = logging.getLogger(__name__)

KEY_EXPIRES_AT = "expiresAt"
KEY_TOKEN = "token"
KEY_ENTITLEMENT = "entitlement"
KEY_USER_ID = "puuid"
KEY_COOKIES = "cookies"

PERSISTED_KEYS = (KEY_EXPIRES_AT, KEY_TOKEN, KEY_ENTITLEMENT, KEY_USER_ID, KEY_COOKIES)
"""Every key written by a renewal and removed by sign-out."""


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class AcquireContext:
    """Per-call context handed to :meth:`TokenLifecycleManager.acquire`."""

    store: KeyValueStore


class TokenLifecycleManager:
    """Stateful owner of one provider's credential set.

    Construct one per process and pass it explicitly to whoever needs
    credentials.

    Args:
        config: Provider endpoints, timeouts and expiry margin.
        login_surface: Interactive login; defaults to
            :class:`~riotauth.auth.login.BrowserLoginSurface`.
        renewal: Renewal strategy; defaults to silent re-auth backed by
            *login_surface*.
        deriver: Credential deriver; defaults to one built from *config*.
        clock: Returns the current time in epoch milliseconds.

    Example::

        manager = TokenLifecycleManager()
        creds = await manager.acquire(AcquireContext(store=JsonFileStore()))
    """

    def __init__(
        self,
        config: Optional[GlobalConfig] = None,
        login_surface: Optional[LoginSurface] = None,
        renewal: Optional[RenewalStrategy] = None,
        deriver: Optional[CredentialDeriver] = None,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        config = config or GlobalConfig()
        self._provider = config.provider
        self._margin_ms = config.expiry_margin_seconds * 1000
        self._clock = clock or _now_ms
        self._login_surface = login_surface or BrowserLoginSurface(config.provider)
        self._renewal = renewal or RenewalStrategy(
            SilentReauthenticator(
                config.provider, timeout=config.request.silent_timeout, clock=self._clock
            ),
            self._login_surface,
        )
        self._deriver = deriver or CredentialDeriver(
            config.provider, timeout=config.request.timeout
        )

        self.jar = SessionJar()
        self.expires_at = 0
        self.access_token: Optional[str] = None
        self.entitlement_token: Optional[str] = None
        self.user_id: Optional[str] = None

        self._loaded = False
        self._store: Optional[KeyValueStore] = None
        self._pending: Optional[asyncio.Task[Credentials]] = None
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def loaded(self) -> bool:
        """Whether the persisted record has been consulted."""
        return self._loaded

    @property
    def renewal_in_flight(self) -> bool:
        return self._pending is not None

    def is_fresh(self) -> bool:
        return self.expires_at > self._clock()

    async def acquire(self, context: AcquireContext) -> Credentials:
        """Return fresh credentials, renewing them if they have expired.

        Raises:
            AuthenticationFailed: The renewal failed at any step.  Every
                concurrent caller receives the same error.
            StoreError: The one-time load of the persisted record failed.
        """
        if self._loaded and self._pending is None and self.is_fresh():
            return self._snapshot()

        async with self._lock:
            if self._pending is None:
                task = asyncio.ensure_future(self._acquire_once(context))
                task.add_done_callback(self._settle)
                self._pending = task
            pending = self._pending
        return await asyncio.shield(pending)

    async def clear_account(self, context: Optional[AcquireContext] = None) -> None:
        """Sign out: forget cookies, the persisted record and the credential set.

        Store failures are logged and otherwise ignored.  Safe to call when
        nothing is stored.
        """
        logger.info("Clearing account")
        await self._login_surface.clear_session_cookies(self._provider.auth_domain)

        store = context.store if context is not None else self._store
        if store is not None:
            logger.info("Clearing saved store items")
            try:
                await store.remove_items(list(PERSISTED_KEYS))
            except StoreError as exc:
                logger.warning("Could not clear saved session: %s", exc)

        self.jar.clear()
        self.expires_at = 0
        self.access_token = None
        self.entitlement_token = None
        self.user_id = None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _settle(self, task: asyncio.Task[Credentials]) -> None:
        if self._pending is task:
            self._pending = None
        if not task.cancelled():
            # Mark the outcome as retrieved even when every waiter was cancelled.
            task.exception()

    def _snapshot(self) -> Credentials:
        if not (self.access_token and self.entitlement_token and self.user_id):
            raise AuthenticationFailed("Credential set is incomplete")
        return Credentials(
            entitlement_token=self.entitlement_token,
            access_token=self.access_token,
            user_id=self.user_id,
        )

    async def _acquire_once(self, context: AcquireContext) -> Credentials:
        if self._store is None:
            self._store = context.store
        if not self._loaded:
            await self._load(context.store)

        now = self._clock()
        if self.expires_at > now:
            return self._snapshot()

        logger.info("Token has expired")
        return await self._renew(context.store, now)

    async def _load(self, store: KeyValueStore) -> None:
        if self.expires_at != 0 or not await store.has_item(KEY_EXPIRES_AT):
            self._loaded = True
            return

        logger.info("Loading saved Riot data from store")
        raw_expires = await store.get_item(KEY_EXPIRES_AT)
        token = await store.get_item(KEY_TOKEN)
        entitlement = await store.get_item(KEY_ENTITLEMENT)
        user_id = await store.get_item(KEY_USER_ID)
        blob = await store.get_item(KEY_COOKIES)
        self._loaded = True

        try:
            expires_at = int(raw_expires or "")
            jar = SessionJar.from_blob(blob) if blob else SessionJar()
        except ValueError as exc:
            logger.warning("Ignoring unreadable saved session: %s", exc)
            return

        if not (token and entitlement and user_id):
            logger.warning("Saved session is incomplete; it will be renewed")
            expires_at = 0

        self.expires_at = expires_at
        self.access_token = token
        self.entitlement_token = entitlement
        self.user_id = user_id
        self.jar = jar

    async def _renew(self, store: KeyValueStore, now: int) -> Credentials:
        jar = self.jar.copy()
        try:
            payload = await self._renewal.renew(jar)
            logger.info("Loading entitlement and puuid")
            derived = await self._deriver.derive(payload.access_token)
            expires_at = now + payload.expires_in * 1000 - self._margin_ms
            await store.set_items(
                {
                    KEY_EXPIRES_AT: str(expires_at),
                    KEY_COOKIES: jar.to_blob(),
                    KEY_TOKEN: payload.access_token,
                    KEY_ENTITLEMENT: derived.entitlement_token,
                    KEY_USER_ID: derived.user_id,
                }
            )
        except Exception as exc:
            logger.error("Error while refreshing token: %s", exc, exc_info=True)
            raise AuthenticationFailed("Riot login failed") from exc

        self.jar = jar
        self.access_token = payload.access_token
        self.entitlement_token = derived.entitlement_token
        self.user_id = derived.user_id
        self.expires_at = expires_at
        return self._snapshot()
