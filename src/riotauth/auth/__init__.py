"""Token lifecycle for the Riot identity provider.

The main entry points are:

- :class:`TokenLifecycleManager` -- caches, persists and renews the
  credential set; coalesces concurrent renewals.
- :class:`AcquireContext` -- carries the persistence handle into
  :meth:`TokenLifecycleManager.acquire`.
- :class:`RenewalStrategy` -- silent re-auth with interactive fallback.
- :class:`CredentialDeriver` -- entitlement and user-id lookups.
- :class:`SessionJar` -- cookie jar with durable-only serialisation.

Typical usage::

    from riotauth.auth import AcquireContext, TokenLifecycleManager
    from riotauth.store import JsonFileStore

    manager = TokenLifecycleManager()
    creds = await manager.acquire(AcquireContext(store=JsonFileStore()))
"""

from riotauth.auth.deriver import CredentialDeriver
from riotauth.auth.fragment import parse_token_fragment
from riotauth.auth.jar import SessionJar
from riotauth.auth.login import BrowserLoginSurface, LoginSurface, RedirectLoginSurface
from riotauth.auth.manager import AcquireContext, TokenLifecycleManager
from riotauth.auth.renewal import RenewalStrategy
from riotauth.auth.silent import SilentReauthenticator

__all__ = [
    "AcquireContext",
    "BrowserLoginSurface",
    "CredentialDeriver",
    "LoginSurface",
    "RedirectLoginSurface",
    "RenewalStrategy",
    "SessionJar",
    "SilentReauthenticator",
    "TokenLifecycleManager",
    "parse_token_fragment",
]
