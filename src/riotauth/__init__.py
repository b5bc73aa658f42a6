"""riotauth -- keep a Riot Games session alive across process restarts.

This package manages the lifecycle of a Riot authentication session: it
acquires a short-lived access token, derives the entitlement token and the
player UUID from it, caches all three alongside their expiration, persists
them to disk, and renews them transparently when they expire.  Concurrent
callers share a single in-flight renewal.

Typical usage::

    from riotauth.auth import AcquireContext, TokenLifecycleManager
    from riotauth.store import JsonFileStore

    manager = TokenLifecycleManager()
    creds = await manager.acquire(AcquireContext(store=JsonFileStore()))
    creds.access_token, creds.entitlement_token, creds.user_id

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the package.
    config: XDG-aware configuration loading and saving.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting with Rich support.
"""

__version__ = "0.1.0"
