"""Session commands -- acquire, inspect and clear the stored session.

Typical workflow::

    riotauth token          # sign in (or reuse the saved session) and print credentials
    riotauth status         # show what is saved, without touching the network
    riotauth logout         # forget everything
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any, Optional

import typer

from riotauth.exceptions import RiotAuthError
from riotauth.output import error, format_record, info, success, suggest


def _iso(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).isoformat()


def _open_store(ctx: typer.Context) -> tuple[Any, Any]:
    from riotauth.config import load_global_config, resolve_store_path
    from riotauth.store import JsonFileStore

    obj = ctx.obj or {}
    try:
        config = load_global_config()
    except RiotAuthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    return config, JsonFileStore(resolve_store_path(obj.get("store"), config))


def token_command(ctx: typer.Context) -> None:
    """Print valid credentials, signing in or renewing first if needed.

    Example::

        riotauth token
        riotauth --json token
    """
    from riotauth.auth import AcquireContext, TokenLifecycleManager

    config, store = _open_store(ctx)
    manager = TokenLifecycleManager(config)

    try:
        creds = asyncio.run(manager.acquire(AcquireContext(store=store)))
    except RiotAuthError as exc:
        error(str(exc))
        if exc.__cause__ is not None:
            info(f"Cause: {exc.__cause__}")
        raise typer.Exit(code=exc.exit_code) from None

    format_record(
        {
            "access_token": creds.access_token,
            "entitlement_token": creds.entitlement_token,
            "user_id": creds.user_id,
            "expires_at": _iso(manager.expires_at),
        },
        title="Riot credentials",
    )


def status_command(ctx: typer.Context) -> None:
    """Show the saved session without contacting the provider.

    Example::

        riotauth status
    """
    from riotauth.auth import SessionJar
    from riotauth.auth.manager import KEY_COOKIES, KEY_EXPIRES_AT, KEY_USER_ID
    from riotauth.auth.silent import SilentReauthenticator

    config, store = _open_store(ctx)

    async def _read() -> dict[str, Optional[str]]:
        return {
            KEY_EXPIRES_AT: await store.get_item(KEY_EXPIRES_AT),
            KEY_USER_ID: await store.get_item(KEY_USER_ID),
            KEY_COOKIES: await store.get_item(KEY_COOKIES),
        }

    try:
        saved = asyncio.run(_read())
    except RiotAuthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    if saved[KEY_EXPIRES_AT] is None:
        info(f"No saved session in {store.path}")
        suggest("Sign in: riotauth token")
        return

    now_ms = int(datetime.now(timezone.utc).timestamp() * 1000)
    record: dict[str, Any] = {"store": str(store.path), "user_id": saved[KEY_USER_ID]}
    try:
        expires_at = int(saved[KEY_EXPIRES_AT] or "")
        record["expires_at"] = _iso(expires_at)
        record["fresh"] = expires_at > now_ms
    except ValueError:
        record["expires_at"] = None
        record["fresh"] = False

    try:
        jar = SessionJar.from_blob(saved[KEY_COOKIES]) if saved[KEY_COOKIES] else SessionJar()
        record["silent_renewal"] = SilentReauthenticator(config.provider).has_login_cookie(jar)
    except ValueError:
        record["silent_renewal"] = False

    format_record(record, title="Saved session")


def logout_command(ctx: typer.Context) -> None:
    """Forget the saved session and all cookies.

    Asks for confirmation unless ``--force`` is active.  Running it with
    nothing saved is harmless.

    Example::

        riotauth logout --force
    """
    from riotauth.auth import AcquireContext, TokenLifecycleManager

    force = ctx.obj.get("force", False) if ctx.obj else False
    if not force:
        confirmed = typer.confirm("Sign out and delete the saved session?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    config, store = _open_store(ctx)
    manager = TokenLifecycleManager(config)
    asyncio.run(manager.clear_account(AcquireContext(store=store)))
    success("Signed out.")
