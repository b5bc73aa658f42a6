"""Exception hierarchy for riotauth.

All exceptions inherit from :class:`RiotAuthError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`riotauth.exit_codes`.
The top-level error handler in :func:`riotauth.app.main` catches
``RiotAuthError`` and exits with the appropriate code.

Subclass hierarchy::

    RiotAuthError (exit 1)
    +-- AuthenticationFailed (exit 3)
    +-- MalformedRedirect    (exit 3)
    +-- SilentReauthFailed   (exit 3)
    +-- LoginAbandoned       (exit 3)
    +-- DerivationFailed     (exit 3)
    +-- StoreError           (exit 8)
    +-- ConfigError          (exit 1)

Only :class:`AuthenticationFailed` escapes
:meth:`~riotauth.auth.manager.TokenLifecycleManager.acquire` when a renewal
fails.  The more specific kinds are raised by the renewal steps and end up
as its ``__cause__``.
"""

from riotauth.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_GENERIC_FAILURE,
    EXIT_STORE_ERROR,
)


class RiotAuthError(Exception):
    """Base exception for all riotauth errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class AuthenticationFailed(RiotAuthError):
    """Raised to every caller waiting on a renewal that failed at any step."""

    exit_code = EXIT_AUTH_FAILURE


class MalformedRedirect(RiotAuthError):
    """Raised when a redirect URL lacks the expected token fields in its fragment."""

    exit_code = EXIT_AUTH_FAILURE


class SilentReauthFailed(RiotAuthError):
    """Raised when replaying the login cookie did not yield a usable redirect."""

    exit_code = EXIT_AUTH_FAILURE


class LoginAbandoned(RiotAuthError):
    """Raised when the interactive login was closed before reaching the callback."""

    exit_code = EXIT_AUTH_FAILURE


class DerivationFailed(RiotAuthError):
    """Raised when the entitlement or user-info lookup fails for a fresh token."""

    exit_code = EXIT_AUTH_FAILURE


class StoreError(RiotAuthError):
    """Raised when the persistence backend cannot be read or written."""

    exit_code = EXIT_STORE_ERROR


class ConfigError(RiotAuthError):
    """Raised for configuration problems (invalid JSON, failed validation)."""

    exit_code = EXIT_GENERIC_FAILURE
