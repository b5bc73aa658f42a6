"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~riotauth.exceptions.RiotAuthError` subclass.

Example::

    $ riotauth token
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- the session could not be renewed
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_AUTH_FAILURE = 3
"""Authentication failed: renewal, login, or credential derivation."""

EXIT_STORE_ERROR = 8
"""The credential store could not be read or written."""
