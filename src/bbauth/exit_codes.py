"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~bbauth.exceptions.BbauthError` subclass, so shell
wrappers can tell a missing configuration apart from a rejected login
without parsing stderr.

Example::

    $ bbauth auth login
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- the browser flow was denied or timed out
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_CONFIG_ERROR = 2
"""No usable auth strategy could be resolved from the environment or storage."""

EXIT_AUTH_FAILURE = 3
"""Authorization, code exchange, or token refresh failed."""
