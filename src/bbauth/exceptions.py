"""Exception hierarchy for bbauth.

All exceptions inherit from :class:`BbauthError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`bbauth.exit_codes`.
The entry point in :func:`bbauth.app.main` catches ``BbauthError`` and
exits with the appropriate code.

Subclass hierarchy::

    BbauthError (exit 1)
    +-- ConfigError            (exit 2)
    +-- AuthError              (exit 3)
        +-- TokenRefreshError  (exit 3)
        +-- AuthTimeoutError   (exit 3)

Filesystem errors other than a missing or unreadable-as-JSON token file are
not wrapped; they propagate as :class:`OSError`.
"""

from bbauth.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONFIG_ERROR,
    EXIT_GENERIC_FAILURE,
)


class BbauthError(Exception):
    """Base exception for all bbauth errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(BbauthError):
    """Raised when no auth strategy can be resolved from env vars or the token file."""

    exit_code = EXIT_CONFIG_ERROR


class AuthError(BbauthError):
    """Raised when the authorization-code grant fails (denied, bad response, bind failure)."""

    exit_code = EXIT_AUTH_FAILURE


class TokenRefreshError(AuthError):
    """Raised when a refresh-token grant fails.

    The OAuth provider catches this and falls back to a full browser
    authorization, so it never reaches callers of ``get_auth_header()``.
    """


class AuthTimeoutError(AuthError):
    """Raised when no callback reaches the loopback server before the deadline."""
