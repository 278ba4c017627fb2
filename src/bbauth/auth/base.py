"""Abstract base class for authorization providers.

An :class:`AuthProvider` is the one capability the rest of a Bitbucket
client sees: a coroutine that yields the ``Authorization`` header for the
next request. Whether that header comes from a static token or from a
cached, refreshed, or freshly authorized OAuth token pair is the
provider's business.

See Also:
    :mod:`bbauth.providers.bearer` and :mod:`bbauth.providers.oauth` for
    the concrete strategies.
    :func:`bbauth.auth.resolver.resolve_auth` for picking one.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

AuthHeader = dict[str, str]


class AuthProvider(ABC):
    """Produces the ``Authorization`` header for Bitbucket API calls.

    Providers are created once per process by
    :func:`~bbauth.auth.resolver.resolve_auth` and kept for the process's
    lifetime. They expose no other observable state.
    """

    @abstractmethod
    async def get_auth_header(self) -> AuthHeader:
        """Return ``{"Authorization": "Bearer <token>"}`` for the next request.

        Raises:
            AuthError: If a valid token cannot be obtained.
        """
        ...
