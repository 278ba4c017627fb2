"""Authorization capability, token persistence, and strategy resolution.

The main entry points are:

- :class:`AuthProvider` -- the single-operation capability every API call
  consumes.
- :class:`TokenStore` -- the on-disk OAuth token pair.
- :func:`resolve_auth` -- picks and constructs the provider for this process.

Typical usage::

    from bbauth.auth import resolve_auth

    auth = resolve_auth()
    headers = await auth.get_auth_header()
"""

from bbauth.auth.base import AuthHeader, AuthProvider
from bbauth.auth.resolver import resolve_auth
from bbauth.auth.token_store import TokenStore

__all__ = [
    "AuthHeader",
    "AuthProvider",
    "TokenStore",
    "resolve_auth",
]
