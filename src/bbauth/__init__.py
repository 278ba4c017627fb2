"""bbauth -- OAuth2 credential acquisition and refresh for Bitbucket Cloud clients.

This package resolves, acquires, persists, and renews the bearer credential
that every Bitbucket API call needs, so callers only ever ask for a header::

    from bbauth import resolve_auth

    auth = resolve_auth()
    headers = await auth.get_auth_header()
    # {"Authorization": "Bearer ..."}

Modules:
    auth: Provider interface, token store, and strategy resolver.
    providers: Bearer (static) and OAuth (authorization-code) providers.
    client: ``httpx.AsyncClient`` configuration for API calls.
    config: Environment variable names and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stderr diagnostics with Rich formatting.
"""

from bbauth.auth import AuthProvider, TokenStore, resolve_auth
from bbauth.config import resolve_auth_config

__version__ = "0.1.0"

__all__ = [
    "AuthProvider",
    "TokenStore",
    "resolve_auth",
    "resolve_auth_config",
]
