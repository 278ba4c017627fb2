"""Strategy dispatch: turn a resolved auth config into a provider.

:func:`resolve_auth` is the factory collaborators call once at startup. It
accepts an explicit :data:`~bbauth.models.AuthConfig` (useful for tests and
embedding) or falls back to :func:`~bbauth.config.resolve_auth_config`.
"""

from __future__ import annotations

from typing import Optional

from bbauth.auth.base import AuthProvider
from bbauth.auth.token_store import TokenStore
from bbauth.config import resolve_auth_config
from bbauth.models import AuthConfig, BearerAuthConfig


def resolve_auth(
    config: Optional[AuthConfig] = None,
    store: Optional[TokenStore] = None,
) -> AuthProvider:
    """Create the provider for *config*, resolving it from the environment if omitted.

    Args:
        config: Strategy to build. ``None`` means resolve from env vars and
            the token file.
        store: Token store handed to the OAuth provider and consulted during
            resolution. Defaults to the standard token file.

    Returns:
        A :class:`~bbauth.providers.bearer.BearerAuthProvider` or
        :class:`~bbauth.providers.oauth.OAuthProvider`.

    Raises:
        ConfigError: If *config* is ``None`` and nothing is configured.
    """
    from bbauth.providers.bearer import BearerAuthProvider
    from bbauth.providers.oauth import OAuthProvider

    store = store or TokenStore()
    resolved = config if config is not None else resolve_auth_config(store.path)

    if isinstance(resolved, BearerAuthConfig):
        return BearerAuthProvider(resolved.token)
    return OAuthProvider(resolved.client_id, resolved.client_secret, store=store)
