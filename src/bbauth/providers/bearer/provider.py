"""Bearer token provider.

Wraps a token that is already available (``BITBUCKET_TOKEN`` or a stored
access token that has not expired). It never performs token exchange,
refresh, or I/O; for acquisition see :mod:`bbauth.providers.oauth`.
"""

from __future__ import annotations

from bbauth.auth.base import AuthHeader, AuthProvider


class BearerAuthProvider(AuthProvider):
    """Always returns ``Authorization: Bearer <token>`` for the given token."""

    def __init__(self, token: str) -> None:
        self._token = token

    async def get_auth_header(self) -> AuthHeader:
        return {"Authorization": f"Bearer {self._token}"}
