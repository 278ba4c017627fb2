"""Pydantic models shared across bbauth modules.

Two groups of models live here:

**Persisted / wire models**:
    :class:`StoredTokens` -- the credential record kept in the token file.
    :class:`TokenResponse` -- the JSON body returned by the token endpoint.

**Strategy models** -- produced by :func:`~bbauth.config.resolve_auth_config`
and consumed by :func:`~bbauth.auth.resolver.resolve_auth`:
    :class:`BearerAuthConfig` and :class:`OAuthAuthConfig`, joined in the
    :data:`AuthConfig` union.
"""

from __future__ import annotations

import time
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field


def now_ms() -> int:
    """Return the current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class StoredTokens(BaseModel):
    """A persisted OAuth2 token pair.

    Validation is strict: a mistyped field (for example ``expires_at`` stored
    as a string) is a schema failure, which the token store treats as "no
    stored credentials".

    Attributes:
        access_token: Bearer token presented on API calls.
        refresh_token: Long-lived token used to mint new access tokens.
        expires_at: Epoch milliseconds after which ``access_token`` must no
            longer be presented. Fixed at issuance, never re-derived.
    """

    model_config = ConfigDict(strict=True)

    access_token: str
    refresh_token: str
    expires_at: int = Field(description="Expiry instant in epoch milliseconds")

    def is_fresh(self, margin_ms: int = 0, now: int | None = None) -> bool:
        """Return ``True`` if the access token stays valid for at least *margin_ms*."""
        current = now_ms() if now is None else now
        return current + margin_ms < self.expires_at


class TokenResponse(BaseModel):
    """Token endpoint response for both the code exchange and refresh grants.

    Extra keys sent by the identity provider (``scopes``, ``state``) are
    ignored.
    """

    access_token: str
    refresh_token: str
    expires_in: float = Field(description="Lifetime of access_token in seconds")
    token_type: str

    def to_stored(self, issued_at: int | None = None) -> StoredTokens:
        """Convert to a :class:`StoredTokens`, anchoring expiry at *issued_at*."""
        issued = now_ms() if issued_at is None else issued_at
        return StoredTokens(
            access_token=self.access_token,
            refresh_token=self.refresh_token,
            expires_at=issued + int(self.expires_in * 1000),
        )


class BearerAuthConfig(BaseModel):
    """Static bearer token strategy."""

    type: Literal["bearer"] = "bearer"
    token: str


class OAuthAuthConfig(BaseModel):
    """OAuth2 authorization-code strategy backed by a Bitbucket OAuth consumer."""

    type: Literal["oauth"] = "oauth"
    client_id: str
    client_secret: str


AuthConfig = Union[BearerAuthConfig, OAuthAuthConfig]
