"""OAuth2 authorization-code provider for Bitbucket Cloud.

This module provides :class:`OAuthProvider`, the dynamic
:class:`~bbauth.auth.base.AuthProvider`. Each call to
:meth:`~OAuthProvider.get_auth_header` runs the same decision sequence:

1. Return the cached access token if it is valid for at least another
   60 seconds.
2. Otherwise, if a refresh token is cached, try the ``refresh_token``
   grant. Any refresh failure is logged and ignored.
3. Otherwise (or after a failed refresh), run the full authorization-code
   flow: print the authorize URL, best-effort open a browser, wait on the
   loopback :class:`~bbauth.providers.oauth.callback_server.CallbackServer`,
   and exchange the code.

Successful refreshes and exchanges are persisted through
:class:`~bbauth.auth.token_store.TokenStore`. Token endpoint calls use
HTTP Basic auth built from the consumer key and secret.

See Also:
    :class:`bbauth.auth.base.AuthProvider` for the interface.
"""

from __future__ import annotations

import asyncio
import base64
import logging
import threading
import webbrowser
from typing import Any, Optional
from urllib.parse import urlencode

import httpx
from pydantic import ValidationError

from bbauth.auth.base import AuthHeader, AuthProvider
from bbauth.auth.token_store import TokenStore
from bbauth.config import (
    AUTHORIZE_TIMEOUT,
    AUTHORIZE_URL,
    CALLBACK_PORT,
    EXPIRY_MARGIN_MS,
    TOKEN_URL,
    redirect_uri,
)
from bbauth.exceptions import AuthError, TokenRefreshError
from bbauth.models import StoredTokens, TokenResponse
from bbauth.output import info, warning
from bbauth.providers.oauth.callback_server import CallbackServer

logger = logging.getLogger(__name__)


def basic_auth_header(client_id: str, client_secret: str) -> str:
    """Return the ``Basic`` credential for ``client_id:client_secret``."""
    raw = f"{client_id}:{client_secret}".encode("utf-8")
    return "Basic " + base64.b64encode(raw).decode("ascii")


def _open_browser(url: str) -> None:
    try:
        webbrowser.open(url)
    except Exception as exc:  # noqa: BLE001
        logger.debug("Could not open a browser: %s", exc)


class OAuthProvider(AuthProvider):
    """Authenticate via the OAuth2 authorization-code grant.

    The provider owns its cached token pair. It is seeded from the token
    store at construction and replaced after every successful refresh or
    authorization.

    Args:
        client_id: OAuth consumer key.
        client_secret: OAuth consumer secret.
        store: Where tokens are loaded from and saved to.
        callback_port: Loopback port. Must match the consumer's callback URL.
        authorize_timeout: Seconds to wait for the browser callback.
        transport: Optional ``httpx`` transport for the token endpoint calls.
        open_browser: Whether to try launching a browser for the authorize URL.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        *,
        store: Optional[TokenStore] = None,
        callback_port: int = CALLBACK_PORT,
        authorize_timeout: float = AUTHORIZE_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        open_browser: bool = True,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._store = store or TokenStore()
        self._callback_port = callback_port
        self._authorize_timeout = authorize_timeout
        self._transport = transport
        self._open_browser = open_browser
        self._tokens: Optional[StoredTokens] = self._store.load()
        self._lock: Optional[asyncio.Lock] = None
        self._lock_loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def redirect_uri(self) -> str:
        return redirect_uri(self._callback_port)

    @property
    def tokens(self) -> Optional[StoredTokens]:
        """The cached token pair, if any."""
        return self._tokens

    async def get_auth_header(self) -> AuthHeader:
        """Return a Bearer header, refreshing or re-authorizing as needed.

        Concurrent callers on the same event loop wait for one in-flight
        refresh or authorization rather than starting their own.

        Raises:
            AuthError: If the full authorization flow fails.
        """
        async with self._get_lock():
            token = await self._ensure_valid_token()
        return {"Authorization": f"Bearer {token}"}

    async def login(self) -> StoredTokens:
        """Run the browser authorization flow unconditionally and persist the result."""
        async with self._get_lock():
            return await self._authorize()

    def authorize_url(self) -> str:
        """Return the browser-facing authorize URL."""
        params = {
            "client_id": self._client_id,
            "response_type": "code",
            "redirect_uri": self.redirect_uri,
        }
        return f"{AUTHORIZE_URL}?{urlencode(params)}"

    # ------------------------------------------------------------------ #
    # Token lifecycle
    # ------------------------------------------------------------------ #

    async def _ensure_valid_token(self) -> str:
        tokens = self._tokens
        if tokens is not None and tokens.is_fresh(EXPIRY_MARGIN_MS):
            logger.debug("Using cached access token")
            return tokens.access_token

        if tokens is not None and tokens.refresh_token:
            try:
                refreshed = await self._refresh(tokens.refresh_token)
            except TokenRefreshError as exc:
                logger.info("Token refresh failed: %s", exc)
                warning("Token refresh failed, re-authorizing...")
            else:
                self._remember(refreshed)
                return refreshed.access_token

        authorized = await self._authorize()
        return authorized.access_token

    async def _authorize(self) -> StoredTokens:
        code = await self._authorize_via_browser()
        tokens = await self._exchange_code(code)
        self._remember(tokens)
        return tokens

    def _remember(self, tokens: StoredTokens) -> None:
        self._tokens = tokens
        self._store.save(tokens)

    async def _authorize_via_browser(self) -> str:
        url = self.authorize_url()
        server = CallbackServer(port=self._callback_port, timeout=self._authorize_timeout)
        server.start()
        try:
            info(f"Open this URL to authorize:\n{url}")
            if self._open_browser:
                threading.Thread(target=_open_browser, args=(url,), daemon=True).start()
            return await server.wait_for_code()
        finally:
            server.close()

    # ------------------------------------------------------------------ #
    # Token endpoint
    # ------------------------------------------------------------------ #

    async def _exchange_code(self, code: str) -> StoredTokens:
        """Exchange an authorization code for a token pair.

        Raises:
            AuthError: On transport errors, non-2xx responses, or a body
                missing ``access_token``/``refresh_token``/``expires_in``/``token_type``.
        """
        data = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self.redirect_uri,
        }
        try:
            response = await self._post_token(data)
        except httpx.HTTPError as exc:
            raise AuthError(f"Token exchange failed: {exc}") from exc

        if not response.is_success:
            raise AuthError(
                f"Token exchange failed: {response.status_code} {response.text}"
            )
        return self._parse_tokens(response, AuthError, "Token exchange")

    async def _refresh(self, refresh_token: str) -> StoredTokens:
        """Mint a new token pair from *refresh_token*.

        Raises:
            TokenRefreshError: On any failure; the caller falls back to a
                full authorization.
        """
        logger.debug("Refreshing access token")
        data = {"grant_type": "refresh_token", "refresh_token": refresh_token}
        try:
            response = await self._post_token(data)
        except httpx.HTTPError as exc:
            raise TokenRefreshError(f"Token refresh failed: {exc}") from exc

        if not response.is_success:
            raise TokenRefreshError(
                f"Token refresh failed: {response.status_code} {response.text}"
            )
        return self._parse_tokens(response, TokenRefreshError, "Token refresh")

    async def _post_token(self, data: dict[str, str]) -> httpx.Response:
        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Authorization": basic_auth_header(self._client_id, self._client_secret),
        }
        async with httpx.AsyncClient(transport=self._transport, timeout=30.0) as client:
            return await client.post(TOKEN_URL, data=data, headers=headers)

    @staticmethod
    def _parse_tokens(
        response: httpx.Response, error_cls: type[AuthError], action: str
    ) -> StoredTokens:
        try:
            payload: Any = response.json()
            return TokenResponse.model_validate(payload).to_stored()
        except (ValueError, ValidationError) as exc:
            raise error_cls(f"{action} returned a malformed response: {exc}") from exc

    def _get_lock(self) -> asyncio.Lock:
        # One lock per event loop; the provider may outlive an asyncio.run().
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock
