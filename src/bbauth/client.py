"""HTTP client configuration for Bitbucket API calls.

:func:`configure_client` is the step that runs before any API service
call: it asks the :class:`~bbauth.auth.base.AuthProvider` for the current
header once and returns an :class:`httpx.AsyncClient` carrying it.

Retry, pagination, and response shaping belong to the callers.

Example::

    auth = resolve_auth()
    async with await configure_client(auth) as client:
        response = await client.get("/user")
"""

from __future__ import annotations

from typing import Optional

import httpx

from bbauth.auth.base import AuthProvider
from bbauth.config import API_BASE_URL


async def configure_client(
    auth: AuthProvider,
    base_url: str = API_BASE_URL,
    timeout: float = 30.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Build an async client authenticated with *auth*'s current header.

    Args:
        auth: Provider to take the ``Authorization`` header from.
        base_url: API root. Defaults to ``https://api.bitbucket.org/2.0``.
        timeout: Request timeout in seconds.
        transport: Optional ``httpx`` transport (mainly for tests).

    Returns:
        An open :class:`httpx.AsyncClient`; the caller closes it.

    Raises:
        AuthError: If the provider cannot produce a header.
    """
    header = await auth.get_auth_header()
    return httpx.AsyncClient(
        base_url=base_url,
        headers={**header, "Content-Type": "application/json"},
        timeout=timeout,
        transport=transport,
        follow_redirects=True,
    )
