"""OAuth2 authorization-code provider with a loopback callback.

Implements the dynamic auth strategy: a cached token pair that is reused
while fresh, refreshed with the ``refresh_token`` grant when it is about to
expire, and re-acquired through the browser when refresh is impossible or
fails. A temporary HTTP listener on ``localhost:8976`` captures the
redirect.

Exports:
    :class:`OAuthProvider` -- the provider.
    :class:`CallbackServer` -- the single-use loopback listener.
    :func:`basic_auth_header` -- ``Basic`` credential for the token endpoint.
"""

from bbauth.providers.oauth.callback_server import CallbackServer
from bbauth.providers.oauth.provider import OAuthProvider, basic_auth_header

__all__ = ["CallbackServer", "OAuthProvider", "basic_auth_header"]
