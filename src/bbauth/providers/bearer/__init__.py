"""Static bearer token provider.

See Also:
    :class:`~bbauth.providers.bearer.provider.BearerAuthProvider`
"""

from bbauth.providers.bearer.provider import BearerAuthProvider

__all__ = ["BearerAuthProvider"]
