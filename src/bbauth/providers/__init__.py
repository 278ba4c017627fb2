"""Concrete :class:`~bbauth.auth.base.AuthProvider` strategies.

* :mod:`~bbauth.providers.bearer` -- static token from ``BITBUCKET_TOKEN``
  or a still-valid stored access token.
* :mod:`~bbauth.providers.oauth` -- OAuth2 authorization-code grant with a
  loopback callback, refresh, and persistence.
"""
