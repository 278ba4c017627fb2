"""Environment-driven configuration and auth strategy precedence.

bbauth has no config file of its own. Everything it needs comes from the
environment, with the persisted token file as the last resort:

* :data:`ENV_TOKEN` -- a ready-made bearer token.
* :data:`ENV_CLIENT_ID` / :data:`ENV_CLIENT_SECRET` -- an OAuth consumer
  key/secret pair that enables the browser-based authorization-code flow.
* :func:`get_token_path` -- the token file written by a previous OAuth login.

:func:`resolve_auth_config` applies that precedence and returns exactly one
strategy model from :mod:`bbauth.models`.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from bbauth.exceptions import ConfigError
from bbauth.models import AuthConfig, BearerAuthConfig, OAuthAuthConfig, now_ms

ENV_TOKEN = "BITBUCKET_TOKEN"
ENV_CLIENT_ID = "BITBUCKET_OAUTH_CLIENT_ID"
ENV_CLIENT_SECRET = "BITBUCKET_OAUTH_CLIENT_SECRET"

API_BASE_URL = "https://api.bitbucket.org/2.0"
AUTHORIZE_URL = "https://bitbucket.org/site/oauth2/authorize"
TOKEN_URL = "https://bitbucket.org/site/oauth2/access_token"

CALLBACK_PORT = 8976
CALLBACK_PATH = "/callback"
AUTHORIZE_TIMEOUT = 120.0
EXPIRY_MARGIN_MS = 60_000

_TOKEN_FILENAME = ".bitbucket-oauth.json"


def get_token_path() -> Path:
    """Return the default token file path (``~/.bitbucket-oauth.json``)."""
    return Path.home() / _TOKEN_FILENAME


def redirect_uri(port: int = CALLBACK_PORT) -> str:
    """Return the loopback redirect URI registered with the OAuth consumer."""
    return f"http://localhost:{port}{CALLBACK_PATH}"


def resolve_auth_config(token_path: Optional[Path] = None) -> AuthConfig:
    """Pick the auth strategy from the environment and stored credentials.

    Precedence (high to low):
        1. ``BITBUCKET_TOKEN`` -- bearer token.
        2. ``BITBUCKET_OAUTH_CLIENT_ID`` + ``BITBUCKET_OAUTH_CLIENT_SECRET``
           -- OAuth, both must be non-empty.
        3. An unexpired record in the token file, reused as a bearer token.

    Args:
        token_path: Token file to consult for step 3. Defaults to
            :func:`get_token_path`.

    Returns:
        A :class:`~bbauth.models.BearerAuthConfig` or
        :class:`~bbauth.models.OAuthAuthConfig`.

    Raises:
        ConfigError: If none of the three sources is usable.
    """
    token = os.environ.get(ENV_TOKEN)
    if token:
        return BearerAuthConfig(token=token)

    client_id = os.environ.get(ENV_CLIENT_ID)
    client_secret = os.environ.get(ENV_CLIENT_SECRET)
    if client_id and client_secret:
        return OAuthAuthConfig(client_id=client_id, client_secret=client_secret)

    from bbauth.auth.token_store import TokenStore

    stored = TokenStore(token_path).load()
    if stored is not None and stored.expires_at > now_ms():
        return BearerAuthConfig(token=stored.access_token)

    raise ConfigError(
        f"No Bitbucket auth configured. Set {ENV_TOKEN} or "
        f"{ENV_CLIENT_ID} + {ENV_CLIENT_SECRET}."
    )
