"""Auth commands -- log in, inspect, and clear Bitbucket credentials.

Provides the ``bbauth auth`` sub-command group:

* ``login`` -- run the browser authorization flow and store the tokens.
* ``status`` -- show which strategy would be used and the stored token's expiry.
* ``logout`` -- clear the stored token file.
* ``header`` -- print the current ``Authorization`` header value to stdout.

Typical workflow::

    export BITBUCKET_OAUTH_CLIENT_ID=... BITBUCKET_OAUTH_CLIENT_SECRET=...
    bbauth auth login
    bbauth auth status
    curl -H "Authorization: $(bbauth auth header)" https://api.bitbucket.org/2.0/user
"""

from __future__ import annotations

import asyncio
import os
from datetime import datetime, timezone

import typer

from bbauth.auth import TokenStore, resolve_auth
from bbauth.config import ENV_CLIENT_ID, ENV_CLIENT_SECRET, resolve_auth_config
from bbauth.exceptions import BbauthError, ConfigError
from bbauth.models import BearerAuthConfig, now_ms
from bbauth.output import error, info, print_data, print_table, success, suggest
from bbauth.providers.oauth import OAuthProvider

auth_app = typer.Typer(no_args_is_help=True)


@auth_app.command("login")
def auth_login(
    no_browser: bool = typer.Option(
        False, "--no-browser", help="Only print the authorize URL."
    ),
) -> None:
    """Authorize in the browser and store the resulting tokens.

    Requires ``BITBUCKET_OAUTH_CLIENT_ID`` and
    ``BITBUCKET_OAUTH_CLIENT_SECRET``. Any stored token is replaced.

    Example::

        bbauth auth login
    """
    client_id = os.environ.get(ENV_CLIENT_ID)
    client_secret = os.environ.get(ENV_CLIENT_SECRET)
    if not (client_id and client_secret):
        error(f"Set {ENV_CLIENT_ID} and {ENV_CLIENT_SECRET} to log in.")
        raise typer.Exit(code=ConfigError.exit_code)

    store = TokenStore()
    provider = OAuthProvider(
        client_id, client_secret, store=store, open_browser=not no_browser
    )
    try:
        asyncio.run(provider.login())
    except BbauthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    success(f"Authorized. Tokens saved to {store.path}")


@auth_app.command("status")
def auth_status() -> None:
    """Show the active auth strategy and stored token details.

    Secrets are never printed.
    """
    store = TokenStore()

    try:
        config = resolve_auth_config(store.path)
        strategy = "bearer" if isinstance(config, BearerAuthConfig) else "oauth"
    except ConfigError:
        strategy = "(none)"

    stored = store.load()
    rows = [
        ["Strategy", strategy],
        ["Token file", str(store.path)],
        ["Stored token", "present" if stored else "absent"],
    ]
    if stored is not None:
        expires = datetime.fromtimestamp(stored.expires_at / 1000, tz=timezone.utc)
        rows.append(["Expires at", expires.isoformat(timespec="seconds")])
        rows.append(["Expired", str(stored.expires_at <= now_ms())])

    print_table(["Field", "Value"], rows, title="Bitbucket auth")

    if strategy == "(none)":
        suggest(f"Set {ENV_CLIENT_ID} + {ENV_CLIENT_SECRET}, then run: bbauth auth login")


@auth_app.command("logout")
def auth_logout(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Clear the stored token file."""
    store = TokenStore()
    # A corrupt or foreign file still counts; only a missing or cleared one is empty.
    if not store.path.is_file() or store.path.stat().st_size == 0:
        info("No stored tokens.")
        return

    if not force:
        confirmed = typer.confirm(f"Clear stored tokens at {store.path}?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    store.clear()
    success("Stored tokens cleared.")


@auth_app.command("header")
def auth_header() -> None:
    """Print the current ``Authorization`` header value to stdout.

    Refreshes or re-authorizes first when using OAuth.
    """
    try:
        provider = resolve_auth()
        header = asyncio.run(provider.get_auth_header())
    except BbauthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    print_data(header["Authorization"])
