"""Shared test fixtures for bbauth.

Every test runs with ``HOME`` pointed at a temporary directory and the
``BITBUCKET_*`` variables cleared, so nothing touches a real token file or
picks up a developer's credentials.
"""

from __future__ import annotations

import socket
from pathlib import Path

import pytest

from bbauth.auth.token_store import TokenStore
from bbauth.output import OutputManager, reset_output, set_output


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point ``HOME`` at a temp dir and clear auth-related env vars.

    Returns:
        The temporary home directory.
    """
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for var in [
        "BITBUCKET_TOKEN",
        "BITBUCKET_OAUTH_CLIENT_ID",
        "BITBUCKET_OAUTH_CLIENT_SECRET",
    ]:
        monkeypatch.delenv(var, raising=False)
    return home


@pytest.fixture(autouse=True)
def _plain_output() -> None:
    """Install a colourless output manager and reset it after each test."""
    set_output(OutputManager(no_color=True))
    yield
    reset_output()


@pytest.fixture()
def store(tmp_path: Path) -> TokenStore:
    """A token store writing to a nested temp path."""
    return TokenStore(tmp_path / "state" / "tokens.json")


@pytest.fixture()
def free_port() -> int:
    """A TCP port on localhost that was free a moment ago."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]
