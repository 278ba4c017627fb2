"""Tests for the ``bbauth auth`` command group."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from bbauth import __version__
from bbauth.app import app
from bbauth.auth import TokenStore
from bbauth.exceptions import AuthTimeoutError
from bbauth.models import StoredTokens, now_ms


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


def _save_tokens(home: Path, expires_in_ms: int = 3_600_000) -> TokenStore:
    store = TokenStore(home / ".bitbucket-oauth.json")
    store.save(
        StoredTokens(
            access_token="stored-acc",
            refresh_token="stored-ref",
            expires_at=now_ms() + expires_in_ms,
        )
    )
    return store


class TestVersion:
    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"bbauth {__version__}" in result.output


class TestStatus:
    def test_nothing_configured(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--no-color", "auth", "status"])

        assert result.exit_code == 0
        assert "Strategy\t(none)" in result.output
        assert "Stored token\tabsent" in result.output
        assert "bbauth auth login" in result.output

    def test_stored_token_reported_without_secret(
        self, runner: CliRunner, isolated_env: Path
    ) -> None:
        _save_tokens(isolated_env)

        result = runner.invoke(app, ["--no-color", "auth", "status"])

        assert result.exit_code == 0
        assert "Strategy\tbearer" in result.output
        assert "Stored token\tpresent" in result.output
        assert "Expired\tFalse" in result.output
        assert "stored-acc" not in result.output
        assert "stored-ref" not in result.output

    def test_oauth_strategy(
        self, runner: CliRunner, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("BITBUCKET_OAUTH_CLIENT_ID", "cid")
        monkeypatch.setenv("BITBUCKET_OAUTH_CLIENT_SECRET", "secret")

        result = runner.invoke(app, ["--no-color", "auth", "status"])

        assert "Strategy\toauth" in result.output


class TestLogout:
    def test_force_clears_file(self, runner: CliRunner, isolated_env: Path) -> None:
        store = _save_tokens(isolated_env)

        result = runner.invoke(app, ["--no-color", "auth", "logout", "--force"])

        assert result.exit_code == 0
        assert store.load() is None
        assert store.path.read_text(encoding="utf-8") == ""

    def test_declined_confirmation_keeps_file(
        self, runner: CliRunner, isolated_env: Path
    ) -> None:
        store = _save_tokens(isolated_env)

        result = runner.invoke(app, ["--no-color", "auth", "logout"], input="n\n")

        assert result.exit_code == 0
        assert store.load() is not None

    def test_force_clears_corrupt_file(self, runner: CliRunner, isolated_env: Path) -> None:
        path = isolated_env / ".bitbucket-oauth.json"
        path.write_bytes(b"\xff\xfe\x00garbage")

        result = runner.invoke(app, ["--no-color", "auth", "logout", "--force"])

        assert result.exit_code == 0
        assert "Stored tokens cleared." in result.output
        assert path.read_bytes() == b""

    def test_already_cleared_file(self, runner: CliRunner, isolated_env: Path) -> None:
        (isolated_env / ".bitbucket-oauth.json").write_text("", encoding="utf-8")

        result = runner.invoke(app, ["--no-color", "auth", "logout"])

        assert result.exit_code == 0
        assert "No stored tokens." in result.output

    def test_nothing_stored(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--no-color", "auth", "logout", "--force"])

        assert result.exit_code == 0
        assert "No stored tokens." in result.output


class TestHeader:
    def test_bearer_env(self, runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BITBUCKET_TOKEN", "env-tok")

        result = runner.invoke(app, ["auth", "header"])

        assert result.exit_code == 0
        assert "Bearer env-tok" in result.output

    def test_not_configured_exits_with_config_code(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--no-color", "auth", "header"])

        assert result.exit_code == 2
        assert "No Bitbucket auth configured" in result.output


class TestLogin:
    def test_requires_oauth_env(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--no-color", "auth", "login"])

        assert result.exit_code == 2
        assert "BITBUCKET_OAUTH_CLIENT_ID" in result.output

    def test_success(self, runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BITBUCKET_OAUTH_CLIENT_ID", "cid")
        monkeypatch.setenv("BITBUCKET_OAUTH_CLIENT_SECRET", "secret")
        provider = MagicMock()
        provider.login = AsyncMock()

        with patch("bbauth.commands.auth.OAuthProvider", return_value=provider) as cls:
            result = runner.invoke(app, ["--no-color", "auth", "login", "--no-browser"])

        assert result.exit_code == 0
        assert "Authorized" in result.output
        provider.login.assert_awaited_once()
        assert cls.call_args.kwargs["open_browser"] is False

    def test_timeout_exit_code(
        self, runner: CliRunner, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("BITBUCKET_OAUTH_CLIENT_ID", "cid")
        monkeypatch.setenv("BITBUCKET_OAUTH_CLIENT_SECRET", "secret")
        provider = MagicMock()
        provider.login = AsyncMock(
            side_effect=AuthTimeoutError("OAuth authorization timed out after 120 seconds")
        )

        with patch("bbauth.commands.auth.OAuthProvider", return_value=provider):
            result = runner.invoke(app, ["--no-color", "auth", "login"])

        assert result.exit_code == 3
        assert "timed out" in result.output
