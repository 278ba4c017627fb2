"""Tests for the operator output layer.

Covers:
- NO_COLOR / TERM=dumb color disabling
- stdout vs stderr discipline
- Quiet mode suppression rules
- Plain tab-separated tables
- Global instance management
"""

from __future__ import annotations

import pytest

from bbauth import output as output_module
from bbauth.output import (
    OutputManager,
    _should_disable_color,
    get_output,
    reset_output,
    set_output,
)


class TestColorDisabling:
    def test_no_color_env_disables_color(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_term_dumb_disables_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_normal_term_keeps_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert _should_disable_color() is False


class TestStdoutStderrDiscipline:
    def test_print_data_goes_to_stdout(self, capfd):
        OutputManager(no_color=True).print_data("Bearer abc")
        captured = capfd.readouterr()
        assert captured.out == "Bearer abc\n"
        assert captured.err == ""

    @pytest.mark.parametrize("method", ["info", "success", "warning", "error", "suggest"])
    def test_diagnostics_go_to_stderr(self, capfd, method):
        getattr(OutputManager(no_color=True), method)("diagnostic")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "diagnostic" in captured.err

    def test_long_url_is_not_wrapped(self, capfd, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        url = "https://bitbucket.org/site/oauth2/authorize?" + "x" * 300
        OutputManager().info(url)
        assert url in capfd.readouterr().err


class TestQuietMode:
    def test_quiet_suppresses_info_and_success(self, capfd):
        mgr = OutputManager(no_color=True, quiet=True)
        mgr.info("hidden")
        mgr.success("hidden")
        mgr.suggest("hidden")
        assert capfd.readouterr().err == ""

    def test_quiet_keeps_warnings_and_errors(self, capfd):
        mgr = OutputManager(no_color=True, quiet=True)
        mgr.warning("careful")
        mgr.error("broken")
        err = capfd.readouterr().err
        assert "Warning: careful" in err
        assert "Error: broken" in err


class TestPrintTable:
    def test_plain_table_is_tab_separated(self, capfd):
        OutputManager(no_color=True).print_table(
            ["Field", "Value"], [["Strategy", "oauth"], ["Expired", "no"]]
        )
        lines = capfd.readouterr().out.splitlines()
        assert lines == ["Field\tValue", "Strategy\toauth", "Expired\tno"]


class TestGlobalInstance:
    def test_get_output_creates_default_lazily(self):
        reset_output()
        assert isinstance(get_output(), OutputManager)

    def test_helpers_use_installed_instance(self, capfd):
        set_output(OutputManager(no_color=True))
        output_module.warning("via helper")
        assert "Warning: via helper" in capfd.readouterr().err
