"""Typer application and CLI entry point for bbauth.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs a SIGINT handler, registers the ``auth``
sub-command group, and invokes the Typer app. :class:`~bbauth.exceptions.BbauthError`
escaping a command is printed and mapped to its exit code.

See Also:
    :mod:`bbauth.output`: Output manager initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
from typing import Any

import typer
from rich.console import Console
from rich.logging import RichHandler

from bbauth import __version__
from bbauth.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="bbauth",
    help="Acquire and refresh Bitbucket Cloud OAuth credentials.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"bbauth {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool, no_color: bool) -> None:
    """Route ``bbauth`` log records to stderr when ``--verbose`` is set."""
    logger = logging.getLogger("bbauth")
    if not verbose:
        return
    logger.setLevel(logging.DEBUG)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        console = Console(stderr=True, no_color=no_color)
        logger.addHandler(RichHandler(console=console, show_path=False))


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~bbauth.output.OutputManager` and, with
    ``--verbose``, debug logging for the ``bbauth`` logger.
    """
    from bbauth.output import OutputManager, set_output

    set_output(OutputManager(no_color=no_color, quiet=quiet))
    _configure_logging(verbose, no_color)


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


from bbauth.commands.auth import auth_app  # noqa: E402

app.add_typer(auth_app, name="auth", help="Authentication management.")


def main() -> None:
    """CLI entry point invoked by the ``bbauth`` console script.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from bbauth.exceptions import BbauthError
        from bbauth.output import error

        if isinstance(exc, BbauthError):
            error(str(exc))
            sys.exit(exc.exit_code)
        error(f"Unexpected error: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)
