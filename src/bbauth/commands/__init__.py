"""Built-in CLI sub-commands for bbauth.

* :mod:`~bbauth.commands.auth` -- log in, show status, log out, print the header.

Each module exports a :class:`typer.Typer` sub-application that
:func:`bbauth.app.main` attaches to the root app.
"""
