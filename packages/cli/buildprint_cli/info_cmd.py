"""Info commands."""

import typer
from buildprint_sdk import __version__


def version():
    """Show the buildprint version."""
    typer.echo(f"buildprint {__version__}")
