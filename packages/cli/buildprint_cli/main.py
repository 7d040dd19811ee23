"""buildprint CLI - Main entry point."""

import typer

from . import digest_cmd, info_cmd

app = typer.Typer(
    name="buildprint",
    help="buildprint CLI - Fingerprint build recipes and their inputs",
    no_args_is_help=True,
    add_completion=False,
)

# Register all commands
app.command()(digest_cmd.digest)
app.command()(digest_cmd.check)
app.command()(info_cmd.version)


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
