"""Digest commands - fingerprint a build recipe and check it for changes."""

from pathlib import Path
from typing import Optional

import typer
from buildprint_common import BuildprintError, DigestDefaults, LogDefaults, configure_logging
from buildprint_schema import DigestConfig
from buildprint_sdk import compute_digest, is_stale, load_digest_config

from .utils import error, success, warning

RecipeArgument = typer.Argument("Dockerfile", help="Path to the build recipe")
RemoteOption = typer.Option(
    None,
    "--remote",
    "-r",
    help="Remote source treatment: unchanged (default) or always_changed",
)
ConfigOption = typer.Option(None, "--config", "-c", help="YAML file with digest configuration")
ContextOption = typer.Option(
    None,
    "--context",
    "-C",
    help="Build context directory (defaults to the recipe's directory)",
)
WorkersOption = typer.Option(DigestDefaults.WORKERS, "--workers", "-w", min=1, help="Resolver worker threads")
VerboseOption = typer.Option(False, "--verbose", "-v", help="Log every pipeline stage")


def _setup_logging(verbose: bool) -> None:
    configure_logging("cli", "DEBUG" if verbose else LogDefaults.LEVEL)


def _load_config(config_file: Optional[Path], remote: Optional[str]) -> DigestConfig:
    """Build the digest configuration; --remote wins over the config file.

    Raises:
        typer.Exit: If the configuration is invalid
    """
    try:
        config = load_digest_config(config_file) if config_file else DigestConfig()
        if remote is not None:
            config = DigestConfig.model_validate({**config.model_dump(), "remote_treatment": remote})
    except BuildprintError as e:
        error(e.message)
        raise typer.Exit(1)
    return config


def digest(
    recipe: Path = RecipeArgument,
    remote: Optional[str] = RemoteOption,
    config_file: Optional[Path] = ConfigOption,
    context: Optional[Path] = ContextOption,
    workers: int = WorkersOption,
    verbose: bool = VerboseOption,
):
    """
    Print the digest of a build recipe and every file it references.

    \b
    Examples:
        buildprint digest
        buildprint digest build/Dockerfile --context .
        buildprint digest --remote always_changed
    """
    _setup_logging(verbose)
    config = _load_config(config_file, remote)

    try:
        result = compute_digest(recipe, config, context_dir=context, workers=workers)
    except BuildprintError as e:
        error(e.message)
        raise typer.Exit(1)

    typer.echo(result.hex())


def check(
    recipe: Path = RecipeArgument,
    expected: str = typer.Option(..., "--expected", "-e", help="Hex digest recorded after the last build"),
    remote: Optional[str] = RemoteOption,
    config_file: Optional[Path] = ConfigOption,
    context: Optional[Path] = ContextOption,
    workers: int = WorkersOption,
    verbose: bool = VerboseOption,
):
    """
    Check whether a recipe's inputs changed since the recorded digest.

    Exits with 0 when up to date, 1 when the inputs changed or the digest
    cannot be computed.

    \b
    Examples:
        buildprint check --expected "$(cat .buildprint)"
    """
    _setup_logging(verbose)
    config = _load_config(config_file, remote)

    try:
        previous = bytes.fromhex(expected.strip())
    except ValueError:
        error(f"Expected digest is not valid hex: '{expected}'")
        raise typer.Exit(1)

    if is_stale(recipe, previous, config, context_dir=context, workers=workers):
        warning(f"Stale: inputs changed or could not be fingerprinted ({recipe})")
        raise typer.Exit(1)

    success(f"Up to date: {recipe}")
