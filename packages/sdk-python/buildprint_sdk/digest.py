"""
Recipe Digest
=============

Computes the fingerprint of a build recipe and every file it declares as a
build input. A computation moves through these stages:

    INIT -> EXTRACTING -> RESOLVING -> SEQUENCING -> HASHING -> DONE

and jumps to FAILED on the first error, skipping everything after it.

Usage:
    from buildprint_sdk import compute_digest, is_stale

    digest = compute_digest("Dockerfile")
    if is_stale("Dockerfile", previous_digest):
        rebuild()
"""

import threading
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from buildprint_common import DigestDefaults, DigestError, ResolveError, get_logger
from buildprint_schema import DigestConfig

from .recipe import PathResolver, accumulate_digest, iter_source_references, parse_recipe, sequence_entries

logger = get_logger("sdk.digest")


class DigestStage(str, Enum):
    """Progress of a single digest computation."""

    INIT = "init"
    EXTRACTING = "extracting"
    RESOLVING = "resolving"
    SEQUENCING = "sequencing"
    HASHING = "hashing"
    DONE = "done"
    FAILED = "failed"


class DigestRun:
    """
    One digest computation over a recipe.

    A run is single use: ``execute`` may be called once. The current
    stage is available as ``stage`` for progress reporting.

    Example:
        >>> run = DigestRun(Path("Dockerfile"))
        >>> digest = run.execute()
        >>> run.stage
        <DigestStage.DONE: 'done'>
    """

    def __init__(
        self,
        recipe_path: Union[str, Path],
        config: Optional[DigestConfig] = None,
        context_dir: Optional[Union[str, Path]] = None,
        workers: int = DigestDefaults.WORKERS,
    ):
        """
        Args:
            recipe_path: Path to the build recipe
            config: Digest configuration, defaults to DigestConfig()
            context_dir: Directory local sources are relative to,
                defaults to the recipe's directory
            workers: Resolver pool size
        """
        self.recipe_path = Path(recipe_path)
        self.config = config or DigestConfig()
        self.context_dir = Path(context_dir) if context_dir is not None else self.recipe_path.parent
        self.workers = workers
        self.stage = DigestStage.INIT
        self.cancel = threading.Event()
        self._logger = logger.with_context(recipe=str(self.recipe_path))

    def _enter(self, stage: DigestStage) -> None:
        self.stage = stage
        self._logger.debug("Digest stage", stage=stage.value)

    def execute(self) -> bytes:
        """
        Run every stage and return the 64-byte digest.

        Raises:
            ParseError: If the recipe is malformed
            ResolveError: If the recipe or a local source cannot be read
            HashError: If file content cannot be read while hashing
        """
        if self.stage != DigestStage.INIT:
            raise RuntimeError(f"DigestRun already executed (stage: {self.stage.value})")

        try:
            digest = self._execute()
        except BaseException:
            self.cancel.set()
            self._enter(DigestStage.FAILED)
            raise

        self._enter(DigestStage.DONE)
        self._logger.debug("Digest computed", digest=digest.hex())
        return digest

    def _execute(self) -> bytes:
        try:
            data = self.recipe_path.read_bytes()
        except OSError as e:
            raise ResolveError(
                f"cannot read recipe '{self.recipe_path}': {e.strerror or e}",
                reference=str(self.recipe_path),
            ) from e

        self._enter(DigestStage.EXTRACTING)
        stages = parse_recipe(data)

        self._enter(DigestStage.RESOLVING)
        resolver = PathResolver(self.context_dir, self.config, workers=self.workers)
        unordered = list(resolver.resolve(iter_source_references(stages), cancel=self.cancel))

        self._enter(DigestStage.SEQUENCING)
        entries = sequence_entries(unordered)

        self._enter(DigestStage.HASHING)
        return accumulate_digest(data, entries)


def compute_digest(
    recipe_path: Union[str, Path],
    config: Optional[DigestConfig] = None,
    *,
    context_dir: Optional[Union[str, Path]] = None,
    workers: int = DigestDefaults.WORKERS,
) -> bytes:
    """
    Compute the digest of a recipe and all of its referenced inputs.

    The result depends only on the recipe bytes and the sorted set of
    (filename, content) pairs it references, except when remote sources
    are treated as always changed.

    Args:
        recipe_path: Path to the build recipe
        config: Digest configuration
        context_dir: Build context, defaults to the recipe's directory
        workers: Resolver pool size

    Returns:
        64-byte SHA-512 digest

    Raises:
        ParseError, ResolveError, HashError
    """
    return DigestRun(recipe_path, config, context_dir=context_dir, workers=workers).execute()


def is_stale(
    recipe_path: Union[str, Path],
    previous_digest: Optional[bytes],
    config: Optional[DigestConfig] = None,
    *,
    context_dir: Optional[Union[str, Path]] = None,
    workers: int = DigestDefaults.WORKERS,
) -> bool:
    """
    Decide whether artifacts built from ``recipe_path`` need rebuilding.

    A digest that cannot be computed counts as stale; the failure is logged
    as a warning instead of being raised.

    Args:
        recipe_path: Path to the build recipe
        previous_digest: Digest stored by the caller after the last build,
            or None if nothing was built yet

    Returns:
        True if the inputs changed or their state is unknown
    """
    if previous_digest is None:
        return True

    try:
        current = compute_digest(recipe_path, config, context_dir=context_dir, workers=workers)
    except DigestError as e:
        logger.warning("Calculating digest failed", recipe=str(recipe_path), error=e.to_dict())
        return True

    return current != previous_digest
