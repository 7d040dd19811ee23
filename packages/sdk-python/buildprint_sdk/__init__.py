"""buildprint SDK - fingerprint build recipes and their inputs.

This package provides tools for:
- Parsing build recipes and extracting COPY/ADD sources
- Resolving local and remote sources concurrently
- Computing a deterministic SHA-512 digest of a recipe and its inputs
- Deciding whether previously built artifacts are stale

Example:
    >>> from buildprint_sdk import compute_digest, is_stale
    >>> digest = compute_digest("Dockerfile")
    >>> is_stale("Dockerfile", digest)
    False
"""

from .config import load_digest_config
from .digest import DigestRun, DigestStage, compute_digest, is_stale

__version__ = "0.1.0"

__all__ = [
    # Core functions
    "compute_digest",
    "is_stale",
    # Runs
    "DigestRun",
    "DigestStage",
    # Configuration
    "load_digest_config",
]
