"""
buildprint Recipe Pipeline
==========================

The stages that turn a build recipe into a digest:

- Source extraction (recipe parsing, COPY/ADD sources)
- Path resolution (concurrent local walks, symbolic remote sources)
- Deterministic sequencing (sort by filename)
- Digest accumulation (one SHA-512, one open stream at a time)

Usage:
    from buildprint_sdk.recipe import (
        PathResolver,
        accumulate_digest,
        iter_source_references,
        parse_recipe,
        sequence_entries,
    )

    stages = parse_recipe(data)
    resolver = PathResolver(context_dir, config)
    entries = sequence_entries(resolver.resolve(iter_source_references(stages)))
    digest = accumulate_digest(data, entries)
"""

from .accumulator import DIGEST_SIZE, DigestAccumulator, accumulate_digest
from .entries import OpenedFileEntry
from .extractor import Command, Stage, extract_source_references, iter_source_references, parse_recipe
from .resolver import FirstError, PathResolver, is_remote_reference, normalize_reference
from .sequencer import sequence_entries

__all__ = [
    # Entries
    "OpenedFileEntry",
    # Extraction
    "Stage",
    "Command",
    "parse_recipe",
    "iter_source_references",
    "extract_source_references",
    # Resolution
    "PathResolver",
    "FirstError",
    "is_remote_reference",
    "normalize_reference",
    # Sequencing
    "sequence_entries",
    # Accumulation
    "DigestAccumulator",
    "accumulate_digest",
    "DIGEST_SIZE",
]
