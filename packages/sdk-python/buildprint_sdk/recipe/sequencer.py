"""
Deterministic sequencing of resolved entries.
"""

from typing import Iterable, List

from buildprint_common import get_logger

from .entries import OpenedFileEntry

logger = get_logger("sdk.sequencer")


def sequence_entries(entries: Iterable[OpenedFileEntry]) -> List[OpenedFileEntry]:
    """
    Drain ``entries`` and return them sorted by filename.

    The whole stream is collected before sorting, so the result does not
    depend on the order workers produced it in. Filenames compare by their
    UTF-8 bytes. When the same filename is produced more than once (a file
    referenced twice, or through a directory and directly) only the first
    entry is kept.

    Args:
        entries: Unordered entries, typically from PathResolver.resolve

    Returns:
        Entries in canonical order, one per filename
    """
    collected = sorted(entries, key=lambda entry: entry.sort_key)

    sequenced: List[OpenedFileEntry] = []
    for entry in collected:
        if sequenced and sequenced[-1].filename == entry.filename:
            continue
        sequenced.append(entry)

    if len(sequenced) != len(collected):
        logger.debug("Dropped duplicate entries", duplicates=len(collected) - len(sequenced))
    return sequenced
