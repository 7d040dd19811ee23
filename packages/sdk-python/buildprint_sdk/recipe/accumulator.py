"""
Digest accumulation.

Streams the recipe bytes followed by every sequenced entry through a single
SHA-512 state. Entries are opened one at a time and closed before the next
one is touched, so at most one content stream is open at any moment no
matter how many files a recipe references.
"""

import hashlib
from functools import partial
from typing import Iterable

from buildprint_common import DigestDefaults, HashError, get_logger

from .entries import OpenedFileEntry

logger = get_logger("sdk.accumulator")

DIGEST_SIZE = hashlib.sha512().digest_size


class DigestAccumulator:
    """
    Incremental SHA-512 over a recipe and its inputs.

    Example:
        >>> acc = DigestAccumulator()
        >>> acc.feed_recipe(b"FROM scratch\\n")
        >>> for entry in entries:
        ...     acc.feed_entry(entry)
        >>> len(acc.digest())
        64
    """

    def __init__(self, chunk_size: int = DigestDefaults.CHUNK_SIZE):
        self.chunk_size = chunk_size
        self.entries_hashed = 0
        self._hash = hashlib.sha512()

    def feed_recipe(self, data: bytes) -> None:
        """Hash the recipe's own bytes. Must come before any entry."""
        self._hash.update(data)

    def feed_entry(self, entry: OpenedFileEntry) -> None:
        """
        Hash one entry: its filename, a NUL separator, then its content.

        Raises:
            HashError: If the entry cannot be opened or read
        """
        self._hash.update(entry.sort_key + b"\0")

        try:
            stream = entry.late_open()
        except OSError as e:
            raise HashError(f"cannot open '{entry.filename}': {e.strerror or e}", filename=entry.filename) from e

        try:
            with stream:
                for chunk in iter(partial(stream.read, self.chunk_size), b""):
                    self._hash.update(chunk)
        except OSError as e:
            raise HashError(f"cannot read '{entry.filename}': {e.strerror or e}", filename=entry.filename) from e

        self.entries_hashed += 1

    def digest(self) -> bytes:
        """Return the 64-byte digest of everything fed so far."""
        return self._hash.digest()


def accumulate_digest(
    recipe: bytes,
    entries: Iterable[OpenedFileEntry],
    chunk_size: int = DigestDefaults.CHUNK_SIZE,
) -> bytes:
    """
    Hash ``recipe`` followed by ``entries`` in the order given.

    Raises:
        HashError: On the first entry that cannot be read
    """
    accumulator = DigestAccumulator(chunk_size=chunk_size)
    accumulator.feed_recipe(recipe)
    for entry in entries:
        accumulator.feed_entry(entry)
    logger.debug("Hashed entries", entries=accumulator.entries_hashed)
    return accumulator.digest()
