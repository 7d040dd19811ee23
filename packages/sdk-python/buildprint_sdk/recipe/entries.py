"""
File entries passed between the resolver, sequencer and accumulator.
"""

from dataclasses import dataclass
from typing import BinaryIO, Callable


@dataclass(frozen=True)
class OpenedFileEntry:
    """
    A build input waiting to be hashed.

    The entry holds the capability to open its content, never an open
    handle. ``late_open`` returns a fresh binary stream each time it is
    called; the caller is responsible for closing it.
    """

    filename: str
    """Context-relative POSIX path, or the URL for remote sources"""

    late_open: Callable[[], BinaryIO]
    """Opens the content only when invoked"""

    @property
    def sort_key(self) -> bytes:
        """Byte-order key used to sequence entries."""
        return self.filename.encode("utf-8", "surrogateescape")
