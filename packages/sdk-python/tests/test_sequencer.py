"""Tests for sequencer.py - canonical ordering of entries."""

import io
import random
from functools import partial

from buildprint_sdk.recipe.entries import OpenedFileEntry
from buildprint_sdk.recipe.sequencer import sequence_entries


def _entry(filename: str, content: bytes = b"") -> OpenedFileEntry:
    return OpenedFileEntry(filename=filename, late_open=partial(io.BytesIO, content))


class TestSequenceEntries:
    """Tests for sort and de-duplication."""

    def test_sorted_by_filename(self):
        entries = [_entry("lib/y.go"), _entry("app.go"), _entry("lib/x.go")]
        assert [e.filename for e in sequence_entries(entries)] == ["app.go", "lib/x.go", "lib/y.go"]

    def test_byte_order(self):
        """Uppercase sorts before lowercase, '-' before '/'"""
        entries = [_entry("lib/x"), _entry("a"), _entry("lib-x"), _entry("Z")]
        assert [e.filename for e in sequence_entries(entries)] == ["Z", "a", "lib-x", "lib/x"]

    def test_non_ascii_byte_order(self):
        entries = [_entry("é.txt"), _entry("z.txt"), _entry("e.txt")]
        assert [e.filename for e in sequence_entries(entries)] == ["e.txt", "z.txt", "é.txt"]

    def test_independent_of_production_order(self):
        names = [f"dir{i % 7}/file{i}.txt" for i in range(200)]
        expected = [e.filename for e in sequence_entries(_entry(n) for n in names)]

        rng = random.Random(1234)
        for _ in range(5):
            shuffled = names[:]
            rng.shuffle(shuffled)
            assert [e.filename for e in sequence_entries(_entry(n) for n in shuffled)] == expected

    def test_duplicates_collapse(self):
        """A file referenced twice is hashed once"""
        entries = [_entry("app.go"), _entry("lib/x.go"), _entry("app.go")]
        assert [e.filename for e in sequence_entries(entries)] == ["app.go", "lib/x.go"]

    def test_empty(self):
        assert sequence_entries([]) == []
