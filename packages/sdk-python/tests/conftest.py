"""Shared fixtures for SDK tests."""

from pathlib import Path
from typing import Callable, Dict

import pytest

WORKED_RECIPE = "FROM golang:1.22\nCOPY app.go /app/\nCOPY lib/ /lib/\n"


def write_tree(root: Path, files: Dict[str, str]) -> Path:
    """Create ``files`` (relative path -> text) below ``root``."""
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return root


@pytest.fixture
def make_tree(tmp_path) -> Callable[[Dict[str, str]], Path]:
    """Return a helper that writes a file tree into tmp_path."""

    def _make(files: Dict[str, str]) -> Path:
        return write_tree(tmp_path, files)

    return _make


@pytest.fixture
def worked_example(make_tree) -> Path:
    """Build context with app.go and lib/{x,y}.go; returns the recipe path."""
    root = make_tree(
        {
            "Dockerfile": WORKED_RECIPE,
            "app.go": "package main\n",
            "lib/x.go": "package lib // x\n",
            "lib/y.go": "package lib // y\n",
        }
    )
    return root / "Dockerfile"
