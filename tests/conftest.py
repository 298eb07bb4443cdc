"""Shared test fixtures and utilities."""

import json
from pathlib import Path

import pytest


def write_level(directory: Path, name: str, deaths=None, runs=None) -> Path:
    """Write a save file and return its canonical path."""
    path = directory / name
    path.write_text(json.dumps({"deaths": deaths or {}, "runs": runs or {}}))
    return path.resolve()


@pytest.fixture
def save_dir(tmp_path):
    """Empty, canonical save directory."""
    directory = tmp_path / "saves"
    directory.mkdir()
    return directory.resolve()


@pytest.fixture
def emitted():
    """List collecting every value handed to the sink."""
    return []


@pytest.fixture
def sink(emitted):
    return emitted.append
