"""
Shared test fixtures and configuration.
"""

from pathlib import Path

import pytest

from src.core.models.inputs import Inputs

BASE_RAW = {
    "host": "linux",
    "target": "desktop",
    "wasm": "none",
    "version": "6.8.0",
    "dir": "/work",
    "cache-key-prefix": "install-qt-action",
}


@pytest.fixture
def make_raw():
    """Factory for minimal valid raw inputs; ``_`` in names stands for ``-``."""

    def _make(**overrides: str) -> dict[str, str]:
        raw = dict(BASE_RAW)
        raw.update({k.replace("_", "-"): v for k, v in overrides.items()})
        return raw

    return _make


@pytest.fixture
def make_inputs(make_raw):
    """Factory for resolved Inputs on a Linux runner."""

    def _make(**overrides: str) -> Inputs:
        return Inputs.from_raw(make_raw(**overrides), platform="linux", workspace="")

    return _make


@pytest.fixture
def qt_tree(tmp_path: Path):
    """Factory creating ``<Qt>/<version>/<arch>/bin/qmake`` kits."""
    install_dir = tmp_path / "Qt"

    def _make(*kits: str) -> Path:
        install_dir.mkdir(exist_ok=True)
        for kit in kits:
            bin_dir = install_dir / kit / "bin"
            bin_dir.mkdir(parents=True, exist_ok=True)
            (bin_dir / "qmake").write_text("#!/bin/sh\n")
        return install_dir

    return _make
