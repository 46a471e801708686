"""Shared test fixtures."""

from __future__ import annotations

import os
from pathlib import Path

import pytest


def _write_script(path: Path, body: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"#!/bin/sh\n{body}\n")
    path.chmod(0o755)
    return path


@pytest.fixture
def write_script():
    """Factory writing an executable shell script to a path."""
    return _write_script


@pytest.fixture
def fake_home(tmp_path, monkeypatch):
    """Point the home directory and XDG config at a temp directory."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setattr(Path, "home", staticmethod(lambda: home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    return home


@pytest.fixture
def make_venv():
    """Factory creating a minimal virtual environment layout.

    Creates ``bin/python``, a ``pyvenv.cfg`` (unless *version* is None) and
    pads the tree with a data file so it totals *size* bytes when *size*
    is given.
    """

    def _make(parent: Path, name: str, version: str | None = "3.11.4", size: int | None = None) -> Path:
        root = parent / name
        bin_dir = root / "bin"
        bin_dir.mkdir(parents=True)
        (bin_dir / "python").write_bytes(b"\x7fELF")
        if version is not None:
            (root / "pyvenv.cfg").write_text(f"home = /usr/bin\nversion = {version}\n")
        if size is not None:
            used = sum(
                os.lstat(os.path.join(d, f)).st_size
                for d, _, files in os.walk(root)
                for f in files
            )
            site = root / "lib" / "site-packages"
            site.mkdir(parents=True)
            (site / "payload.bin").write_bytes(b"x" * (size - used))
        return root

    return _make
