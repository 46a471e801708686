"""Well-known virtual environment locations and their canonical forms."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

log = logging.getLogger(__name__)

# Relative entries are joined onto the home directory.
SEARCH_PATH_TEMPLATES: tuple[str, ...] = (
    # pipx
    ".local/pipx/venvs",
    # virtualenvwrapper
    ".virtualenvs",
    ".venvs",
    # virtualenv
    ".local/share/virtualenvs",
    "/usr/local/share/virtualenvs",
    "/usr/share/virtualenvs",
    "/opt/virtualenvs",
    ".config/virtualenvs",
    # poetry
    ".cache/pypoetry/virtualenvs",
    # conda and its variants
    ".conda/envs",
    ".miniconda/envs",
    ".miniforge/envs",
    "anaconda3/envs",
    "miniconda3/envs",
    "miniforge3/envs",
    "mambaforge/envs",
    "mambaforge3/envs",
    # pyenv
    ".pyenv/versions/envs",
    # asdf
    ".asdf/installs/python",
    ".asdf/installs/python/versions",
    # Enthought Canopy
    "Library/Enthought/Canopy/edm/envs",
    # PyCharm
    ".PyCharmXXXX.X/config/virtualenvs",
    # system-wide conda installs
    "/opt/anaconda3/envs",
    "/opt/miniconda3/envs",
)


class HomeDirectoryError(Exception):
    """Raised when the user's home directory cannot be determined."""


def home_dir() -> Path:
    """Return the current user's home directory."""
    try:
        return Path.home()
    except (RuntimeError, KeyError) as exc:
        raise HomeDirectoryError(f"Could not find home directory: {exc}") from exc


def search_paths(
    home: Path | None = None,
    templates: Iterable[str] = SEARCH_PATH_TEMPLATES,
) -> list[Path]:
    """Expand search path templates against *home*.

    Raises:
        HomeDirectoryError: If *home* is not given and cannot be determined.
    """
    if home is None:
        home = home_dir()
    return [home / template for template in templates]


def canonical_roots(paths: Iterable[Path]) -> set[Path]:
    """Resolve *paths* to unique, existing, symlink-free directories.

    Paths that don't exist or can't be resolved are dropped; on most
    systems the majority of candidates are missing.  Two paths aliasing the
    same directory collapse into one entry.
    """
    roots: set[Path] = set()
    for path in paths:
        try:
            resolved = path.resolve(strict=True)
        except (OSError, RuntimeError):
            log.debug("Skipping search path %s: not found", path)
            continue
        if not resolved.is_dir():
            log.debug("Skipping search path %s: not a directory", path)
            continue
        if resolved in roots:
            log.debug("Search path %s duplicates %s", path, resolved)
            continue
        roots.add(resolved)
    return roots
