"""Shared utility functions."""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Callable, Iterable

from venvpruner.core.search_paths import home_dir
from venvpruner.models.environment import VirtualEnvironment
from venvpruner.models.removal_result import RemovalResult

log = logging.getLogger(__name__)


def xdg_config_home() -> Path:
    """Return XDG_CONFIG_HOME, defaulting to ~/.config.

    Raises:
        HomeDirectoryError: If the variable is unset and there is no home directory.
    """
    value = os.environ.get("XDG_CONFIG_HOME")
    if value:
        return Path(value)
    return home_dir() / ".config"


def remove_environments(
    environments: Iterable[VirtualEnvironment],
    *,
    on_removed: Callable[[VirtualEnvironment], None] | None = None,
) -> RemovalResult:
    """Recursively delete each environment directory.

    A failure on one environment is recorded and the rest are still removed.

    Args:
        environments: Records to delete.
        on_removed: Called after each environment is handled, whether or not
                    its removal succeeded.
    """
    result = RemovalResult()

    for env in environments:
        try:
            shutil.rmtree(env.path)
        except OSError as e:
            log.warning("Failed to delete %s: %s", env.path, e)
            result.errors.append(f"{env.path}: {e}")
        else:
            log.info("Deleted %s (%s)", env.path, env.size_display)
            result.removed.append(env)
            result.freed_bytes += env.size_bytes
        if on_removed:
            on_removed(env)

    return result


def bytes_to_human(size_bytes: int) -> str:
    """Convert byte count to a human-readable string."""
    if size_bytes < 0:
        return f"-{bytes_to_human(-size_bytes)}"
    if size_bytes == 0:
        return "0 B"

    units = ("B", "KB", "MB", "GB", "TB")
    value = float(size_bytes)
    for unit in units[:-1]:
        if abs(value) < 1024:
            return f"{value:.1f} {unit}" if unit != "B" else f"{int(value)} B"
        value /= 1024
    return f"{value:.1f} {units[-1]}"


def format_elapsed(seconds: float) -> str:
    """Format an elapsed time as a human-readable string."""
    if seconds < 1:
        return f"{seconds * 1000:.0f} ms"
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes = int(seconds) // 60
    secs = seconds - minutes * 60
    return f"{minutes}m {secs:.0f}s"
