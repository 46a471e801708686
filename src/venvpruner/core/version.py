"""Interpreter version detection for virtual environments.

Detection is a fixed chain of strategies, cheapest first.  Each strategy
takes the environment root and returns a version string, or ``None`` when
its source is missing or says nothing useful.  Running the interpreter is
the last resort because it spawns a process.
"""

from __future__ import annotations

import logging
import re
import subprocess
from pathlib import Path
from typing import Callable

from venvpruner.core.locator import BIN_DIR, INTERPRETER

log = logging.getLogger(__name__)

Strategy = Callable[[Path], "str | None"]

_CFG_PREFIX = "version = "
_OUTPUT_PREFIX = "Python "
_CONDA_PYTHON_RE = re.compile(r"python-(\d\S*)")


class VersionDetectionError(Exception):
    """Raised when a version source exists but can't be read."""


def _read_lines(path: Path) -> list[str]:
    try:
        return path.read_text(encoding="utf-8", errors="replace").splitlines()
    except OSError as exc:
        raise VersionDetectionError(f"Failed to read {path}: {exc}") from exc


def from_pyvenv_cfg(root: Path) -> str | None:
    """Read ``version = X`` from ``pyvenv.cfg``."""
    cfg = root / "pyvenv.cfg"
    if not cfg.is_file():
        return None
    for line in _read_lines(cfg):
        if line.startswith(_CFG_PREFIX):
            return line[len(_CFG_PREFIX):].strip()
    return None


def from_lib_dir(root: Path) -> str | None:
    """Infer the version from a ``lib/pythonX.Y`` directory name."""
    lib_dir = root / "lib"
    if not lib_dir.is_dir():
        return None
    try:
        names = sorted(entry.name for entry in lib_dir.iterdir())
    except OSError as exc:
        raise VersionDetectionError(f"Failed to read {lib_dir}: {exc}") from exc
    for name in names:
        if name.startswith(INTERPRETER):
            suffix = name[len(INTERPRETER):]
            if suffix:
                return suffix
    return None


def from_conda_history(root: Path) -> str | None:
    """Find the ``python-X.Y.Z`` package spec in ``conda-meta/history``."""
    history = root / "conda-meta" / "history"
    if not history.is_file():
        return None
    for line in _read_lines(history):
        match = _CONDA_PYTHON_RE.search(line)
        if match:
            return match.group(1)
    return None


def from_interpreter(root: Path) -> str | None:
    """Run ``bin/python --version`` and parse its output.

    Python 2 prints the version on stderr, so stderr is used when stdout
    is empty.
    """
    python = root / BIN_DIR / INTERPRETER
    if not python.exists():
        return None
    try:
        proc = subprocess.run([str(python), "--version"], capture_output=True)
    except OSError as exc:
        raise VersionDetectionError(f"Failed to execute '{python} --version': {exc}") from exc

    stdout = proc.stdout.decode(errors="replace").strip()
    output = stdout or proc.stderr.decode(errors="replace").strip()
    if output.startswith(_OUTPUT_PREFIX):
        return output[len(_OUTPUT_PREFIX):]
    log.debug("Unrecognised version output from %s: %r", python, output)
    return None


STRATEGIES: tuple[Strategy, ...] = (
    from_pyvenv_cfg,
    from_lib_dir,
    from_conda_history,
    from_interpreter,
)


def resolve_version(root: Path, strategies: tuple[Strategy, ...] = STRATEGIES) -> str | None:
    """Return the first version any strategy reports, or None.

    Raises:
        VersionDetectionError: If an existing source can't be read.
    """
    for strategy in strategies:
        version = strategy(root)
        if version:
            log.debug("%s: version %s via %s", root, version, strategy.__name__)
            return version
    return None
