"""Turn candidate paths into fully populated environment records."""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, Iterable

from venvpruner.core.locator import BIN_DIR, INTERPRETER
from venvpruner.core.sizing import dir_size
from venvpruner.core.version import VersionDetectionError, resolve_version
from venvpruner.models.environment import UNKNOWN_VERSION, VirtualEnvironment
from venvpruner.utils import bytes_to_human

log = logging.getLogger(__name__)

BuiltCallback = Callable[[VirtualEnvironment], None]


class EnvironmentBuildError(Exception):
    """Raised when a candidate path is not a usable virtual environment."""


def _env_name(path: Path) -> str:
    name = path.name
    try:
        name.encode("utf-8")
    except UnicodeEncodeError:
        # os.fsdecode() maps undecodable bytes to lone surrogates
        raise EnvironmentBuildError(f"Failed to parse virtual environment name: {os.fsencode(path)!r}") from None
    if not name:
        raise EnvironmentBuildError(f"Failed to parse virtual environment name: {path}")
    return name


def build_environment(path: Path, sizing_pool: ThreadPoolExecutor | None = None) -> VirtualEnvironment:
    """Build a record for the environment rooted at *path*.

    Sizing runs on *sizing_pool* when given, otherwise on a private pool.

    Raises:
        EnvironmentBuildError: If the interpreter is missing, the directory
            name isn't valid text, or a version source can't be read.
    """
    python_path = path / BIN_DIR / INTERPRETER
    if not python_path.exists():
        raise EnvironmentBuildError(f"Python executable not found in {python_path}")

    try:
        version = resolve_version(path) or UNKNOWN_VERSION
    except VersionDetectionError as exc:
        raise EnvironmentBuildError(str(exc)) from exc

    name = _env_name(path)
    size = dir_size(path, executor=sizing_pool)

    return VirtualEnvironment(
        path=path,
        name=name,
        python_path=python_path,
        python_version=version,
        size_bytes=size,
        size_display=bytes_to_human(size),
    )


def build_environments(
    paths: Iterable[Path],
    max_workers: int | None = None,
    on_built: BuiltCallback | None = None,
) -> list[VirtualEnvironment]:
    """Build records for all *paths* in parallel.

    Candidates that fail are logged and left out; the rest of the batch is
    unaffected.  The returned list is in completion order.

    One pool builds candidates and a second, shared pool sizes them, so
    the thread count stays bounded by *max_workers* per pool.
    """
    paths = list(paths)
    if not paths:
        return []

    envs: list[VirtualEnvironment] = []
    with (
        ThreadPoolExecutor(max_workers=max_workers) as executor,
        ThreadPoolExecutor(max_workers=max_workers) as sizing_pool,
    ):
        futures = {executor.submit(build_environment, p, sizing_pool): p for p in paths}
        for future in as_completed(futures):
            path = futures[future]
            try:
                env = future.result()
            except EnvironmentBuildError as exc:
                log.warning("Error building virtualenv at %s: %s", path, exc)
                continue
            except Exception:
                log.exception("Unexpected error building virtualenv at %s", path)
                continue
            envs.append(env)
            if on_built:
                on_built(env)
    return envs
