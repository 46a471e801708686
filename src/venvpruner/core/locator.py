"""Locate virtual environment roots below search roots."""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Iterable, Iterator

log = logging.getLogger(__name__)

# Reaches <root>/<group>/<env>/bin/python.
MAX_DEPTH = 4

BIN_DIR = "bin"
INTERPRETER = "python"


def walk(root: Path | str, max_depth: int = MAX_DEPTH) -> Iterator[os.DirEntry]:
    """Yield every entry below *root* down to *max_depth* levels.

    Children of *root* are at depth 1.  Symlinked directories are yielded
    but never descended into.  Unreadable directories are skipped.
    """
    stack: list[tuple[str, int]] = [(os.fspath(root), 1)]
    while stack:
        directory, depth = stack.pop()
        try:
            with os.scandir(directory) as it:
                entries = list(it)
        except OSError as e:
            log.debug("Cannot read %s: %s", directory, e)
            continue

        for entry in entries:
            yield entry
            if depth >= max_depth:
                continue
            try:
                if entry.is_dir(follow_symlinks=False):
                    stack.append((entry.path, depth + 1))
            except OSError:
                log.debug("Cannot access: %s", entry.path)


def is_interpreter(path: Path | str) -> bool:
    """Return True if *path* looks like ``<env>/bin/python``."""
    path = Path(path)
    return path.name == INTERPRETER and path.parent.name == BIN_DIR


def find_in_root(root: Path, max_depth: int = MAX_DEPTH) -> list[Path]:
    """Return the environment roots found below a single search root."""
    found: list[Path] = []
    for entry in walk(root, max_depth):
        if entry.name == INTERPRETER and is_interpreter(entry.path):
            found.append(Path(entry.path).parent.parent)
    log.debug("Found %d environment(s) under %s", len(found), root)
    return found


def locate_environments(
    roots: Iterable[Path],
    max_depth: int = MAX_DEPTH,
    max_workers: int | None = None,
) -> Iterator[Path]:
    """Lazily yield environment roots found below all *roots*.

    Each root is walked on its own worker thread; paths are yielded as soon
    as a root finishes, so ordering is not deterministic.  An environment
    reachable from several overlapping roots is yielded once.
    """
    roots = list(roots)
    if not roots:
        return

    seen: set[Path] = set()
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {executor.submit(find_in_root, root, max_depth): root for root in roots}
        for future in as_completed(futures):
            try:
                paths = future.result()
            except Exception:
                log.exception("Failed to walk search root %s", futures[future])
                continue
            for path in paths:
                if path in seen:
                    continue
                seen.add(path)
                yield path
