"""Recursive, symlink-safe directory size computation."""

from __future__ import annotations

import logging
import os
import stat
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from pathlib import Path

log = logging.getLogger(__name__)


def dir_size(
    path: Path | str,
    max_workers: int | None = None,
    executor: ThreadPoolExecutor | None = None,
) -> int:
    """Calculate the total size of a directory tree in bytes.

    Symlinks contribute nothing and are never followed, whatever they
    point to; this keeps cycles out and avoids counting shared content
    twice.  Entries that can't be read count as zero, so the function
    never raises.

    Every directory listing runs as its own task on a thread pool.  A task
    returns the bytes of the files it saw together with the subdirectories
    it found, and the caller submits those as new tasks.  Workers never
    wait on each other, so one pool can serve several concurrent callers.

    Args:
        path: File or directory to measure.
        max_workers: Size of the private pool, ``None`` for the executor default.
        executor: Shared pool to run on instead of a private one; it is
                  left running.
    """
    try:
        st = os.lstat(path)
    except OSError as e:
        log.debug("Failed to get metadata for %s: %s", path, e)
        return 0

    if stat.S_ISLNK(st.st_mode):
        return 0
    if not stat.S_ISDIR(st.st_mode):
        return st.st_size

    if executor is None:
        with ThreadPoolExecutor(max_workers=max_workers) as own:
            return _sum_tree(os.fspath(path), own)
    return _sum_tree(os.fspath(path), executor)


def _sum_tree(root: str, executor: ThreadPoolExecutor) -> int:
    total = 0
    pending: set[Future] = {executor.submit(_scan_level, root)}
    while pending:
        done, pending = wait(pending, return_when=FIRST_COMPLETED)
        for future in done:
            size, subdirs = future.result()
            total += size
            pending.update(executor.submit(_scan_level, d) for d in subdirs)
    return total


def _scan_level(directory: str) -> tuple[int, list[str]]:
    """Sum the non-directory entries of one directory and list its subdirectories."""
    total = 0
    subdirs: list[str] = []
    try:
        with os.scandir(directory) as it:
            for entry in it:
                try:
                    st = entry.stat(follow_symlinks=False)
                except OSError as e:
                    log.debug("Failed to get metadata for %s: %s", entry.path, e)
                    continue
                if stat.S_ISLNK(st.st_mode):
                    continue
                if stat.S_ISDIR(st.st_mode):
                    subdirs.append(entry.path)
                else:
                    total += st.st_size
    except OSError as e:
        log.debug("Failed to read directory %s: %s", directory, e)
    return total, subdirs
