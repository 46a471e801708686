"""Scan orchestration engine."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable

from venvpruner.core.builder import build_environments
from venvpruner.core.locator import MAX_DEPTH, locate_environments
from venvpruner.core.search_paths import SEARCH_PATH_TEMPLATES, canonical_roots, search_paths
from venvpruner.models.environment import VirtualEnvironment
from venvpruner.models.removal_result import RemovalResult
from venvpruner.utils import remove_environments

log = logging.getLogger(__name__)

ProgressCallback = Callable[[str, str], None]  # (stage, status_message)
RemovedCallback = Callable[[VirtualEnvironment], None]


@dataclass(slots=True)
class ScanReport:
    """Outcome of one scan, largest environments first."""

    environments: list[VirtualEnvironment] = field(default_factory=list)
    total_bytes: int = 0
    elapsed: float = 0.0


class PrunerEngine:
    """Discovers, sizes and removes virtual environments.

    The engine keeps no state between scans; callers that want to reuse a
    previous result hold on to the returned report themselves.
    """

    def __init__(
        self,
        max_depth: int = MAX_DEPTH,
        max_workers: int | None = None,
        templates: Iterable[str] = SEARCH_PATH_TEMPLATES,
        home: Path | None = None,
    ) -> None:
        self.max_depth = max_depth
        self.max_workers = max_workers
        self.templates = tuple(templates)
        self.home = home

    def scan(self, on_progress: ProgressCallback | None = None) -> ScanReport:
        """Find every environment under the known search paths.

        Args:
            on_progress: Optional callback for progress updates.

        Returns:
            Report with environments sorted by size, largest first.

        Raises:
            HomeDirectoryError: If the home directory can't be determined.
        """
        start = time.monotonic()

        roots = canonical_roots(search_paths(self.home, self.templates))
        log.info("Searching %d root(s)", len(roots))
        if on_progress:
            on_progress("roots", f"Searching {len(roots)} location(s)")

        candidates = list(locate_environments(roots, self.max_depth, self.max_workers))
        if on_progress:
            on_progress("located", f"Found {len(candidates)} candidate(s)")

        def _built(env: VirtualEnvironment) -> None:
            if on_progress:
                on_progress("built", f"Measured {env.name} ({env.size_display})")

        envs = build_environments(candidates, self.max_workers, on_built=_built)
        envs.sort(key=lambda e: e.size_bytes, reverse=True)

        report = ScanReport(
            environments=envs,
            total_bytes=sum(e.size_bytes for e in envs),
            elapsed=time.monotonic() - start,
        )
        log.info("Found %d environment(s) totaling %d bytes", len(envs), report.total_bytes)
        if on_progress:
            on_progress("done", f"Found {len(envs)} virtual environments")
        return report

    def remove(
        self,
        environments: Iterable[VirtualEnvironment],
        on_removed: RemovedCallback | None = None,
    ) -> RemovalResult:
        """Delete the given environments from disk."""
        return remove_environments(environments, on_removed=on_removed)

    @staticmethod
    def remaining(
        previous: Iterable[VirtualEnvironment],
        removed: Iterable[VirtualEnvironment],
    ) -> list[VirtualEnvironment]:
        """Return *previous* without the *removed* records, order preserved."""
        gone = set(removed)
        return [env for env in previous if env not in gone]
