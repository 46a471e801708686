"""Removal result dataclass."""

from __future__ import annotations

from dataclasses import dataclass, field

from venvpruner.models.environment import VirtualEnvironment


@dataclass(slots=True)
class RemovalResult:
    """Result of deleting a batch of environments."""

    removed: list[VirtualEnvironment] = field(default_factory=list)
    freed_bytes: int = 0
    errors: list[str] = field(default_factory=list)
