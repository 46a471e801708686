"""Virtual environment record."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

UNKNOWN_VERSION = "unknown"


@dataclass(frozen=True, slots=True)
class VirtualEnvironment:
    """A discovered virtual environment.

    Records are immutable and compare equal only when every field matches,
    so a list from a previous scan can be filtered by the set of removed
    records without rescanning.
    """

    path: Path
    name: str
    python_path: Path
    python_version: str = UNKNOWN_VERSION
    size_bytes: int = 0
    size_display: str = "0 B"

    def __str__(self) -> str:
        return f"{self.name} - {self.path} ({self.size_display}) [{self.python_version}]"

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable mapping of this record."""
        return {
            "name": self.name,
            "path": str(self.path),
            "python_path": str(self.python_path),
            "python_version": self.python_version,
            "size_bytes": self.size_bytes,
            "size_display": self.size_display,
        }
