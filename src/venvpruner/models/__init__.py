"""venvpruner data models."""

from venvpruner.models.environment import UNKNOWN_VERSION, VirtualEnvironment
from venvpruner.models.removal_result import RemovalResult

__all__ = [
    "RemovalResult",
    "UNKNOWN_VERSION",
    "VirtualEnvironment",
]
