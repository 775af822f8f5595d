from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ..model import MonitorPermission


@dataclass(frozen=True)
class PermissionDecision:
    allowed: bool
    reason: Optional[str] = None


class MonitorPermissionPolicy(ABC):
    """Strategy Pattern: decide whether a class monitor may submit the monitor update."""

    @abstractmethod
    def decide(self, *, permission: MonitorPermission, monitor_id: int) -> PermissionDecision:
        raise NotImplementedError
