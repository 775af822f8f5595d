from __future__ import annotations

from ..model import MonitorPermission
from .base import MonitorPermissionPolicy, PermissionDecision


class AllMonitorsPolicy(MonitorPermissionPolicy):
    def decide(self, *, permission: MonitorPermission, monitor_id: int) -> PermissionDecision:
        return PermissionDecision(allowed=True)
