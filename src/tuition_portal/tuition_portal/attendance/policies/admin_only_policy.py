from __future__ import annotations

from ..model import MonitorPermission
from .base import MonitorPermissionPolicy, PermissionDecision


class AdminOnlyPolicy(MonitorPermissionPolicy):
    """Only staff may edit; every monitor is turned away."""

    def decide(self, *, permission: MonitorPermission, monitor_id: int) -> PermissionDecision:
        return PermissionDecision(
            allowed=False,
            reason="You do not have permission to update this attendance sheet",
        )
