from __future__ import annotations

from ..model import MonitorPermission
from .base import MonitorPermissionPolicy, PermissionDecision


class SelectedMonitorsPolicy(MonitorPermissionPolicy):
    """Allow only monitors named on the sheet."""

    def decide(self, *, permission: MonitorPermission, monitor_id: int) -> PermissionDecision:
        if int(monitor_id) in permission.selected_monitor_ids:
            return PermissionDecision(allowed=True)
        return PermissionDecision(
            allowed=False,
            reason="You do not have permission to update this attendance sheet",
        )
