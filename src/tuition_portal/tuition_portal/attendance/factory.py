from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import PermissionMode
from .model import MonitorPermission
from .policies.admin_only_policy import AdminOnlyPolicy
from .policies.all_monitors_policy import AllMonitorsPolicy
from .policies.base import MonitorPermissionPolicy
from .policies.selected_monitors_policy import SelectedMonitorsPolicy


@dataclass
class MonitorPolicyFactory:
    """Factory Pattern: pick the permission policy for a sheet's mode."""

    def for_permission(self, permission: MonitorPermission) -> MonitorPermissionPolicy:
        if permission.mode == PermissionMode.ALL_MONITORS:
            return AllMonitorsPolicy()
        if permission.mode == PermissionMode.SELECTED:
            return SelectedMonitorsPolicy()
        return AdminOnlyPolicy()
