"""Parsing of the wire forms a sheet's monitor permission and status lists arrive in."""

from __future__ import annotations

from typing import Any, Iterable, Optional

from ..classes.model import ClassInfo
from ..common.validators import require_int
from ..core.enums import AttendanceMark, PermissionMode
from ..core.exceptions import ValidationError
from .model import MonitorPermission, StatusChange


def _monitor_ids(raw: Any) -> tuple[int, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise ValidationError("selectedMonitors must be a list")
    ids: list[int] = []
    for value in raw:
        monitor_id = require_int(value, "Monitor id")
        if monitor_id not in ids:
            ids.append(monitor_id)
    return tuple(ids)


def _flag(payload: dict, key: str) -> Optional[bool]:
    value = payload.get(key)
    if value is None:
        return None
    if not isinstance(value, bool):
        raise ValidationError(f"{key} must be true or false")
    return value


def parse_permission(payload: Any) -> MonitorPermission:
    """Accepts ``{"mode": ...}`` or the flag form ``{"adminOnly", "allMonitors", "selectedMonitors"}``.

    Both forms may be sent together (as ``MonitorPermission.to_dict`` does) as long
    as the flags agree with the mode.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Monitor permissions are required")

    selected = _monitor_ids(payload.get("selectedMonitors"))
    admin_only = _flag(payload, "adminOnly")
    all_monitors = _flag(payload, "allMonitors")

    if "mode" in payload:
        try:
            mode = PermissionMode(payload["mode"])
        except ValueError:
            raise ValidationError("Invalid monitor permission mode")
        if admin_only is not None and admin_only != (mode == PermissionMode.ADMIN_ONLY):
            raise ValidationError("adminOnly does not match the permission mode")
        if all_monitors is not None and all_monitors != (mode == PermissionMode.ALL_MONITORS):
            raise ValidationError("allMonitors does not match the permission mode")
        if selected and mode != PermissionMode.SELECTED:
            raise ValidationError("selectedMonitors is only allowed with the selected mode")
        if mode == PermissionMode.SELECTED and not selected:
            raise ValidationError(
                'Please select at least one monitor or choose "Give permission to all monitors"'
            )
        return MonitorPermission(mode=mode, selected_monitor_ids=selected)

    chosen = [flag for flag in (admin_only, all_monitors, bool(selected)) if flag]
    if len(chosen) > 1:
        raise ValidationError("Choose only one monitor permission option")
    if admin_only:
        return MonitorPermission(mode=PermissionMode.ADMIN_ONLY)
    if all_monitors:
        return MonitorPermission(mode=PermissionMode.ALL_MONITORS)
    if selected:
        return MonitorPermission(mode=PermissionMode.SELECTED, selected_monitor_ids=selected)
    raise ValidationError('Please select at least one monitor or choose "Give permission to all monitors"')


def check_permission_for_class(permission: MonitorPermission, class_info: ClassInfo) -> None:
    if permission.mode == PermissionMode.ALL_MONITORS and not class_info.monitor_ids:
        raise ValidationError(
            'This class has no monitors. Please add monitors first or select "Admin Only" permission.'
        )
    if permission.mode == PermissionMode.SELECTED:
        if any(not class_info.is_monitor(m) for m in permission.selected_monitor_ids):
            raise ValidationError("Some selected monitors are not monitors of this class")


def parse_mark(value: Any) -> AttendanceMark:
    try:
        return AttendanceMark(value)
    except ValueError:
        raise ValidationError("Status must be either Present or Absent")


def parse_status_changes(entries: Optional[Iterable[Any]], *, required: bool) -> list[StatusChange]:
    if entries is None:
        if required:
            raise ValidationError("Student attendance must be a non-empty array")
        return []
    if not isinstance(entries, list):
        raise ValidationError("Student attendance must be an array")
    if required and not entries:
        raise ValidationError("Student attendance must be a non-empty array")

    changes: list[StatusChange] = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise ValidationError("Each attendance entry must be an object")
        changes.append(
            StatusChange(
                student_id=require_int(entry.get("studentId"), "Student id"),
                status=parse_mark(entry.get("status")),
            )
        )
    return changes
