from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role
from ..core.exceptions import AuthorizationError
from .model import AttendanceSheet


@dataclass(frozen=True)
class Viewer:
    """Who is looking at a sheet, resolved once per request."""

    role: Role
    student_id: Optional[int] = None
    is_class_monitor: bool = False

    @property
    def sees_full_sheet(self) -> bool:
        return self.role.is_staff or (self.role == Role.STUDENT and self.is_class_monitor)


def project_sheet(sheet: AttendanceSheet, viewer: Viewer) -> dict:
    """Role-dependent view of a sheet.

    Staff and monitors of the class get the whole sheet. Any other student
    sees only their own line, without the expected count, the permission
    settings or the count the monitor submitted.
    """
    if viewer.sees_full_sheet:
        return sheet.to_dict()
    if viewer.role != Role.STUDENT:
        raise AuthorizationError("Access denied")

    data = sheet.to_dict()
    data["studentAttendance"] = [
        r.to_dict() for r in sheet.records if viewer.student_id is not None and r.student_id == viewer.student_id
    ]
    data.pop("expectedPresentCount", None)
    data.pop("monitorPermissions", None)
    data["monitorUpdate"]["markedPresentCount"] = None
    return data
