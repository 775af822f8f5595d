from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..common.stats import percentage
from ..core.enums import AttendanceMark, PermissionMode, SheetStatus


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class MonitorPermission:
    """Which monitors may submit the single monitor update of a sheet.

    The three modes are mutually exclusive; `selected_monitor_ids` is only
    meaningful (and then non-empty) for `PermissionMode.SELECTED`.
    """

    mode: PermissionMode
    selected_monitor_ids: tuple[int, ...] = ()

    def to_dict(self) -> dict:
        return {
            "mode": self.mode.value,
            "adminOnly": self.mode == PermissionMode.ADMIN_ONLY,
            "allMonitors": self.mode == PermissionMode.ALL_MONITORS,
            "selectedMonitors": list(self.selected_monitor_ids),
        }


@dataclass(frozen=True)
class StudentAttendanceRecord:
    """One student's line on a sheet."""

    student_id: int
    status: AttendanceMark = AttendanceMark.ABSENT
    marked_by: Optional[int] = None
    marked_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "studentId": self.student_id,
            "status": self.status.value,
            "markedBy": self.marked_by,
            "markedAt": _iso(self.marked_at),
        }


@dataclass(frozen=True)
class MonitorUpdate:
    """The one monitor-submitted update a sheet accepts."""

    updated_by: Optional[int] = None
    updated_at: Optional[datetime] = None
    marked_present_count: Optional[int] = None
    is_locked: bool = False

    def to_dict(self) -> dict:
        return {
            "updatedBy": self.updated_by,
            "updatedAt": _iso(self.updated_at),
            "markedPresentCount": self.marked_present_count,
            "isLocked": self.is_locked,
        }


@dataclass(frozen=True)
class StatusChange:
    """A requested status for one student (admin or monitor input)."""

    student_id: int
    status: AttendanceMark


@dataclass(frozen=True)
class AttendanceSheet:
    """Domain entity: the attendance of one class on one calendar day."""

    sheet_id: int
    class_id: int
    sheet_date: date
    created_by: int
    expected_present_count: int
    permission: MonitorPermission
    records: tuple[StudentAttendanceRecord, ...] = field(default_factory=tuple)
    status: SheetStatus = SheetStatus.DRAFT
    monitor_update: MonitorUpdate = field(default_factory=MonitorUpdate)
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def present_count(self) -> int:
        return sum(1 for r in self.records if r.status == AttendanceMark.PRESENT)

    @property
    def total_students(self) -> int:
        return len(self.records)

    @property
    def attendance_percentage(self) -> int:
        return percentage(self.present_count, self.total_students)

    @property
    def is_locked(self) -> bool:
        return self.monitor_update.is_locked

    def record_for(self, student_id: int) -> Optional[StudentAttendanceRecord]:
        for r in self.records:
            if r.student_id == int(student_id):
                return r
        return None

    def to_dict(self) -> dict:
        return {
            "id": self.sheet_id,
            "classId": self.class_id,
            "date": self.sheet_date.isoformat(),
            "createdBy": self.created_by,
            "expectedPresentCount": self.expected_present_count,
            "monitorPermissions": self.permission.to_dict(),
            "studentAttendance": [r.to_dict() for r in self.records],
            "status": self.status.value,
            "monitorUpdate": self.monitor_update.to_dict(),
            "notes": self.notes,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
            "actualPresentCount": self.present_count,
            "totalStudents": self.total_students,
            "attendancePercentage": self.attendance_percentage,
        }


@dataclass(frozen=True)
class SheetSummaryRow:
    """Read-model for analytics (one row per sheet, counts precomputed by the query)."""

    sheet_id: int
    class_id: int
    class_name: str
    sheet_date: date
    total_students: int
    present_count: int

    @property
    def absent_count(self) -> int:
        return self.total_students - self.present_count

    @property
    def attendance_percentage(self) -> int:
        return percentage(self.present_count, self.total_students)
