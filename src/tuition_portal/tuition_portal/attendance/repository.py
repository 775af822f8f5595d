from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import (
    AttendanceSheet,
    MonitorPermission,
    MonitorUpdate,
    SheetSummaryRow,
    StudentAttendanceRecord,
)


class AttendanceRepository(Protocol):
    def get_by_id(self, sheet_id: int) -> Optional[AttendanceSheet]: ...

    def get_for_class_and_date(self, class_id: int, sheet_date: date) -> Optional[AttendanceSheet]: ...

    def list_for_class(
        self, class_id: int, *, start: Optional[date] = None, end: Optional[date] = None
    ) -> Sequence[AttendanceSheet]:
        """Newest first."""
        ...

    def create_sheet(
        self,
        *,
        class_id: int,
        sheet_date: date,
        created_by: int,
        expected_present_count: int,
        permission: MonitorPermission,
        student_ids: Sequence[int],
        notes: Optional[str] = None,
    ) -> int:
        """Raises ConflictError when the class already has a sheet that day."""
        ...

    def save_admin_update(self, sheet: AttendanceSheet, changed: Sequence[StudentAttendanceRecord]) -> bool: ...

    def apply_monitor_update(
        self, *, sheet_id: int, monitor_update: MonitorUpdate, changed: Sequence[StudentAttendanceRecord]
    ) -> bool:
        """Write only if the sheet is still unlocked; False means another update got there first."""
        ...

    def delete_sheet(self, sheet_id: int) -> bool: ...

    def list_summaries(
        self, *, start: date, end: date, class_id: Optional[int] = None
    ) -> Sequence[SheetSummaryRow]: ...
