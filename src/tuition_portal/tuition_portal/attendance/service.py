from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Any, Optional, Sequence

from ..classes.model import ClassInfo
from ..classes.repository import ClassRepository
from ..common.datetime_utils import month_bounds, now_local
from ..common.validators import optional_notes, require_int, require_month, require_non_negative_int, require_year
from ..core.enums import AttendanceMark, Role, SheetStatus
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..students.repository import StudentRepository
from .factory import MonitorPolicyFactory
from .model import AttendanceSheet, MonitorPermission, MonitorUpdate, StatusChange, StudentAttendanceRecord
from .permissions import check_permission_for_class, parse_permission, parse_status_changes
from .projection import Viewer, project_sheet
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SheetChanges:
    """Admin edit of a sheet; a field left as ``None`` is not touched."""

    expected_present_count: Optional[int] = None
    permission: Optional[MonitorPermission] = None
    status_changes: Optional[tuple[StatusChange, ...]] = None
    notes: Optional[str] = None
    notes_supplied: bool = False

    @classmethod
    def from_payload(cls, body: dict) -> "SheetChanges":
        expected = body.get("expectedPresentCount")
        permission = body.get("monitorPermissions")
        entries = body.get("studentAttendance")
        return cls(
            expected_present_count=(
                require_non_negative_int(expected, "Expected present count") if expected is not None else None
            ),
            permission=parse_permission(permission) if permission is not None else None,
            status_changes=tuple(parse_status_changes(entries, required=False)) if entries is not None else None,
            notes=optional_notes(body.get("notes")),
            notes_supplied="notes" in body,
        )


def apply_status_changes(
    records: Sequence[StudentAttendanceRecord],
    changes: Sequence[StatusChange],
    *,
    marked_by: int,
    marked_at: datetime,
) -> tuple[tuple[StudentAttendanceRecord, ...], list[StudentAttendanceRecord]]:
    """Return (all records, changed records). Students not on the sheet are ignored; the last entry wins."""
    latest: dict[int, AttendanceMark] = {}
    for change in changes:
        latest[change.student_id] = change.status

    result: list[StudentAttendanceRecord] = []
    changed: list[StudentAttendanceRecord] = []
    for record in records:
        if record.student_id in latest:
            record = replace(record, status=latest[record.student_id], marked_by=marked_by, marked_at=marked_at)
            changed.append(record)
        result.append(record)
    return tuple(result), changed


class AttendanceService:
    """Use cases around daily class attendance sheets."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        classes: ClassRepository,
        students: StudentRepository,
        *,
        policy_factory: MonitorPolicyFactory | None = None,
    ):
        self._attendance = attendance
        self._classes = classes
        self._students = students
        self._factory = policy_factory or MonitorPolicyFactory()

    def _get_sheet(self, sheet_id: int) -> AttendanceSheet:
        sheet = self._attendance.get_by_id(int(sheet_id))
        if not sheet:
            raise NotFoundError("Attendance sheet not found")
        return sheet

    def _get_class(self, class_id: int) -> ClassInfo:
        class_info = self._classes.get_by_id(int(class_id))
        if not class_info:
            raise NotFoundError("Class not found")
        return class_info

    @staticmethod
    def _require_staff(role: Role) -> None:
        if not role.is_staff:
            raise AuthorizationError("Access denied. Admin or moderator role required.")

    def create_sheet(
        self,
        *,
        current_role: Role,
        created_by: int,
        class_id: int,
        expected_present_count: Any,
        permissions: Any,
        notes: Optional[str] = None,
        today: Optional[date] = None,
    ) -> AttendanceSheet:
        self._require_staff(current_role)
        expected = require_non_negative_int(expected_present_count, "Expected present count")
        notes = optional_notes(notes)

        class_info = self._get_class(require_int(class_id, "Class id"))
        today = today or now_local().date()
        if self._attendance.get_for_class_and_date(class_info.class_id, today):
            raise ConflictError("Attendance sheet already exists for today for this class")

        permission = parse_permission(permissions)
        check_permission_for_class(permission, class_info)

        sheet_id = self._attendance.create_sheet(
            class_id=class_info.class_id,
            sheet_date=today,
            created_by=int(created_by),
            expected_present_count=expected,
            permission=permission,
            student_ids=class_info.enrolled_student_ids,
            notes=notes,
        )
        logger.info(
            "Attendance sheet %s created for class %s on %s (%s students, mode %s)",
            sheet_id,
            class_info.class_id,
            today,
            len(class_info.enrolled_student_ids),
            permission.mode.value,
        )
        return self._get_sheet(sheet_id)

    def admin_update(
        self,
        *,
        current_role: Role,
        admin_user_id: int,
        sheet_id: int,
        changes: SheetChanges,
        now: Optional[datetime] = None,
    ) -> AttendanceSheet:
        self._require_staff(current_role)
        now = now or now_local()
        sheet = self._get_sheet(sheet_id)

        permission = sheet.permission
        if changes.permission is not None:
            check_permission_for_class(changes.permission, self._get_class(sheet.class_id))
            permission = changes.permission

        records, changed = apply_status_changes(
            sheet.records, changes.status_changes or (), marked_by=int(admin_user_id), marked_at=now
        )
        updated = replace(
            sheet,
            expected_present_count=(
                changes.expected_present_count
                if changes.expected_present_count is not None
                else sheet.expected_present_count
            ),
            permission=permission,
            records=records,
            notes=changes.notes if changes.notes_supplied else sheet.notes,
            status=SheetStatus.COMPLETED,
        )

        if not self._attendance.save_admin_update(updated, changed):
            raise NotFoundError("Attendance sheet not found")

        logger.info("Attendance sheet %s updated by admin %s (%s marks)", sheet.sheet_id, admin_user_id, len(changed))
        return self._get_sheet(sheet.sheet_id)

    def monitor_update(
        self,
        *,
        user_id: int,
        sheet_id: int,
        entries: Any,
        now: Optional[datetime] = None,
    ) -> AttendanceSheet:
        status_changes = parse_status_changes(entries, required=True)
        now = now or now_local()

        monitor = self._students.get_by_user_id(int(user_id))
        if not monitor:
            raise NotFoundError("Monitor profile not found")

        sheet = self._get_sheet(sheet_id)
        class_info = self._get_class(sheet.class_id)
        if not class_info.is_monitor(monitor.student_id):
            logger.warning("Student %s is not a monitor of class %s", monitor.student_id, class_info.class_id)
            raise AuthorizationError("You are not a monitor of this class")

        if sheet.is_locked:
            logger.warning("Rejected monitor update on locked sheet %s by student %s", sheet.sheet_id, monitor.student_id)
            if sheet.monitor_update.updated_by == monitor.student_id:
                raise AuthorizationError(
                    "You have already updated this attendance sheet. Each monitor can only update once."
                )
            raise AuthorizationError(
                "Another monitor has already updated this attendance sheet. Only one monitor can update per sheet."
            )

        decision = self._factory.for_permission(sheet.permission).decide(
            permission=sheet.permission, monitor_id=monitor.student_id
        )
        if not decision.allowed:
            logger.warning("Monitor %s denied on sheet %s (%s)", monitor.student_id, sheet.sheet_id, sheet.permission.mode.value)
            raise AuthorizationError(decision.reason or "You do not have permission to update this attendance sheet")

        _, changed = apply_status_changes(sheet.records, status_changes, marked_by=int(user_id), marked_at=now)
        tally = sum(1 for r in changed if r.status == AttendanceMark.PRESENT)
        if tally != sheet.expected_present_count:
            logger.warning(
                "Monitor %s count mismatch on sheet %s: %s present, %s expected",
                monitor.student_id,
                sheet.sheet_id,
                tally,
                sheet.expected_present_count,
            )
            raise ValidationError(
                f"Present count ({tally}) does not match admin's expected count ({sheet.expected_present_count}). "
                "Please check carefully and correct the attendance sheet."
            )

        lock = MonitorUpdate(updated_by=monitor.student_id, updated_at=now, marked_present_count=tally, is_locked=True)
        if not self._attendance.apply_monitor_update(sheet_id=sheet.sheet_id, monitor_update=lock, changed=changed):
            logger.warning("Monitor %s lost the race for sheet %s", monitor.student_id, sheet.sheet_id)
            raise AuthorizationError(
                "Another monitor has already updated this attendance sheet. Only one monitor can update per sheet."
            )

        logger.info("Attendance sheet %s updated and locked by monitor %s", sheet.sheet_id, monitor.student_id)
        return self._get_sheet(sheet.sheet_id)

    def _resolve_viewer(self, *, user_id: int, role: Role, class_info: Optional[ClassInfo]) -> Viewer:
        if role.is_staff:
            return Viewer(role=role)
        if role != Role.STUDENT:
            raise AuthorizationError("Access denied")

        student = self._students.get_by_user_id(int(user_id))
        if not student:
            raise NotFoundError("Student profile not found")
        return Viewer(
            role=role,
            student_id=student.student_id,
            is_class_monitor=bool(class_info and class_info.is_monitor(student.student_id)),
        )

    def get_sheet_for_viewer(self, *, user_id: int, role: Role, sheet_id: int) -> dict:
        sheet = self._get_sheet(sheet_id)
        viewer = self._resolve_viewer(user_id=user_id, role=role, class_info=self._classes.get_by_id(sheet.class_id))
        return project_sheet(sheet, viewer)

    def list_class_sheets_for_viewer(
        self,
        *,
        user_id: int,
        role: Role,
        class_id: int,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> list[dict]:
        class_info = self._get_class(class_id)

        start = end = None
        if month is not None or year is not None:
            if month is None or year is None:
                raise ValidationError("Month and year must be provided together")
            start, end = month_bounds(require_year(year), require_month(month))

        viewer = self._resolve_viewer(user_id=user_id, role=role, class_info=class_info)
        sheets = self._attendance.list_for_class(class_info.class_id, start=start, end=end)
        return [project_sheet(s, viewer) for s in sheets]

    def delete_sheet(self, *, current_role: Role, sheet_id: int) -> None:
        self._require_staff(current_role)
        if not self._attendance.delete_sheet(int(sheet_id)):
            raise NotFoundError("Attendance sheet not found")
        logger.info("Attendance sheet %s deleted", sheet_id)
