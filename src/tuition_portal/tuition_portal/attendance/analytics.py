from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..classes.repository import ClassRepository
from ..common.datetime_utils import month_bounds, now_local, year_bounds
from ..common.stats import percentage, round_half_up
from ..common.validators import require_month, require_year
from ..core.enums import AttendanceMark, Role
from ..core.exceptions import AuthorizationError, NotFoundError
from ..students.repository import StudentRepository
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttendanceReport:
    year: int
    monthly: list[dict]
    class_wise: list[dict]

    def to_dict(self) -> dict:
        return {"year": self.year, "monthlyData": self.monthly, "classWiseData": self.class_wise}


class AttendanceAnalyticsService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        classes: ClassRepository,
        students: StudentRepository,
    ):
        self._attendance = attendance
        self._classes = classes
        self._students = students

    def build_year_report(self, *, current_role: Role, year: Optional[int] = None) -> AttendanceReport:
        if not current_role.is_staff:
            raise AuthorizationError("Access denied. Admin or moderator role required.")

        year = require_year(year) if year is not None else now_local().year
        start, end = year_bounds(year)
        rows = self._attendance.list_summaries(start=start, end=end)

        months: dict[int, dict] = {}
        classes: dict[int, dict] = {}
        for r in rows:
            m = months.get(r.sheet_date.month)
            if not m:
                m = {"month": r.sheet_date.month, "totalSheets": 0, "totalStudents": 0, "totalPresent": 0, "totalAbsent": 0}
                months[r.sheet_date.month] = m
            m["totalSheets"] += 1
            m["totalStudents"] += r.total_students
            m["totalPresent"] += r.present_count
            m["totalAbsent"] += r.absent_count

            c = classes.get(r.class_id)
            if not c:
                c = {
                    "classId": r.class_id,
                    "className": r.class_name,
                    "totalSheets": 0,
                    "totalStudents": 0,
                    "totalPresent": 0,
                    "totalAbsent": 0,
                    "percentages": [],
                }
                classes[r.class_id] = c
            c["totalSheets"] += 1
            c["totalStudents"] += r.total_students
            c["totalPresent"] += r.present_count
            c["totalAbsent"] += r.absent_count
            # Mean of per-sheet ratios, not the pooled ratio.
            c["percentages"].append(r.present_count * 100 / r.total_students if r.total_students else 0)

        monthly = []
        for m in sorted(months.values(), key=lambda x: x["month"]):
            m["attendancePercentage"] = percentage(m["totalPresent"], m["totalStudents"])
            monthly.append(m)

        class_wise = []
        for c in classes.values():
            ratios = c.pop("percentages")
            c["averageAttendance"] = round_half_up(sum(ratios) / len(ratios)) if ratios else 0
            class_wise.append(c)
        class_wise.sort(key=lambda x: (-x["averageAttendance"], x["classId"]))

        logger.debug("Analytics for %s: %s sheets", year, len(rows))
        return AttendanceReport(year=year, monthly=monthly, class_wise=class_wise)

    def student_stats(
        self,
        *,
        user_id: int,
        current_role: Role,
        student_id: int,
        class_id: int,
        month: Optional[int] = None,
        year: Optional[int] = None,
        today: Optional[date] = None,
    ) -> dict:
        if not current_role.is_staff:
            if current_role != Role.STUDENT:
                raise AuthorizationError("Access denied")
            own = self._students.get_by_user_id(int(user_id))
            if not own or own.student_id != int(student_id):
                raise AuthorizationError("You can only view your own attendance")

        today = today or now_local().date()
        month = require_month(month) if month is not None else today.month
        year = require_year(year) if year is not None else today.year

        student = self._students.get_by_id(int(student_id))
        if not student:
            raise NotFoundError("Student not found")
        class_info = self._classes.get_by_id(int(class_id))
        if not class_info:
            raise NotFoundError("Class not found")

        start, end = month_bounds(year, month)
        total = present = 0
        for sheet in self._attendance.list_for_class(class_info.class_id, start=start, end=end):
            record = sheet.record_for(student.student_id)
            if not record:
                continue
            total += 1
            if record.status == AttendanceMark.PRESENT:
                present += 1

        return {
            "studentId": student.student_id,
            "classId": class_info.class_id,
            "month": month,
            "year": year,
            "totalSheets": total,
            "presentCount": present,
            "absentCount": total - present,
            "attendancePercentage": percentage(present, total),
        }
