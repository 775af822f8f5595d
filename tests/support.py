"""In-memory repositories and sample data shared by the test suite."""

from __future__ import annotations

from dataclasses import replace

from werkzeug.security import generate_password_hash

from src.tuition_portal.tuition_portal.attendance.model import AttendanceSheet, SheetSummaryRow, StudentAttendanceRecord
from src.tuition_portal.tuition_portal.classes.model import ClassInfo
from src.tuition_portal.tuition_portal.core.enums import (
    AttendanceMark,
    ClassType,
    RegistrationStatus,
    Role,
    SheetStatus,
)
from src.tuition_portal.tuition_portal.core.exceptions import ConflictError
from src.tuition_portal.tuition_portal.students.model import Student
from src.tuition_portal.tuition_portal.users.model import User

ADMIN_USER = 1
MODERATOR_USER = 2
PLAIN_USER = 99

# student profile id -> login user id
NIMAL, KAMALA, SUNIL, RAVI = 101, 102, 103, 104
USER_OF = {NIMAL: 10, KAMALA: 11, SUNIL: 12, RAVI: 13}

CLASS_WITH_MONITORS = 7
CLASS_WITHOUT_MONITORS = 8

PASSWORD = "secret123"


class FakeUsersRepo:
    def __init__(self):
        pw = generate_password_hash(PASSWORD, method="pbkdf2:sha256:1000")
        self._users = {
            ADMIN_USER: User(ADMIN_USER, "Admin Demo", "admin@example.com", pw, Role.ADMIN),
            MODERATOR_USER: User(MODERATOR_USER, "Moderator Demo", "moderator@example.com", pw, Role.MODERATOR),
            10: User(10, "Nimal Perera", "nimal@example.com", pw, Role.STUDENT),
            11: User(11, "Kamala Silva", "kamala@example.com", pw, Role.STUDENT),
            12: User(12, "Sunil Fernando", "sunil@example.com", pw, Role.STUDENT),
            13: User(13, "Ravi Jay", "ravi@example.com", pw, Role.STUDENT),
            PLAIN_USER: User(PLAIN_USER, "Guest", "guest@example.com", pw, Role.USER),
            98: User(98, "Old Account", "old@example.com", pw, Role.ADMIN, is_active=False),
        }

    def get_by_id(self, user_id):
        return self._users.get(int(user_id))

    def get_by_email(self, email):
        for u in self._users.values():
            if u.email == email.lower():
                return u
        return None


class FakeStudentsRepo:
    def __init__(self):
        def student(sid, first, last, status):
            return Student(sid, USER_OF[sid], f"25100{sid - 100:02d}", first, last, "Grade 10", status)

        self._students = {
            NIMAL: student(NIMAL, "Nimal", "Perera", RegistrationStatus.APPROVED),
            KAMALA: student(KAMALA, "Kamala", "Silva", RegistrationStatus.APPROVED),
            SUNIL: student(SUNIL, "Sunil", "Fernando", RegistrationStatus.APPROVED),
            RAVI: student(RAVI, "Ravi", "Jay", RegistrationStatus.PENDING),
        }

    def get_by_id(self, student_id):
        return self._students.get(int(student_id))

    def get_by_user_id(self, user_id):
        for s in self._students.values():
            if s.user_id == int(user_id):
                return s
        return None

    def list_by_status(self, status, *, limit=500):
        return [s for s in self._students.values() if s.status == status][:limit]

    def decide_registration(self, *, student_id, status, decided_by, decided_at, note):
        s = self._students.get(int(student_id))
        if not s or s.status != RegistrationStatus.PENDING:
            return False
        self._students[s.student_id] = replace(
            s, status=status, action_by=decided_by, action_at=decided_at, action_note=note
        )
        return True


class FakeClassesRepo:
    def __init__(self):
        self._classes = {
            CLASS_WITH_MONITORS: ClassInfo(
                CLASS_WITH_MONITORS,
                "Grade 10",
                "Theory",
                ClassType.NORMAL,
                "Hall A",
                capacity=4,
                enrolled_student_ids=(NIMAL, KAMALA, SUNIL),
                monitor_ids=(NIMAL, KAMALA),
            ),
            CLASS_WITHOUT_MONITORS: ClassInfo(
                CLASS_WITHOUT_MONITORS,
                "Grade 11",
                "Revision",
                ClassType.SPECIAL,
                "Hall B",
                capacity=1,
                enrolled_student_ids=(NIMAL,),
            ),
        }

    def get_by_id(self, class_id):
        return self._classes.get(int(class_id))

    def list_active(self):
        return [c for c in self._classes.values() if c.is_active]

    def enroll_student(self, *, class_id, student_id):
        c = self._classes[int(class_id)]
        if c.is_enrolled(student_id):
            return False
        self._classes[c.class_id] = replace(c, enrolled_student_ids=c.enrolled_student_ids + (int(student_id),))
        return True

    def add_monitor(self, *, class_id, student_id):
        c = self._classes[int(class_id)]
        if c.is_monitor(student_id):
            return False
        self._classes[c.class_id] = replace(c, monitor_ids=c.monitor_ids + (int(student_id),))
        return True

    def remove_monitor(self, *, class_id, student_id):
        c = self._classes[int(class_id)]
        if not c.is_monitor(student_id):
            return False
        self._classes[c.class_id] = replace(c, monitor_ids=tuple(m for m in c.monitor_ids if m != int(student_id)))
        return True


class FakeAttendanceRepo:
    """In-memory sheets with the same unique-day and lock semantics as the MySQL tables."""

    def __init__(self, classes: FakeClassesRepo):
        self._classes = classes
        self._next_id = 1
        self.sheets: dict[int, AttendanceSheet] = {}
        # Simulates another monitor committing between our read and our write.
        self.concurrent_lock_by = None

    def get_by_id(self, sheet_id):
        return self.sheets.get(int(sheet_id))

    def get_for_class_and_date(self, class_id, sheet_date):
        for s in self.sheets.values():
            if s.class_id == int(class_id) and s.sheet_date == sheet_date:
                return s
        return None

    def list_for_class(self, class_id, *, start=None, end=None):
        rows = [
            s
            for s in self.sheets.values()
            if s.class_id == int(class_id) and (start is None or start <= s.sheet_date <= end)
        ]
        return sorted(rows, key=lambda s: s.sheet_date, reverse=True)

    def create_sheet(self, *, class_id, sheet_date, created_by, expected_present_count, permission, student_ids, notes=None):
        if self.get_for_class_and_date(class_id, sheet_date):
            raise ConflictError("Attendance sheet already exists for today for this class")
        sid = self._next_id
        self._next_id += 1
        self.sheets[sid] = AttendanceSheet(
            sheet_id=sid,
            class_id=int(class_id),
            sheet_date=sheet_date,
            created_by=int(created_by),
            expected_present_count=int(expected_present_count),
            permission=permission,
            records=tuple(StudentAttendanceRecord(student_id=int(s)) for s in student_ids),
            notes=notes,
        )
        return sid

    def _merge(self, sheet, changed):
        by_id = {r.student_id: r for r in changed}
        return tuple(by_id.get(r.student_id, r) for r in sheet.records)

    def save_admin_update(self, sheet, changed):
        current = self.sheets.get(sheet.sheet_id)
        if not current:
            return False
        self.sheets[sheet.sheet_id] = replace(
            current,
            expected_present_count=sheet.expected_present_count,
            permission=sheet.permission,
            status=sheet.status,
            notes=sheet.notes,
            records=self._merge(current, changed),
        )
        return True

    def apply_monitor_update(self, *, sheet_id, monitor_update, changed):
        if self.concurrent_lock_by is not None:
            other = self.sheets[int(sheet_id)]
            self.sheets[other.sheet_id] = replace(
                other,
                status=SheetStatus.UPDATED,
                monitor_update=replace(monitor_update, updated_by=self.concurrent_lock_by),
            )
            self.concurrent_lock_by = None

        current = self.sheets.get(int(sheet_id))
        if not current or current.is_locked:
            return False
        self.sheets[current.sheet_id] = replace(
            current,
            status=SheetStatus.UPDATED,
            monitor_update=monitor_update,
            records=self._merge(current, changed),
        )
        return True

    def delete_sheet(self, sheet_id):
        return self.sheets.pop(int(sheet_id), None) is not None

    def list_summaries(self, *, start, end, class_id=None):
        rows = []
        for s in sorted(self.sheets.values(), key=lambda x: (x.sheet_date, x.sheet_id)):
            if not start <= s.sheet_date <= end or (class_id is not None and s.class_id != class_id):
                continue
            c = self._classes.get_by_id(s.class_id)
            rows.append(
                SheetSummaryRow(
                    sheet_id=s.sheet_id,
                    class_id=s.class_id,
                    class_name=c.display_name,
                    sheet_date=s.sheet_date,
                    total_students=s.total_students,
                    present_count=s.present_count,
                )
            )
        return rows


def marks(*pairs):
    """[(student_id, "Present"), ...] -> request payload entries."""
    return [{"studentId": sid, "status": status} for sid, status in pairs]


def present(*student_ids):
    return marks(*[(sid, AttendanceMark.PRESENT.value) for sid in student_ids])
