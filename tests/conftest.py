from __future__ import annotations

from datetime import date, datetime

import pytest

from src.tuition_portal.tuition_portal.attendance.analytics import AttendanceAnalyticsService
from src.tuition_portal.tuition_portal.attendance.service import AttendanceService
from src.tuition_portal.tuition_portal.classes.service import ClassService
from src.tuition_portal.tuition_portal.container import wire_services
from src.tuition_portal.tuition_portal.core.enums import Role
from src.tuition_portal.tuition_portal.students.service import StudentService
from src.tuition_portal.tuition_portal.users.service import AuthService
from tests.support import (
    ADMIN_USER,
    CLASS_WITH_MONITORS,
    FakeAttendanceRepo,
    FakeClassesRepo,
    FakeStudentsRepo,
    FakeUsersRepo,
)


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 3, 10, 9, 0, 0)


@pytest.fixture
def today(fixed_now) -> date:
    return fixed_now.date()


@pytest.fixture
def users_repo():
    return FakeUsersRepo()


@pytest.fixture
def students_repo():
    return FakeStudentsRepo()


@pytest.fixture
def classes_repo():
    return FakeClassesRepo()


@pytest.fixture
def attendance_repo(classes_repo):
    return FakeAttendanceRepo(classes_repo)


@pytest.fixture
def attendance_service(attendance_repo, classes_repo, students_repo):
    return AttendanceService(attendance_repo, classes_repo, students_repo)


@pytest.fixture
def analytics_service(attendance_repo, classes_repo, students_repo):
    return AttendanceAnalyticsService(attendance_repo, classes_repo, students_repo)


@pytest.fixture
def student_service(students_repo):
    return StudentService(students_repo)


@pytest.fixture
def class_service(classes_repo, students_repo):
    return ClassService(classes_repo, students_repo)


@pytest.fixture
def auth_service(users_repo, students_repo):
    return AuthService(users_repo, students_repo)


@pytest.fixture
def container(users_repo, students_repo, classes_repo, attendance_repo):
    return wire_services(
        users_repo=users_repo,
        students_repo=students_repo,
        classes_repo=classes_repo,
        attendance_repo=attendance_repo,
    )


@pytest.fixture
def make_sheet(attendance_service, today):
    """Create a sheet as the admin; defaults to the monitored class and today's date."""

    def _make(permissions=None, *, expected=2, class_id=CLASS_WITH_MONITORS, on=None, notes=None):
        return attendance_service.create_sheet(
            current_role=Role.ADMIN,
            created_by=ADMIN_USER,
            class_id=class_id,
            expected_present_count=expected,
            permissions=permissions if permissions is not None else {"mode": "all_monitors"},
            notes=notes,
            today=on or today,
        )

    return _make


