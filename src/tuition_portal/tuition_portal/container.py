from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.analytics import AttendanceAnalyticsService
from .attendance.factory import MonitorPolicyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .classes.mysql_class_repository import MySQLClassRepository
from .classes.repository import ClassRepository
from .classes.service import ClassService
from .database.connection import DBConfig, DatabaseConnection
from .students.mysql_student_repository import MySQLStudentRepository
from .students.repository import StudentRepository
from .students.service import StudentService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    students_repo: StudentRepository
    classes_repo: ClassRepository
    attendance_repo: AttendanceRepository

    auth_service: AuthService
    student_service: StudentService
    class_service: ClassService
    attendance_service: AttendanceService
    analytics_service: AttendanceAnalyticsService

    conn: Optional[DatabaseConnection] = None


def wire_services(
    *,
    users_repo: UserRepository,
    students_repo: StudentRepository,
    classes_repo: ClassRepository,
    attendance_repo: AttendanceRepository,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Build every service on top of the given repositories (MySQL or in-memory)."""
    return Container(
        users_repo=users_repo,
        students_repo=students_repo,
        classes_repo=classes_repo,
        attendance_repo=attendance_repo,
        auth_service=AuthService(users_repo, students_repo),
        student_service=StudentService(students_repo),
        class_service=ClassService(classes_repo, students_repo),
        attendance_service=AttendanceService(
            attendance_repo,
            classes_repo,
            students_repo,
            policy_factory=MonitorPolicyFactory(),
        ),
        analytics_service=AttendanceAnalyticsService(attendance_repo, classes_repo, students_repo),
        conn=conn,
    )


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))
    return wire_services(
        users_repo=MySQLUserRepository(conn),
        students_repo=MySQLStudentRepository(conn),
        classes_repo=MySQLClassRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        conn=conn,
    )
