from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import RegistrationStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Student
from .repository import StudentRepository

_COLUMNS = """
    student_id, user_id, student_code, first_name, last_name, selected_grade,
    status, action_by, action_at, action_note
"""


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_student(r: dict) -> Student:
        return Student(
            student_id=int(r["student_id"]),
            user_id=int(r["user_id"]),
            student_code=r["student_code"],
            first_name=r["first_name"],
            last_name=r["last_name"],
            selected_grade=r["selected_grade"],
            status=RegistrationStatus(r["status"]),
            action_by=r.get("action_by"),
            action_at=r.get("action_at"),
            action_note=r.get("action_note"),
        )

    def get_by_id(self, student_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE student_id=%s", (int(student_id),))
            r = fetchone(cur)
            return self._to_student(r) if r else None

    def get_by_user_id(self, user_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE user_id=%s", (int(user_id),))
            r = fetchone(cur)
            return self._to_student(r) if r else None

    def list_by_status(self, status: RegistrationStatus, *, limit: int = 500) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM students
                WHERE status=%s
                ORDER BY created_at ASC
                LIMIT %s
                """,
                (status.value, int(limit)),
            )
            return [self._to_student(r) for r in fetchall(cur)]

    def decide_registration(
        self,
        *,
        student_id: int,
        status: RegistrationStatus,
        decided_by: int,
        decided_at: datetime,
        note: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE students
                SET status=%s, action_by=%s, action_at=%s, action_note=%s
                WHERE student_id=%s AND status=%s
                """,
                (
                    status.value,
                    int(decided_by),
                    decided_at,
                    note,
                    int(student_id),
                    RegistrationStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0
