from __future__ import annotations

from collections import defaultdict
from typing import Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..core.enums import ClassType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key, placeholders
from .model import ClassInfo
from .repository import ClassRepository


class MySQLClassRepository(ClassRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_class(r: dict, enrolled: Sequence[int], monitors: Sequence[int]) -> ClassInfo:
        return ClassInfo(
            class_id=int(r["class_id"]),
            grade=r["grade"],
            category=r["category"],
            class_type=ClassType(r["class_type"]),
            venue=r["venue"],
            capacity=int(r["capacity"]),
            is_active=bool(r["is_active"]),
            enrolled_student_ids=tuple(enrolled),
            monitor_ids=tuple(monitors),
        )

    @staticmethod
    def _members(cur, table: str, class_ids: Sequence[int]) -> dict[int, list[int]]:
        members: dict[int, list[int]] = defaultdict(list)
        if not class_ids:
            return members
        cur.execute(
            f"SELECT class_id, student_id FROM {table} WHERE class_id IN ({placeholders(class_ids)}) ORDER BY student_id",
            tuple(class_ids),
        )
        for r in fetchall(cur):
            members[int(r["class_id"])].append(int(r["student_id"]))
        return members

    def get_by_id(self, class_id: int) -> Optional[ClassInfo]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT class_id, grade, category, class_type, venue, capacity, is_active
                FROM classes
                WHERE class_id=%s
                """,
                (int(class_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            enrolled = self._members(cur, "class_enrollments", [int(class_id)])
            monitors = self._members(cur, "class_monitors", [int(class_id)])
            return self._to_class(r, enrolled[int(class_id)], monitors[int(class_id)])

    def list_active(self) -> Sequence[ClassInfo]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT class_id, grade, category, class_type, venue, capacity, is_active
                FROM classes
                WHERE is_active=1
                ORDER BY grade, category
                """
            )
            rows = fetchall(cur)
            ids = [int(r["class_id"]) for r in rows]
            enrolled = self._members(cur, "class_enrollments", ids)
            monitors = self._members(cur, "class_monitors", ids)
            return [self._to_class(r, enrolled[int(r["class_id"])], monitors[int(r["class_id"])]) for r in rows]

    def _insert_member(self, table: str, class_id: int, student_id: int) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"INSERT INTO {table}(class_id, student_id) VALUES(%s,%s)",
                    (int(class_id), int(student_id)),
                )
                return cur.rowcount > 0
        except IntegrityError as e:
            if is_duplicate_key(e):
                return False
            raise

    def enroll_student(self, *, class_id: int, student_id: int) -> bool:
        return self._insert_member("class_enrollments", class_id, student_id)

    def add_monitor(self, *, class_id: int, student_id: int) -> bool:
        return self._insert_member("class_monitors", class_id, student_id)

    def remove_monitor(self, *, class_id: int, student_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM class_monitors WHERE class_id=%s AND student_id=%s",
                (int(class_id), int(student_id)),
            )
            return cur.rowcount > 0
