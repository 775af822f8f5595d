from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..core.enums import AttendanceMark, PermissionMode, SheetStatus
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key, placeholders
from .model import (
    AttendanceSheet,
    MonitorPermission,
    MonitorUpdate,
    SheetSummaryRow,
    StudentAttendanceRecord,
)
from .repository import AttendanceRepository

_SHEET_COLUMNS = """
    sheet_id, class_id, sheet_date, created_by, expected_present_count, permission_mode, status,
    monitor_updated_by, monitor_updated_at, monitor_marked_present_count, is_locked, notes,
    created_at, updated_at
"""


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _load_sheets(cur, where: str, params: tuple, order_by: str = "sheet_date DESC") -> list[AttendanceSheet]:
        cur.execute(f"SELECT {_SHEET_COLUMNS} FROM attendance_sheets WHERE {where} ORDER BY {order_by}", params)
        rows = fetchall(cur)
        if not rows:
            return []

        ids = [int(r["sheet_id"]) for r in rows]
        records: dict[int, list[StudentAttendanceRecord]] = defaultdict(list)
        cur.execute(
            f"""
            SELECT sheet_id, student_id, status, marked_by, marked_at
            FROM attendance_records
            WHERE sheet_id IN ({placeholders(ids)})
            ORDER BY sheet_id, position
            """,
            tuple(ids),
        )
        for r in fetchall(cur):
            records[int(r["sheet_id"])].append(
                StudentAttendanceRecord(
                    student_id=int(r["student_id"]),
                    status=AttendanceMark(r["status"]),
                    marked_by=int(r["marked_by"]) if r.get("marked_by") is not None else None,
                    marked_at=r.get("marked_at"),
                )
            )

        selected: dict[int, list[int]] = defaultdict(list)
        cur.execute(
            f"""
            SELECT sheet_id, student_id
            FROM attendance_sheet_monitors
            WHERE sheet_id IN ({placeholders(ids)})
            ORDER BY sheet_id, student_id
            """,
            tuple(ids),
        )
        for r in fetchall(cur):
            selected[int(r["sheet_id"])].append(int(r["student_id"]))

        sheets = []
        for r in rows:
            sheet_id = int(r["sheet_id"])
            mode = PermissionMode(r["permission_mode"])
            sheets.append(
                AttendanceSheet(
                    sheet_id=sheet_id,
                    class_id=int(r["class_id"]),
                    sheet_date=r["sheet_date"],
                    created_by=int(r["created_by"]),
                    expected_present_count=int(r["expected_present_count"]),
                    permission=MonitorPermission(
                        mode=mode,
                        selected_monitor_ids=tuple(selected[sheet_id]) if mode == PermissionMode.SELECTED else (),
                    ),
                    records=tuple(records[sheet_id]),
                    status=SheetStatus(r["status"]),
                    monitor_update=MonitorUpdate(
                        updated_by=int(r["monitor_updated_by"]) if r.get("monitor_updated_by") is not None else None,
                        updated_at=r.get("monitor_updated_at"),
                        marked_present_count=(
                            int(r["monitor_marked_present_count"])
                            if r.get("monitor_marked_present_count") is not None
                            else None
                        ),
                        is_locked=bool(r["is_locked"]),
                    ),
                    notes=r.get("notes"),
                    created_at=r.get("created_at"),
                    updated_at=r.get("updated_at"),
                )
            )
        return sheets

    @staticmethod
    def _replace_selected_monitors(cur, sheet_id: int, permission: MonitorPermission) -> None:
        cur.execute("DELETE FROM attendance_sheet_monitors WHERE sheet_id=%s", (sheet_id,))
        if permission.mode == PermissionMode.SELECTED and permission.selected_monitor_ids:
            cur.executemany(
                "INSERT INTO attendance_sheet_monitors(sheet_id, student_id) VALUES(%s,%s)",
                [(sheet_id, m) for m in permission.selected_monitor_ids],
            )

    @staticmethod
    def _write_records(cur, sheet_id: int, changed: Sequence[StudentAttendanceRecord]) -> None:
        if not changed:
            return
        cur.executemany(
            """
            UPDATE attendance_records
            SET status=%s, marked_by=%s, marked_at=%s
            WHERE sheet_id=%s AND student_id=%s
            """,
            [(r.status.value, r.marked_by, r.marked_at, sheet_id, r.student_id) for r in changed],
        )

    def get_by_id(self, sheet_id: int) -> Optional[AttendanceSheet]:
        with db_cursor(self._conn_factory) as (_, cur):
            sheets = self._load_sheets(cur, "sheet_id=%s", (int(sheet_id),))
            return sheets[0] if sheets else None

    def get_for_class_and_date(self, class_id: int, sheet_date: date) -> Optional[AttendanceSheet]:
        with db_cursor(self._conn_factory) as (_, cur):
            sheets = self._load_sheets(cur, "class_id=%s AND sheet_date=%s", (int(class_id), sheet_date))
            return sheets[0] if sheets else None

    def list_for_class(
        self, class_id: int, *, start: Optional[date] = None, end: Optional[date] = None
    ) -> Sequence[AttendanceSheet]:
        where = "class_id=%s"
        params: list = [int(class_id)]
        if start and end:
            where += " AND sheet_date BETWEEN %s AND %s"
            params += [start, end]
        with db_cursor(self._conn_factory) as (_, cur):
            return self._load_sheets(cur, where, tuple(params))

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
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_sheets(
                        class_id, sheet_date, created_by, expected_present_count, permission_mode, status, notes
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(class_id),
                        sheet_date,
                        int(created_by),
                        int(expected_present_count),
                        permission.mode.value,
                        SheetStatus.DRAFT.value,
                        notes,
                    ),
                )
                sheet_id = int(cur.lastrowid)
                self._replace_selected_monitors(cur, sheet_id, permission)
                if student_ids:
                    cur.executemany(
                        "INSERT INTO attendance_records(sheet_id, student_id, position, status) VALUES(%s,%s,%s,%s)",
                        [(sheet_id, int(s), i, AttendanceMark.ABSENT.value) for i, s in enumerate(student_ids)],
                    )
                return sheet_id
        except IntegrityError as e:
            if is_duplicate_key(e):
                raise ConflictError("Attendance sheet already exists for today for this class") from e
            raise

    def save_admin_update(self, sheet: AttendanceSheet, changed: Sequence[StudentAttendanceRecord]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT sheet_id FROM attendance_sheets WHERE sheet_id=%s FOR UPDATE", (sheet.sheet_id,))
            if not fetchone(cur):
                return False
            cur.execute(
                """
                UPDATE attendance_sheets
                SET expected_present_count=%s, permission_mode=%s, status=%s, notes=%s
                WHERE sheet_id=%s
                """,
                (
                    sheet.expected_present_count,
                    sheet.permission.mode.value,
                    sheet.status.value,
                    sheet.notes,
                    sheet.sheet_id,
                ),
            )
            self._replace_selected_monitors(cur, sheet.sheet_id, sheet.permission)
            self._write_records(cur, sheet.sheet_id, changed)
            return True

    def apply_monitor_update(
        self, *, sheet_id: int, monitor_update: MonitorUpdate, changed: Sequence[StudentAttendanceRecord]
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_sheets
                SET status=%s, monitor_updated_by=%s, monitor_updated_at=%s,
                    monitor_marked_present_count=%s, is_locked=1
                WHERE sheet_id=%s AND is_locked=0
                """,
                (
                    SheetStatus.UPDATED.value,
                    monitor_update.updated_by,
                    monitor_update.updated_at,
                    monitor_update.marked_present_count,
                    int(sheet_id),
                ),
            )
            if cur.rowcount == 0:
                return False
            self._write_records(cur, int(sheet_id), changed)
            return True

    def delete_sheet(self, sheet_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_sheets WHERE sheet_id=%s", (int(sheet_id),))
            return cur.rowcount > 0

    def list_summaries(
        self, *, start: date, end: date, class_id: Optional[int] = None
    ) -> Sequence[SheetSummaryRow]:
        where = "s.sheet_date BETWEEN %s AND %s"
        params: list = [start, end]
        if class_id is not None:
            where += " AND s.class_id=%s"
            params.append(int(class_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT s.sheet_id, s.class_id, c.grade, c.category, s.sheet_date,
                       COUNT(r.student_id) AS total_students,
                       COALESCE(SUM(r.status='Present'), 0) AS present_count
                FROM attendance_sheets s
                JOIN classes c ON c.class_id = s.class_id
                LEFT JOIN attendance_records r ON r.sheet_id = s.sheet_id
                WHERE {where}
                GROUP BY s.sheet_id, s.class_id, c.grade, c.category, s.sheet_date
                ORDER BY s.sheet_date, s.sheet_id
                """,
                tuple(params),
            )
            return [
                SheetSummaryRow(
                    sheet_id=int(r["sheet_id"]),
                    class_id=int(r["class_id"]),
                    class_name=f"{r['grade']} - {r['category']}",
                    sheet_date=r["sheet_date"],
                    total_students=int(r["total_students"]),
                    present_count=int(r["present_count"]),
                )
                for r in fetchall(cur)
            ]
