from __future__ import annotations

from datetime import date

import pytest

from src.tuition_portal.tuition_portal.attendance.projection import Viewer, project_sheet
from src.tuition_portal.tuition_portal.core.enums import Role
from src.tuition_portal.tuition_portal.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from tests.support import (
    ADMIN_USER,
    CLASS_WITH_MONITORS,
    KAMALA,
    NIMAL,
    PLAIN_USER,
    SUNIL,
    USER_OF,
    present,
)


def test_staff_see_the_whole_sheet(make_sheet):
    sheet = make_sheet(expected=2)
    data = project_sheet(sheet, Viewer(role=Role.MODERATOR))

    assert data["expectedPresentCount"] == 2
    assert data["monitorPermissions"]["mode"] == "all_monitors"
    assert len(data["studentAttendance"]) == 3


def test_class_monitor_sees_the_whole_sheet(make_sheet):
    sheet = make_sheet(expected=2)
    data = project_sheet(sheet, Viewer(role=Role.STUDENT, student_id=NIMAL, is_class_monitor=True))
    assert "expectedPresentCount" in data
    assert len(data["studentAttendance"]) == 3


def test_plain_student_sees_only_their_own_record(make_sheet):
    sheet = make_sheet(expected=2)
    data = project_sheet(sheet, Viewer(role=Role.STUDENT, student_id=SUNIL))

    assert [r["studentId"] for r in data["studentAttendance"]] == [SUNIL]
    assert "expectedPresentCount" not in data
    assert "monitorPermissions" not in data
    assert data["totalStudents"] == 3


def test_other_roles_are_forbidden(make_sheet):
    with pytest.raises(AuthorizationError):
        project_sheet(make_sheet(), Viewer(role=Role.USER))


def test_get_sheet_resolves_monitor_status_from_the_class(attendance_service, make_sheet):
    sheet = make_sheet()

    as_monitor = attendance_service.get_sheet_for_viewer(
        user_id=USER_OF[KAMALA], role=Role.STUDENT, sheet_id=sheet.sheet_id
    )
    as_student = attendance_service.get_sheet_for_viewer(
        user_id=USER_OF[SUNIL], role=Role.STUDENT, sheet_id=sheet.sheet_id
    )
    as_admin = attendance_service.get_sheet_for_viewer(user_id=ADMIN_USER, role=Role.ADMIN, sheet_id=sheet.sheet_id)

    assert len(as_monitor["studentAttendance"]) == 3
    assert len(as_student["studentAttendance"]) == 1
    assert as_admin == sheet.to_dict()


def test_get_sheet_errors(attendance_service, make_sheet):
    sheet = make_sheet()
    with pytest.raises(NotFoundError):
        attendance_service.get_sheet_for_viewer(user_id=ADMIN_USER, role=Role.ADMIN, sheet_id=999)
    with pytest.raises(AuthorizationError):
        attendance_service.get_sheet_for_viewer(user_id=PLAIN_USER, role=Role.USER, sheet_id=sheet.sheet_id)
    with pytest.raises(NotFoundError):
        # Student role without a profile.
        attendance_service.get_sheet_for_viewer(user_id=PLAIN_USER, role=Role.STUDENT, sheet_id=sheet.sheet_id)


def test_class_sheets_are_newest_first_and_month_filtered(attendance_service, make_sheet):
    make_sheet(on=date(2026, 2, 27))
    make_sheet(on=date(2026, 3, 2))
    make_sheet(on=date(2026, 3, 9))

    all_sheets = attendance_service.list_class_sheets_for_viewer(
        user_id=ADMIN_USER, role=Role.ADMIN, class_id=CLASS_WITH_MONITORS
    )
    assert [s["date"] for s in all_sheets] == ["2026-03-09", "2026-03-02", "2026-02-27"]

    march = attendance_service.list_class_sheets_for_viewer(
        user_id=USER_OF[SUNIL], role=Role.STUDENT, class_id=CLASS_WITH_MONITORS, month=3, year=2026
    )
    assert [s["date"] for s in march] == ["2026-03-09", "2026-03-02"]
    assert all(len(s["studentAttendance"]) == 1 for s in march)


@pytest.mark.parametrize("month, year", [(3, None), (None, 2026), (13, 2026), (0, 2026)])
def test_class_sheets_reject_bad_month_filters(attendance_service, month, year):
    with pytest.raises(ValidationError):
        attendance_service.list_class_sheets_for_viewer(
            user_id=ADMIN_USER, role=Role.ADMIN, class_id=CLASS_WITH_MONITORS, month=month, year=year
        )


def test_class_sheets_for_unknown_class(attendance_service):
    with pytest.raises(NotFoundError):
        attendance_service.list_class_sheets_for_viewer(user_id=ADMIN_USER, role=Role.ADMIN, class_id=404)


def test_plain_student_does_not_see_the_submitted_count(attendance_service, make_sheet, fixed_now):
    sheet = make_sheet(expected=2)
    attendance_service.monitor_update(
        user_id=USER_OF[NIMAL], sheet_id=sheet.sheet_id, entries=present(NIMAL, KAMALA), now=fixed_now
    )

    own = attendance_service.get_sheet_for_viewer(user_id=USER_OF[SUNIL], role=Role.STUDENT, sheet_id=sheet.sheet_id)
    assert own["monitorUpdate"]["markedPresentCount"] is None
    assert own["monitorUpdate"]["isLocked"] is True

    monitor = attendance_service.get_sheet_for_viewer(
        user_id=USER_OF[KAMALA], role=Role.STUDENT, sheet_id=sheet.sheet_id
    )
    assert monitor["monitorUpdate"]["markedPresentCount"] == 2
