from __future__ import annotations

from flask import Flask

from ..common.http import (
    api_errors,
    current_role,
    current_user_id,
    json_body,
    login_required,
    ok,
    query_int,
    staff_required,
)
from ..container import Container
from .service import SheetChanges


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance", methods=["POST"], endpoint="create_attendance_sheet")
    @staff_required
    @api_errors
    def create_sheet():
        body = json_body()
        sheet = container.attendance_service.create_sheet(
            current_role=current_role(),
            created_by=current_user_id(),
            class_id=body.get("classId"),
            expected_present_count=body.get("expectedPresentCount"),
            permissions=body.get("monitorPermissions"),
            notes=body.get("notes"),
        )
        return ok(sheet.to_dict(), message="Attendance sheet created successfully", status=201)

    @app.route("/api/attendance/analytics", endpoint="attendance_analytics")
    @staff_required
    @api_errors
    def analytics():
        report = container.analytics_service.build_year_report(current_role=current_role(), year=query_int("year"))
        return ok(report.to_dict())

    @app.route("/api/attendance/class/<int:class_id>", endpoint="class_attendance")
    @login_required
    @api_errors
    def class_sheets(class_id: int):
        sheets = container.attendance_service.list_class_sheets_for_viewer(
            user_id=current_user_id(),
            role=current_role(),
            class_id=class_id,
            month=query_int("month"),
            year=query_int("year"),
        )
        return ok(sheets)

    @app.route("/api/attendance/<int:sheet_id>", endpoint="get_attendance_sheet")
    @login_required
    @api_errors
    def get_sheet(sheet_id: int):
        return ok(
            container.attendance_service.get_sheet_for_viewer(
                user_id=current_user_id(), role=current_role(), sheet_id=sheet_id
            )
        )

    @app.route("/api/attendance/<int:sheet_id>", methods=["PUT"], endpoint="update_attendance_sheet")
    @staff_required
    @api_errors
    def admin_update(sheet_id: int):
        sheet = container.attendance_service.admin_update(
            current_role=current_role(),
            admin_user_id=current_user_id(),
            sheet_id=sheet_id,
            changes=SheetChanges.from_payload(json_body()),
        )
        return ok(sheet.to_dict(), message="Attendance sheet updated successfully")

    @app.route("/api/attendance/<int:sheet_id>/monitor-update", methods=["PUT"], endpoint="monitor_update_sheet")
    @login_required
    @api_errors
    def monitor_update(sheet_id: int):
        body = json_body()
        sheet = container.attendance_service.monitor_update(
            user_id=current_user_id(),
            sheet_id=sheet_id,
            entries=body.get("studentAttendance"),
        )
        return ok(sheet.to_dict(), message="Attendance updated successfully by monitor")

    @app.route("/api/attendance/<int:sheet_id>", methods=["DELETE"], endpoint="delete_attendance_sheet")
    @staff_required
    @api_errors
    def delete_sheet(sheet_id: int):
        container.attendance_service.delete_sheet(current_role=current_role(), sheet_id=sheet_id)
        return ok(message="Attendance sheet deleted successfully")

    @app.route(
        "/api/attendance/student-stats/<int:student_id>/<int:class_id>",
        endpoint="student_attendance_stats",
    )
    @login_required
    @api_errors
    def student_stats(student_id: int, class_id: int):
        stats = container.analytics_service.student_stats(
            user_id=current_user_id(),
            current_role=current_role(),
            student_id=student_id,
            class_id=class_id,
            month=query_int("month"),
            year=query_int("year"),
        )
        return ok(stats)
