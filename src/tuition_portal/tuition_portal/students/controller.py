from __future__ import annotations

from flask import Flask

from ..common.http import api_errors, current_role, current_user_id, ok, optional_json_body, staff_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/admin/students/pending", endpoint="pending_students")
    @staff_required
    @api_errors
    def pending_students():
        students = container.student_service.list_pending(current_role=current_role())
        return ok([s.to_dict() for s in students])

    @app.route("/api/admin/students/<int:student_id>/approve", methods=["POST"], endpoint="approve_student")
    @staff_required
    @api_errors
    def approve_student(student_id: int):
        body = optional_json_body()
        student = container.student_service.approve_registration(
            current_role=current_role(),
            admin_user_id=current_user_id(),
            student_id=student_id,
            admin_note=body.get("actionNote"),
        )
        return ok(student.to_dict(), message="Student registration approved")

    @app.route("/api/admin/students/<int:student_id>/reject", methods=["POST"], endpoint="reject_student")
    @staff_required
    @api_errors
    def reject_student(student_id: int):
        body = optional_json_body()
        student = container.student_service.reject_registration(
            current_role=current_role(),
            admin_user_id=current_user_id(),
            student_id=student_id,
            admin_note=body.get("actionNote"),
        )
        return ok(student.to_dict(), message="Student registration rejected")
