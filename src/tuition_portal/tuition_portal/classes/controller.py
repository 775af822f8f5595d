from __future__ import annotations

from flask import Flask

from ..common.http import api_errors, current_role, json_body, login_required, ok, staff_required
from ..common.validators import require_int
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/classes", endpoint="list_classes")
    @login_required
    @api_errors
    def list_classes():
        return ok([c.to_dict() for c in container.class_service.list_active()])

    @app.route("/api/classes/<int:class_id>", endpoint="get_class")
    @login_required
    @api_errors
    def get_class(class_id: int):
        return ok(container.class_service.get_class(class_id).to_dict())

    @app.route("/api/classes/<int:class_id>/students", methods=["POST"], endpoint="enroll_student")
    @staff_required
    @api_errors
    def enroll_student(class_id: int):
        body = json_body()
        class_info = container.class_service.enroll_student(
            current_role=current_role(),
            class_id=class_id,
            student_id=require_int(body.get("studentId"), "studentId"),
        )
        return ok(class_info.to_dict(), message="Student enrolled successfully", status=201)

    @app.route("/api/classes/<int:class_id>/monitors", methods=["POST"], endpoint="assign_monitor")
    @staff_required
    @api_errors
    def assign_monitor(class_id: int):
        body = json_body()
        class_info = container.class_service.assign_monitor(
            current_role=current_role(),
            class_id=class_id,
            student_id=require_int(body.get("studentId"), "studentId"),
        )
        return ok(class_info.to_dict(), message="Monitor assigned successfully", status=201)

    @app.route(
        "/api/classes/<int:class_id>/monitors/<int:student_id>",
        methods=["DELETE"],
        endpoint="remove_monitor",
    )
    @staff_required
    @api_errors
    def remove_monitor(class_id: int, student_id: int):
        class_info = container.class_service.remove_monitor(
            current_role=current_role(),
            class_id=class_id,
            student_id=student_id,
        )
        return ok(class_info.to_dict(), message="Monitor removed successfully")
