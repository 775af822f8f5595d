from __future__ import annotations

import logging
from datetime import timedelta

from flask import Flask, session

from ..common.http import api_errors, json_body, login_required, ok
from ..container import Container
from ..core.constants import DEFAULT_SESSION_DAYS

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    app.permanent_session_lifetime = timedelta(days=int(app.config.get("SESSION_DAYS", DEFAULT_SESSION_DAYS)))

    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    @api_errors
    def login():
        body = json_body()
        s_user = container.auth_service.authenticate(body.get("email", ""), body.get("password", ""))

        session.clear()
        session.permanent = bool(body.get("rememberMe"))

        session["user_id"] = s_user.user_id
        session["name"] = s_user.full_name
        session["role"] = s_user.role.value
        session["student_id"] = s_user.student_id

        logger.info("User %s logged in as %s", s_user.user_id, s_user.role.value)
        return ok(_session_payload(), message="Logged in successfully")

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    @login_required
    def logout():
        session.clear()
        return ok(message="Logged out")

    @app.route("/api/auth/me", endpoint="me")
    @login_required
    def me():
        return ok(_session_payload())


def _session_payload() -> dict:
    return {
        "id": session["user_id"],
        "fullName": session.get("name"),
        "role": session.get("role"),
        "studentId": session.get("student_id"),
    }
