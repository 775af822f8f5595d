from __future__ import annotations

import pytest

from src.tuition_portal.tuition_portal.core.enums import RegistrationStatus, Role
from src.tuition_portal.tuition_portal.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from tests.support import ADMIN_USER, NIMAL, RAVI, USER_OF


def test_list_pending_returns_only_pending(student_service):
    pending = student_service.list_pending(current_role=Role.ADMIN)
    assert [s.student_id for s in pending] == [RAVI]


def test_list_pending_requires_staff(student_service):
    with pytest.raises(AuthorizationError):
        student_service.list_pending(current_role=Role.STUDENT)


def test_approve_stamps_the_decision(student_service, fixed_now):
    student = student_service.approve_registration(
        current_role=Role.MODERATOR,
        admin_user_id=ADMIN_USER,
        student_id=RAVI,
        admin_note="  documents ok ",
        now=fixed_now,
    )

    assert student.status == RegistrationStatus.APPROVED
    assert student.action_by == ADMIN_USER
    assert student.action_at == fixed_now
    assert student.action_note == "documents ok"
    assert student.to_dict()["adminAction"]["actionDate"] == fixed_now.isoformat()


def test_reject_with_blank_note_stores_none(student_service, fixed_now):
    student = student_service.reject_registration(
        current_role=Role.ADMIN, admin_user_id=ADMIN_USER, student_id=RAVI, admin_note="   ", now=fixed_now
    )
    assert student.status == RegistrationStatus.REJECTED
    assert student.action_note is None


@pytest.mark.parametrize("note", [5, ["ok"], "x" * 501])
def test_invalid_notes_leave_the_registration_pending(student_service, students_repo, fixed_now, note):
    with pytest.raises(ValidationError):
        student_service.approve_registration(
            current_role=Role.ADMIN, admin_user_id=ADMIN_USER, student_id=RAVI, admin_note=note, now=fixed_now
        )
    assert students_repo.get_by_id(RAVI).status == RegistrationStatus.PENDING


def test_deciding_twice_is_invalid(student_service, fixed_now):
    student_service.approve_registration(current_role=Role.ADMIN, admin_user_id=ADMIN_USER, student_id=RAVI, now=fixed_now)
    with pytest.raises(ValidationError):
        student_service.reject_registration(current_role=Role.ADMIN, admin_user_id=ADMIN_USER, student_id=RAVI)
    with pytest.raises(ValidationError):
        student_service.approve_registration(current_role=Role.ADMIN, admin_user_id=ADMIN_USER, student_id=NIMAL)


def test_unknown_student_and_non_staff(student_service):
    with pytest.raises(NotFoundError):
        student_service.approve_registration(current_role=Role.ADMIN, admin_user_id=ADMIN_USER, student_id=1)
    with pytest.raises(AuthorizationError):
        student_service.approve_registration(current_role=Role.STUDENT, admin_user_id=USER_OF[NIMAL], student_id=RAVI)


def test_profile_lookup_by_user(student_service):
    assert student_service.get_profile_for_user(USER_OF[NIMAL]).student_id == NIMAL
    with pytest.raises(NotFoundError):
        student_service.get_profile_for_user(ADMIN_USER)
