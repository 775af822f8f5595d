from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import optional_notes
from ..core.constants import PENDING_LIST_LIMIT
from ..core.enums import RegistrationStatus, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .model import Student
from .repository import StudentRepository

logger = logging.getLogger(__name__)


class StudentService:
    """Use case: student registry lookups and registration approval (admin)."""

    def __init__(self, students: StudentRepository):
        self._students = students

    def get_student(self, student_id: int) -> Student:
        student = self._students.get_by_id(int(student_id))
        if not student:
            raise NotFoundError("Student not found")
        return student

    def get_profile_for_user(self, user_id: int) -> Student:
        student = self._students.get_by_user_id(int(user_id))
        if not student:
            raise NotFoundError("Student profile not found")
        return student

    def list_pending(self, *, current_role: Role) -> Sequence[Student]:
        if not current_role.is_staff:
            raise AuthorizationError("You do not have permission")
        return self._students.list_by_status(RegistrationStatus.PENDING, limit=PENDING_LIST_LIMIT)

    def approve_registration(
        self,
        *,
        current_role: Role,
        admin_user_id: int,
        student_id: int,
        admin_note: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Student:
        return self._decide(
            current_role=current_role,
            admin_user_id=admin_user_id,
            student_id=student_id,
            status=RegistrationStatus.APPROVED,
            admin_note=admin_note,
            now=now,
        )

    def reject_registration(
        self,
        *,
        current_role: Role,
        admin_user_id: int,
        student_id: int,
        admin_note: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Student:
        return self._decide(
            current_role=current_role,
            admin_user_id=admin_user_id,
            student_id=student_id,
            status=RegistrationStatus.REJECTED,
            admin_note=admin_note,
            now=now,
        )

    def _decide(
        self,
        *,
        current_role: Role,
        admin_user_id: int,
        student_id: int,
        status: RegistrationStatus,
        admin_note: Optional[str],
        now: Optional[datetime],
    ) -> Student:
        if not current_role.is_staff:
            raise AuthorizationError("You do not have permission")

        note = optional_notes(admin_note)
        student = self.get_student(student_id)
        if student.status != RegistrationStatus.PENDING:
            raise ValidationError(f"Registration has already been {student.status.value.lower()}")

        decided = self._students.decide_registration(
            student_id=student.student_id,
            status=status,
            decided_by=int(admin_user_id),
            decided_at=now or now_local(),
            note=note,
        )
        if not decided:
            raise ValidationError("Registration has already been processed")

        logger.info("Registration of student %s set to %s by user %s", student.student_id, status.value, admin_user_id)
        return self.get_student(student.student_id)
