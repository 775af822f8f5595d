from __future__ import annotations

import logging
from typing import Sequence

from ..core.enums import RegistrationStatus, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..students.repository import StudentRepository
from .model import ClassInfo
from .repository import ClassRepository

logger = logging.getLogger(__name__)


class ClassService:
    """Use case: class registry lookups, enrollment and monitor assignment."""

    def __init__(self, classes: ClassRepository, students: StudentRepository):
        self._classes = classes
        self._students = students

    def get_class(self, class_id: int) -> ClassInfo:
        class_info = self._classes.get_by_id(int(class_id))
        if not class_info:
            raise NotFoundError("Class not found")
        return class_info

    def list_active(self) -> Sequence[ClassInfo]:
        return self._classes.list_active()

    def enroll_student(self, *, current_role: Role, class_id: int, student_id: int) -> ClassInfo:
        if not current_role.is_staff:
            raise AuthorizationError("You do not have permission")

        class_info = self.get_class(class_id)
        student = self._students.get_by_id(int(student_id))
        if not student:
            raise NotFoundError("Student not found")
        if student.status != RegistrationStatus.APPROVED:
            raise ValidationError("Only approved students can be enrolled")
        if class_info.is_enrolled(student.student_id):
            raise ValidationError("This student is already enrolled in this class")
        if class_info.available_spots <= 0:
            raise ValidationError("Class is full")

        if not self._classes.enroll_student(class_id=class_info.class_id, student_id=student.student_id):
            raise ValidationError("This student is already enrolled in this class")

        logger.info("Student %s enrolled in class %s", student.student_id, class_info.class_id)
        return self.get_class(class_info.class_id)

    def assign_monitor(self, *, current_role: Role, class_id: int, student_id: int) -> ClassInfo:
        if not current_role.is_staff:
            raise AuthorizationError("You do not have permission")

        class_info = self.get_class(class_id)
        if not class_info.is_enrolled(student_id):
            raise ValidationError("Only students enrolled in this class can be monitors")
        if class_info.is_monitor(student_id):
            raise ValidationError("This student is already a monitor of this class")

        if not self._classes.add_monitor(class_id=class_info.class_id, student_id=int(student_id)):
            raise ValidationError("This student is already a monitor of this class")

        logger.info("Student %s assigned as monitor of class %s", student_id, class_info.class_id)
        return self.get_class(class_info.class_id)

    def remove_monitor(self, *, current_role: Role, class_id: int, student_id: int) -> ClassInfo:
        if not current_role.is_staff:
            raise AuthorizationError("You do not have permission")

        class_info = self.get_class(class_id)
        if not class_info.is_monitor(student_id):
            raise NotFoundError("This student is not a monitor of this class")

        self._classes.remove_monitor(class_id=class_info.class_id, student_id=int(student_id))
        logger.info("Student %s removed as monitor of class %s", student_id, class_info.class_id)
        return self.get_class(class_info.class_id)
