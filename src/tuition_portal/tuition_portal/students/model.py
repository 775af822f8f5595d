from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import RegistrationStatus


@dataclass(frozen=True)
class Student:
    """Domain entity: student profile linked to a portal account."""

    student_id: int
    user_id: int
    student_code: str
    first_name: str
    last_name: str
    selected_grade: str
    status: RegistrationStatus
    action_by: Optional[int] = None
    action_at: Optional[datetime] = None
    action_note: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def to_dict(self) -> dict:
        return {
            "id": self.student_id,
            "userId": self.user_id,
            "studentId": self.student_code,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "selectedGrade": self.selected_grade,
            "status": self.status.value,
            "adminAction": {
                "actionBy": self.action_by,
                "actionDate": self.action_at.isoformat() if self.action_at else None,
                "actionNote": self.action_note,
            },
        }
