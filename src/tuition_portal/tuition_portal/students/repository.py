from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import RegistrationStatus
from .model import Student


class StudentRepository(Protocol):
    def get_by_id(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def get_by_user_id(self, user_id: int) -> Optional[Student]:
        """Resolve the profile behind a logged-in account."""

        raise NotImplementedError

    def list_by_status(self, status: RegistrationStatus, *, limit: int = 500) -> Sequence[Student]:
        raise NotImplementedError

    def decide_registration(
        self,
        *,
        student_id: int,
        status: RegistrationStatus,
        decided_by: int,
        decided_at: datetime,
        note: Optional[str] = None,
    ) -> bool:
        """Move a Pending registration to Approved/Rejected.

        Returns False when the row is missing or no longer Pending.
        """

        raise NotImplementedError
