from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for authorization."""

    ADMIN = "admin"
    MODERATOR = "moderator"
    STUDENT = "student"
    USER = "user"

    @property
    def is_staff(self) -> bool:
        return self in (Role.ADMIN, Role.MODERATOR)


class AttendanceMark(str, Enum):
    """Per-student status stored on an attendance sheet."""

    PRESENT = "Present"
    ABSENT = "Absent"


class SheetStatus(str, Enum):
    """Attendance sheet lifecycle."""

    DRAFT = "Draft"
    COMPLETED = "Completed"
    UPDATED = "Updated"


class PermissionMode(str, Enum):
    """Who besides staff may submit the single monitor update of a sheet."""

    ADMIN_ONLY = "admin_only"
    ALL_MONITORS = "all_monitors"
    SELECTED = "selected"


class RegistrationStatus(str, Enum):
    """Student registration approval flow."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class ClassType(str, Enum):
    NORMAL = "Normal"
    SPECIAL = "Special"
