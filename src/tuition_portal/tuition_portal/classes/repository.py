from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import ClassInfo


class ClassRepository(Protocol):
    def get_by_id(self, class_id: int) -> Optional[ClassInfo]:
        """Class with its enrolled student ids and monitor ids."""

        raise NotImplementedError

    def list_active(self) -> Sequence[ClassInfo]:
        raise NotImplementedError

    def enroll_student(self, *, class_id: int, student_id: int) -> bool:
        raise NotImplementedError

    def add_monitor(self, *, class_id: int, student_id: int) -> bool:
        raise NotImplementedError

    def remove_monitor(self, *, class_id: int, student_id: int) -> bool:
        raise NotImplementedError
