from __future__ import annotations

from dataclasses import dataclass, field

from ..core.enums import ClassType


@dataclass(frozen=True)
class ClassInfo:
    """Domain entity: a tuition class with its enrolled students and monitors.

    `enrolled_student_ids` and `monitor_ids` hold student profile ids.
    """

    class_id: int
    grade: str
    category: str
    class_type: ClassType
    venue: str
    capacity: int
    is_active: bool = True
    enrolled_student_ids: tuple[int, ...] = field(default_factory=tuple)
    monitor_ids: tuple[int, ...] = field(default_factory=tuple)

    @property
    def display_name(self) -> str:
        return f"{self.grade} - {self.category}"

    @property
    def available_spots(self) -> int:
        return self.capacity - len(self.enrolled_student_ids)

    def is_enrolled(self, student_id: int) -> bool:
        return int(student_id) in self.enrolled_student_ids

    def is_monitor(self, student_id: int) -> bool:
        return int(student_id) in self.monitor_ids

    def to_dict(self) -> dict:
        return {
            "id": self.class_id,
            "grade": self.grade,
            "category": self.category,
            "type": self.class_type.value,
            "venue": self.venue,
            "capacity": self.capacity,
            "isActive": self.is_active,
            "enrolledStudents": list(self.enrolled_student_ids),
            "monitors": list(self.monitor_ids),
            "enrolledCount": len(self.enrolled_student_ids),
            "availableSpots": self.available_spots,
        }
