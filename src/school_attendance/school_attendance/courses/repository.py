from __future__ import annotations

from typing import Optional, Protocol

from .model import Course, Teacher


class CourseRepository(Protocol):
    """Read-only lookups the schedule write path needs; course/teacher CRUD lives elsewhere."""

    def get_course(self, course_id: int) -> Optional[Course]:
        raise NotImplementedError

    def get_teacher(self, teacher_id: int) -> Optional[Teacher]:
        raise NotImplementedError
