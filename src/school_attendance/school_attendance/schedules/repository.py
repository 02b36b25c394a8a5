from __future__ import annotations

from contextlib import AbstractContextManager
from datetime import date
from typing import Optional, Protocol, Sequence

from .model import CourseSchedule


class ScheduleRepository(Protocol):
    def get_by_id(self, schedule_id: int) -> Optional[CourseSchedule]:
        raise NotImplementedError

    def find_overlapping_active(
        self,
        *,
        school_id: int,
        start_date: date,
        end_date: date,
        exclude_schedule_id: Optional[int] = None,
    ) -> Sequence[CourseSchedule]:
        """Active schedules of a school whose [start_date, end_date] intersects the given range.

        Results carry course_name resolved by the storage join.
        """

        raise NotImplementedError

    def search(
        self,
        *,
        school_id: Optional[int] = None,
        course_id: Optional[int] = None,
        teacher_id: Optional[int] = None,
        classroom: Optional[str] = None,
        is_active: Optional[bool] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> tuple[list[CourseSchedule], int]:
        """One page ordered by start date, plus the total match count.

        classroom matches case-insensitively anywhere in the name.
        """

        raise NotImplementedError

    def list_active_in_range(self, *, start: date, end: date, school_id: Optional[int] = None) -> Sequence[CourseSchedule]:
        raise NotImplementedError

    def list_active_for_classroom(self, *, school_id: int, classroom: str, on_date: date) -> Sequence[CourseSchedule]:
        raise NotImplementedError

    def create(self, schedule: CourseSchedule) -> int:
        raise NotImplementedError

    def update(self, schedule: CourseSchedule) -> bool:
        raise NotImplementedError

    def set_active(self, schedule_id: int, *, is_active: bool) -> bool:
        raise NotImplementedError

    def delete(self, schedule_id: int) -> bool:
        raise NotImplementedError

    def has_attendance(self, schedule_id: int) -> bool:
        raise NotImplementedError

    def write_lock(self, school_id: int) -> AbstractContextManager:
        """Serialize check-then-write sequences for one school."""

        raise NotImplementedError
