from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def search(
        self,
        *,
        school_id: Optional[int] = None,
        course_id: Optional[int] = None,
        schedule_id: Optional[int] = None,
        student_id: Optional[int] = None,
        status: Optional[AttendanceStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> tuple[list[AttendanceRecord], int]:
        """One page of records, newest session first, plus the total match count.

        session_date bounds are inclusive; school_id filters through the schedule.
        """

        raise NotImplementedError

    def exists_for_session(self, *, student_id: int, schedule_id: int, session_date: date) -> bool:
        """Advisory duplicate pre-check; the unique key is authoritative."""

        raise NotImplementedError

    def create(self, record: AttendanceRecord) -> int:
        """Insert a record.

        Raises DuplicateRecordError when (student_id, schedule_id, session_date) already exists.
        """

        raise NotImplementedError

    def update_status(self, *, attendance_id: int, status: AttendanceStatus, notes: Optional[str] = None) -> bool:
        """Admin override: only status and notes change."""

        raise NotImplementedError

    def update_check_in(self, *, attendance_id: int, check_in_time: datetime, status: AttendanceStatus) -> bool:
        raise NotImplementedError
