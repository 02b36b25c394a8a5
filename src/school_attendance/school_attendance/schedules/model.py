from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.constants import DEFAULT_MAX_STUDENTS
from ..core.enums import ConflictType, DayOfWeek


@dataclass(frozen=True)
class WeeklySession:
    """One recurring slot of a course schedule.

    start_time/end_time are zero-padded 24h "HH:MM" strings, so plain string
    comparison orders them correctly.
    """

    day: DayOfWeek
    start_time: str
    end_time: str

    def to_dict(self) -> dict:
        return {"day": self.day.value, "start_time": self.start_time, "end_time": self.end_time}


@dataclass(frozen=True)
class CourseSchedule:
    """A course's recurring meeting pattern over a date range."""

    schedule_id: Optional[int]
    school_id: int
    course_id: int
    classroom: str
    teacher_id: int
    start_date: date
    end_date: date
    weekly_sessions: tuple[WeeklySession, ...]
    is_active: bool = True
    max_students: int = DEFAULT_MAX_STUDENTS
    current_students: int = 0
    course_name: Optional[str] = None
    teacher_name: Optional[str] = None

    def sessions_on(self, day: DayOfWeek) -> list[WeeklySession]:
        return sorted((s for s in self.weekly_sessions if s.day == day), key=lambda s: s.start_time)

    def covers(self, value: date) -> bool:
        return self.start_date <= value <= self.end_date

    @property
    def available_seats(self) -> int:
        return self.max_students - self.current_students

    def to_dict(self) -> dict:
        return {
            "schedule_id": self.schedule_id,
            "school_id": self.school_id,
            "course_id": self.course_id,
            "course_name": self.course_name,
            "classroom": self.classroom,
            "teacher_id": self.teacher_id,
            "teacher_name": self.teacher_name,
            "start_date": self.start_date.strftime("%Y-%m-%d"),
            "end_date": self.end_date.strftime("%Y-%m-%d"),
            "weekly_sessions": [s.to_dict() for s in self.weekly_sessions],
            "is_active": self.is_active,
            "max_students": self.max_students,
            "current_students": self.current_students,
            "available_seats": self.available_seats,
        }


@dataclass(frozen=True)
class ConflictResult:
    """A classroom or teacher double-booking found by the conflict check."""

    type: ConflictType
    conflicting_schedule_id: int
    message: str

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "conflicting_schedule_id": self.conflicting_schedule_id,
            "message": self.message,
        }


@dataclass(frozen=True)
class CalendarEvent:
    """One dated occurrence of a weekly session, for calendar views."""

    schedule_id: int
    title: str
    start: datetime
    end: datetime
    classroom: str
    course_name: Optional[str]
    teacher_name: Optional[str]

    def to_dict(self) -> dict:
        return {
            "schedule_id": self.schedule_id,
            "title": self.title,
            "start": self.start.isoformat(timespec="seconds"),
            "end": self.end.isoformat(timespec="seconds"),
            "classroom": self.classroom,
            "course": self.course_name,
            "teacher": self.teacher_name,
        }
