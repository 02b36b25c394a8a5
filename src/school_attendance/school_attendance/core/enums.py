from __future__ import annotations

from datetime import date
from enum import Enum


class Role(str, Enum):
    """Roles carried in the Flask session."""

    SUPER_ADMIN = "super_admin"
    SCHOOL_ADMIN = "school_admin"


class DayOfWeek(str, Enum):
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"

    @classmethod
    def for_date(cls, value: date) -> "DayOfWeek":
        return _WEEKDAY_ORDER[value.weekday()]

    @property
    def weekday(self) -> int:
        """Monday=0 .. Sunday=6, same as date.weekday()."""
        return _WEEKDAY_ORDER.index(self)


_WEEKDAY_ORDER = list(DayOfWeek)


class AttendanceStatus(str, Enum):
    """Attendance status stored with each record."""

    PRESENT = "Present"
    LATE = "Late"
    ABSENT = "Absent"


class ConflictType(str, Enum):
    CLASSROOM = "classroom"
    TEACHER = "teacher"
