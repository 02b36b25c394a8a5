from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus, DayOfWeek


@dataclass(frozen=True)
class SessionSlot:
    """The weekly session a check-in is counted against."""

    day: DayOfWeek
    start_time: Optional[str]
    end_time: Optional[str]


@dataclass(frozen=True)
class AttendanceRecord:
    """One student's attendance for one schedule on one session date."""

    attendance_id: Optional[int]
    student_id: int
    course_id: int
    schedule_id: int
    classroom: str
    check_in_time: datetime
    session_date: date
    status: AttendanceStatus
    session_day: Optional[DayOfWeek] = None
    session_start_time: Optional[str] = None
    session_end_time: Optional[str] = None
    device_id: Optional[int] = None
    card_id: Optional[str] = None
    notes: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "attendance_id": self.attendance_id,
            "student_id": self.student_id,
            "course_id": self.course_id,
            "schedule_id": self.schedule_id,
            "device_id": self.device_id,
            "classroom": self.classroom,
            "check_in_time": self.check_in_time.isoformat(timespec="seconds"),
            "session_date": self.session_date.strftime("%Y-%m-%d"),
            "session_day": self.session_day.value if self.session_day else None,
            "session_start_time": self.session_start_time,
            "session_end_time": self.session_end_time,
            "status": self.status.value,
            "notes": self.notes,
            "card_id": self.card_id,
        }
