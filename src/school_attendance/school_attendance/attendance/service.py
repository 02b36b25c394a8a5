from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Any, Optional

from ..common.datetime_utils import now_local
from ..common.log import get_logger
from ..common.pagination import Page, PageRequest
from ..common.validators import (
    require_date_range,
    require_hhmm,
    require_max_length,
    require_non_empty,
    require_positive_int,
)
from ..core.constants import MAX_NOTES_LENGTH
from ..core.enums import AttendanceStatus, DayOfWeek
from ..core.exceptions import DuplicateRecordError, NotFoundError, ValidationError
from ..devices.repository import DeviceRepository
from ..schedules.model import CourseSchedule, WeeklySession
from ..schedules.repository import ScheduleRepository
from ..students.model import Student
from ..students.repository import StudentRepository
from ..users.access import require_school_access, scoped_school_id
from ..users.model import AdminUser
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, SessionSlot
from .repository import AttendanceRepository
from .status import derive_status, minutes_from_start

logger = get_logger(__name__)


def _parse_status(value: Any) -> AttendanceStatus:
    try:
        return AttendanceStatus(value)
    except ValueError:
        raise ValidationError(f"Invalid status: {value!r}") from None


def _distance(check_in_time: Optional[datetime], session_date: date, session: WeeklySession) -> int:
    if check_in_time is None:
        return 0
    return abs(minutes_from_start(check_in_time, session_date, session.start_time))


class AttendanceService:
    """Check-in write path and admin corrections.

    Duplicate policy: one record per (student, schedule, session date). The
    existence check here is advisory; the unique key in storage is the
    authoritative guard and surfaces as DuplicateRecordError.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        schedules: ScheduleRepository,
        students: StudentRepository,
        devices: DeviceRepository,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
    ):
        self._attendance = attendance
        self._schedules = schedules
        self._students = students
        self._devices = devices
        self._factory = strategy_factory or AttendanceStrategyFactory()

    def resolve_session(
        self,
        schedule: CourseSchedule,
        session_date: date,
        *,
        session_start_time: Optional[str] = None,
        check_in_time: Optional[datetime] = None,
    ) -> SessionSlot:
        """Pick the weekly session a check-in counts against.

        The session date's weekday must be one of the schedule's session days.
        An explicit start time must match a session on that day; without one,
        the session starting closest to the check-in wins.
        """
        day = DayOfWeek.for_date(session_date)
        sessions = schedule.sessions_on(day)
        if not sessions:
            raise ValidationError(f"Schedule {schedule.schedule_id} has no session on {day.value}")

        if session_start_time:
            wanted = require_hhmm(session_start_time, "Session start time")
            matching = [s for s in sessions if s.start_time == wanted]
            if not matching:
                raise ValidationError(f"No session starts at {wanted} on {day.value}")
            chosen = matching[0]
        else:
            chosen = min(sessions, key=lambda s: _distance(check_in_time, session_date, s))

        return SessionSlot(day=chosen.day, start_time=chosen.start_time, end_time=chosen.end_time)

    def _record(
        self,
        *,
        student: Student,
        schedule: CourseSchedule,
        check_in_time: datetime,
        session_date: date,
        session_start_time: Optional[str],
        device_id: Optional[int] = None,
        card_id: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        if int(student.school_id) != int(schedule.school_id):
            raise ValidationError("Student does not belong to this school")
        if not schedule.is_active:
            raise ValidationError("Schedule is not active")
        if not schedule.covers(session_date):
            raise ValidationError("Session date is outside the schedule's date range")

        slot = self.resolve_session(
            schedule,
            session_date,
            session_start_time=session_start_time,
            check_in_time=check_in_time,
        )

        if self._attendance.exists_for_session(
            student_id=student.student_id,
            schedule_id=int(schedule.schedule_id),
            session_date=session_date,
        ):
            raise DuplicateRecordError("Attendance already recorded for this student and session")

        decision = self._factory.decide(
            check_in_time=check_in_time,
            session_date=session_date,
            session_start_time=slot.start_time,
        )

        record = AttendanceRecord(
            attendance_id=None,
            student_id=student.student_id,
            course_id=schedule.course_id,
            schedule_id=int(schedule.schedule_id),
            classroom=schedule.classroom,
            check_in_time=check_in_time,
            session_date=session_date,
            status=decision.status,
            session_day=slot.day,
            session_start_time=slot.start_time,
            session_end_time=slot.end_time,
            device_id=device_id,
            card_id=card_id,
            notes=require_max_length(notes, "Notes", MAX_NOTES_LENGTH) or decision.note,
        )
        attendance_id = self._attendance.create(record)

        logger.info(
            "attendance_recorded",
            attendance_id=attendance_id,
            student_id=record.student_id,
            schedule_id=record.schedule_id,
            session_date=record.session_date.isoformat(),
            status=record.status.value,
        )
        return replace(record, attendance_id=attendance_id)

    def record_check_in(
        self,
        *,
        current_user: AdminUser,
        student_id: Any,
        schedule_id: Any,
        check_in_time: Optional[datetime] = None,
        session_date: Optional[date] = None,
        session_start_time: Optional[str] = None,
        device_id: Optional[int] = None,
        card_id: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        """Manual entry by an admin. The session date defaults to the check-in date."""
        schedule = self._schedules.get_by_id(require_positive_int(schedule_id, "Schedule ID"))
        if not schedule:
            raise NotFoundError("Schedule not found")
        require_school_access(current_user, schedule.school_id)

        student = self._students.get_by_id(require_positive_int(student_id, "Student ID"))
        if not student:
            raise NotFoundError("Student not found")

        check_in_time = check_in_time or now_local()
        return self._record(
            student=student,
            schedule=schedule,
            check_in_time=check_in_time,
            session_date=session_date or check_in_time.date(),
            session_start_time=session_start_time,
            device_id=device_id,
            card_id=card_id,
            notes=notes,
        )

    def check_in_by_card(self, *, device_id: Any, card_id: Optional[str], now: Optional[datetime] = None) -> tuple[AttendanceRecord, Student]:
        """RFID check-in: the device's classroom and the current time select the schedule."""
        card_id = require_non_empty(card_id, "Card ID")

        device = self._devices.get_by_id(require_positive_int(device_id, "Device ID"))
        if not device:
            raise NotFoundError("Device not found")
        if not device.is_active:
            raise ValidationError("Device is not active")

        student = self._students.get_by_card(school_id=device.school_id, card_id=card_id)
        if not student:
            raise ValidationError("Invalid card or student not found")

        now = now or now_local()
        today = now.date()
        day = DayOfWeek.for_date(today)

        candidates = [
            (schedule, session)
            for schedule in self._schedules.list_active_for_classroom(
                school_id=device.school_id, classroom=device.classroom, on_date=today
            )
            for session in schedule.sessions_on(day)
        ]
        if not candidates:
            raise ValidationError(f"No session scheduled in {device.classroom} today")

        schedule, session = min(candidates, key=lambda pair: _distance(now, today, pair[1]))
        record = self._record(
            student=student,
            schedule=schedule,
            check_in_time=now,
            session_date=today,
            session_start_time=session.start_time,
            device_id=device.device_id,
            card_id=card_id,
        )
        self._devices.touch_last_seen(device.device_id, seen_at=now)
        return record, student

    def get(self, *, current_user: AdminUser, attendance_id: Any) -> AttendanceRecord:
        record = self._attendance.get_by_id(require_positive_int(attendance_id, "Attendance ID"))
        if not record:
            raise NotFoundError("Attendance record not found")
        schedule = self._schedules.get_by_id(record.schedule_id)
        if not schedule:
            raise NotFoundError("Schedule not found")
        require_school_access(current_user, schedule.school_id)
        return record

    def search(
        self,
        *,
        current_user: AdminUser,
        school_id: Optional[int] = None,
        course_id: Optional[int] = None,
        schedule_id: Optional[int] = None,
        student_id: Optional[int] = None,
        status: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Page[AttendanceRecord]:
        """Records visible to the caller, newest session first."""
        request = PageRequest.of(page, limit)
        if start_date is not None and end_date is not None:
            require_date_range(start_date, end_date)

        items, total = self._attendance.search(
            school_id=scoped_school_id(current_user, school_id),
            course_id=course_id,
            schedule_id=schedule_id,
            student_id=student_id,
            status=_parse_status(status) if status else None,
            start_date=start_date,
            end_date=end_date,
            offset=request.offset,
            limit=request.limit,
        )
        return Page(items=items, total=total, request=request)

    def override(
        self,
        *,
        current_user: AdminUser,
        attendance_id: Any,
        status: Any,
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        """Manual status correction; the explicit status wins over derivation."""
        record = self.get(current_user=current_user, attendance_id=attendance_id)
        new_status = _parse_status(status)
        notes = require_max_length(notes, "Notes", MAX_NOTES_LENGTH) if notes is not None else record.notes

        if not self._attendance.update_status(attendance_id=int(record.attendance_id), status=new_status, notes=notes):
            raise NotFoundError("Attendance record not found")

        logger.info(
            "attendance_overridden",
            attendance_id=record.attendance_id,
            by=current_user.user_id,
            old=record.status.value,
            new=new_status.value,
        )
        return replace(record, status=new_status, notes=notes)

    def update_check_in_time(self, *, current_user: AdminUser, attendance_id: Any, check_in_time: datetime) -> AttendanceRecord:
        """Correct the check-in time; status is derived again from the stored session start."""
        record = self.get(current_user=current_user, attendance_id=attendance_id)
        status = derive_status(
            check_in_time,
            record.session_date,
            record.session_start_time,
            late_threshold_minutes=self._factory.late_threshold_minutes,
        )
        if not self._attendance.update_check_in(
            attendance_id=int(record.attendance_id),
            check_in_time=check_in_time,
            status=status,
        ):
            raise NotFoundError("Attendance record not found")
        return replace(record, check_in_time=check_in_time, status=status)
