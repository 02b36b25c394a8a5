from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Any, Iterable, Optional

from ..common.datetime_utils import combine_hhmm, week_dates
from ..common.log import get_logger
from ..common.pagination import Page, PageRequest
from ..common.validators import (
    require_date_range,
    require_max_length,
    require_non_empty,
    require_positive_int,
    require_weekly_sessions,
)
from ..core.constants import DEFAULT_MAX_STUDENTS, MAX_CLASSROOM_LENGTH
from ..core.exceptions import NotFoundError, ScheduleConflictError, ValidationError
from ..courses.model import Course, Teacher
from ..courses.repository import CourseRepository
from ..users.access import require_school_access, scoped_school_id
from ..users.model import AdminUser
from .conflicts import ScheduleConflictChecker
from .model import CalendarEvent, ConflictResult, CourseSchedule
from .repository import ScheduleRepository

logger = get_logger(__name__)


class ScheduleService:
    """Use cases around course schedules.

    Writes run the conflict check and the insert/update under the per-school
    write lock so two concurrent requests cannot both pass the check.
    """

    def __init__(
        self,
        schedules: ScheduleRepository,
        courses: CourseRepository,
        *,
        checker: Optional[ScheduleConflictChecker] = None,
    ):
        self._schedules = schedules
        self._courses = courses
        self._checker = checker or ScheduleConflictChecker(schedules)

    # -- lookups -------------------------------------------------------

    def _require_course(self, course_id: Any) -> Course:
        course = self._courses.get_course(require_positive_int(course_id, "Course ID"))
        if not course:
            raise NotFoundError("Course not found")
        return course

    def _require_teacher(self, teacher_id: Any, *, school_id: int) -> Teacher:
        teacher = self._courses.get_teacher(require_positive_int(teacher_id, "Teacher ID"))
        if not teacher:
            raise NotFoundError("Teacher not found")
        if int(teacher.school_id) != int(school_id):
            raise ValidationError("Teacher does not belong to this school")
        return teacher

    def get(self, *, current_user: AdminUser, schedule_id: int) -> CourseSchedule:
        schedule = self._schedules.get_by_id(int(schedule_id))
        if not schedule:
            raise NotFoundError("Schedule not found")
        require_school_access(current_user, schedule.school_id)
        return schedule

    @staticmethod
    def _classroom(value: Optional[str]) -> str:
        classroom = require_non_empty(value, "Classroom")
        require_max_length(classroom, "Classroom", MAX_CLASSROOM_LENGTH)
        return classroom

    def _check_or_raise(self, candidate: CourseSchedule, *, exclude_schedule_id: Optional[int] = None) -> None:
        conflicts = self._checker.check(candidate, exclude_schedule_id=exclude_schedule_id)
        if conflicts:
            logger.info(
                "schedule_rejected",
                school_id=candidate.school_id,
                schedule_id=exclude_schedule_id,
                conflicts=[c.to_dict() for c in conflicts],
            )
            raise ScheduleConflictError(conflicts)

    # -- writes --------------------------------------------------------

    def create(
        self,
        *,
        current_user: AdminUser,
        course_id: Any,
        classroom: Optional[str],
        teacher_id: Any,
        start_date: date,
        end_date: date,
        weekly_sessions: Iterable[Any],
        max_students: Optional[int] = None,
    ) -> int:
        course = self._require_course(course_id)
        require_school_access(current_user, course.school_id)
        teacher = self._require_teacher(teacher_id, school_id=course.school_id)
        require_date_range(start_date, end_date)

        candidate = CourseSchedule(
            schedule_id=None,
            school_id=course.school_id,
            course_id=course.course_id,
            classroom=self._classroom(classroom),
            teacher_id=teacher.teacher_id,
            start_date=start_date,
            end_date=end_date,
            weekly_sessions=require_weekly_sessions(weekly_sessions),
            max_students=(
                require_positive_int(max_students, "Max students") if max_students is not None else DEFAULT_MAX_STUDENTS
            ),
            course_name=course.name,
            teacher_name=teacher.name,
        )

        with self._schedules.write_lock(candidate.school_id):
            self._check_or_raise(candidate)
            schedule_id = self._schedules.create(candidate)

        logger.info("schedule_created", schedule_id=schedule_id, school_id=candidate.school_id, classroom=candidate.classroom)
        return schedule_id

    def update(
        self,
        *,
        current_user: AdminUser,
        schedule_id: int,
        classroom: Optional[str] = None,
        teacher_id: Any = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        weekly_sessions: Optional[Iterable[Any]] = None,
        max_students: Optional[int] = None,
        is_active: Optional[bool] = None,
    ) -> CourseSchedule:
        school_id = self.get(current_user=current_user, schedule_id=schedule_id).school_id

        with self._schedules.write_lock(school_id):
            # Merge onto the row as it is under the lock, not the copy read before it.
            current = self.get(current_user=current_user, schedule_id=schedule_id)

            changes: dict[str, Any] = {}
            if classroom is not None:
                changes["classroom"] = self._classroom(classroom)
            if teacher_id is not None and require_positive_int(teacher_id, "Teacher ID") != current.teacher_id:
                teacher = self._require_teacher(teacher_id, school_id=current.school_id)
                changes["teacher_id"] = teacher.teacher_id
                changes["teacher_name"] = teacher.name
            if start_date is not None:
                changes["start_date"] = start_date
            if end_date is not None:
                changes["end_date"] = end_date
            if weekly_sessions is not None:
                changes["weekly_sessions"] = require_weekly_sessions(weekly_sessions)
            if max_students is not None:
                changes["max_students"] = require_positive_int(max_students, "Max students")
            if is_active is not None:
                changes["is_active"] = bool(is_active)

            updated = replace(current, **changes)
            require_date_range(updated.start_date, updated.end_date)

            placement_changed = bool({"classroom", "teacher_id", "start_date", "end_date", "weekly_sessions"} & changes.keys())
            reactivated = updated.is_active and not current.is_active
            needs_check = updated.is_active and (placement_changed or reactivated)

            if needs_check:
                self._check_or_raise(updated, exclude_schedule_id=current.schedule_id)
            if not self._schedules.update(updated):
                raise NotFoundError("Schedule not found")

        logger.info("schedule_updated", schedule_id=current.schedule_id, fields=sorted(changes), rechecked=needs_check)
        return updated

    def deactivate(self, *, current_user: AdminUser, schedule_id: int) -> None:
        schedule = self.get(current_user=current_user, schedule_id=schedule_id)
        with self._schedules.write_lock(schedule.school_id):
            if not self._schedules.set_active(int(schedule.schedule_id), is_active=False):
                raise NotFoundError("Schedule not found")
        logger.info("schedule_deactivated", schedule_id=schedule.schedule_id)

    def delete(self, *, current_user: AdminUser, schedule_id: int) -> None:
        schedule = self.get(current_user=current_user, schedule_id=schedule_id)
        if self._schedules.has_attendance(int(schedule.schedule_id)):
            raise ValidationError("Cannot delete schedule with attendance records. Please deactivate instead.")
        if not self._schedules.delete(int(schedule.schedule_id)):
            raise NotFoundError("Schedule not found")
        logger.info("schedule_deleted", schedule_id=schedule.schedule_id)

    # -- reads ---------------------------------------------------------

    def search(
        self,
        *,
        current_user: AdminUser,
        school_id: Optional[int] = None,
        course_id: Optional[int] = None,
        teacher_id: Optional[int] = None,
        classroom: Optional[str] = None,
        is_active: Optional[bool] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Page[CourseSchedule]:
        request = PageRequest.of(page, limit)
        items, total = self._schedules.search(
            school_id=scoped_school_id(current_user, school_id),
            course_id=course_id,
            teacher_id=teacher_id,
            classroom=(classroom or "").strip() or None,
            is_active=is_active,
            offset=request.offset,
            limit=request.limit,
        )
        return Page(items=items, total=total, request=request)

    def check_conflicts(
        self,
        *,
        current_user: AdminUser,
        classroom: Optional[str],
        teacher_id: Any,
        start_date: date,
        end_date: date,
        weekly_sessions: Iterable[Any],
        course_id: Any = None,
        school_id: Optional[int] = None,
        exclude_schedule_id: Optional[int] = None,
    ) -> list[ConflictResult]:
        """Advisory pre-check for forms; nothing is written."""
        if course_id:
            course = self._require_course(course_id)
            school_id = course.school_id
        else:
            school_id = scoped_school_id(current_user, school_id)
            if school_id is None:
                raise ValidationError("School ID or course ID is required")
        require_school_access(current_user, school_id)
        require_date_range(start_date, end_date)

        candidate = CourseSchedule(
            schedule_id=None,
            school_id=int(school_id),
            course_id=int(course_id or 0),
            classroom=self._classroom(classroom),
            teacher_id=require_positive_int(teacher_id, "Teacher ID"),
            start_date=start_date,
            end_date=end_date,
            weekly_sessions=require_weekly_sessions(weekly_sessions),
        )
        return self._checker.check(
            candidate,
            exclude_schedule_id=int(exclude_schedule_id) if exclude_schedule_id else None,
        )

    def calendar(
        self,
        *,
        current_user: AdminUser,
        start: date,
        end: date,
        school_id: Optional[int] = None,
    ) -> list[CalendarEvent]:
        """Expand active schedules into dated session occurrences within [start, end]."""
        require_date_range(start, end)
        schedules = self._schedules.list_active_in_range(
            start=start,
            end=end,
            school_id=scoped_school_id(current_user, school_id),
        )

        events: list[CalendarEvent] = []
        for sc in schedules:
            window_start = max(start, sc.start_date)
            window_end = min(end, sc.end_date)
            for session in sc.weekly_sessions:
                for day in week_dates(window_start, window_end, session.day.weekday):
                    events.append(
                        CalendarEvent(
                            schedule_id=int(sc.schedule_id),
                            title=f"{sc.course_name or 'Course'} - {sc.classroom}",
                            start=combine_hhmm(day, session.start_time),
                            end=combine_hhmm(day, session.end_time),
                            classroom=sc.classroom,
                            course_name=sc.course_name,
                            teacher_name=sc.teacher_name,
                        )
                    )

        events.sort(key=lambda e: (e.start, e.schedule_id))
        return events
