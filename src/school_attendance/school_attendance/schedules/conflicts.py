from __future__ import annotations

from typing import Optional

from ..common.log import get_logger
from ..core.enums import ConflictType
from .model import ConflictResult, CourseSchedule
from .overlap import sessions_overlap
from .repository import ScheduleRepository

logger = get_logger(__name__)


class ScheduleConflictChecker:
    """Reports classroom and teacher double-bookings for a candidate schedule.

    The checker never decides whether a write is rejected; it only returns the
    conflicts. It issues one read against the repository and has no side
    effects. Storage errors propagate to the caller.
    """

    def __init__(self, schedules: ScheduleRepository):
        self._schedules = schedules

    def check(self, candidate: CourseSchedule, *, exclude_schedule_id: Optional[int] = None) -> list[ConflictResult]:
        existing_schedules = self._schedules.find_overlapping_active(
            school_id=candidate.school_id,
            start_date=candidate.start_date,
            end_date=candidate.end_date,
            exclude_schedule_id=exclude_schedule_id,
        )

        conflicts: list[ConflictResult] = []
        for existing in existing_schedules:
            if exclude_schedule_id is not None and existing.schedule_id == exclude_schedule_id:
                continue

            same_classroom = existing.classroom == candidate.classroom
            same_teacher = existing.teacher_id == candidate.teacher_id
            if not (same_classroom or same_teacher):
                continue
            if not sessions_overlap(existing.weekly_sessions, candidate.weekly_sessions):
                continue

            label = existing.course_name or f"schedule {existing.schedule_id}"
            if same_classroom:
                conflicts.append(
                    ConflictResult(
                        type=ConflictType.CLASSROOM,
                        conflicting_schedule_id=int(existing.schedule_id),
                        message=f"Classroom conflict with {label}",
                    )
                )
            if same_teacher:
                conflicts.append(
                    ConflictResult(
                        type=ConflictType.TEACHER,
                        conflicting_schedule_id=int(existing.schedule_id),
                        message=f"Teacher conflict with {label}",
                    )
                )

        logger.debug(
            "schedule_conflict_check",
            school_id=candidate.school_id,
            candidates=len(existing_schedules),
            conflicts=len(conflicts),
            exclude_schedule_id=exclude_schedule_id,
        )
        return conflicts
