from __future__ import annotations

from dataclasses import dataclass

from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_LATE_THRESHOLD_MINUTES, DEFAULT_SCHEDULE_LOCK_TIMEOUT_SECONDS
from .courses.mysql_course_repository import MySQLCourseRepository
from .database.connection import DBConfig, DatabaseConnection
from .devices.mysql_device_repository import MySQLDeviceRepository
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .schedules.service import ScheduleService
from .students.mysql_student_repository import MySQLStudentRepository


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    schedules_repo: MySQLScheduleRepository
    courses_repo: MySQLCourseRepository
    attendance_repo: MySQLAttendanceRepository
    students_repo: MySQLStudentRepository
    devices_repo: MySQLDeviceRepository

    schedule_service: ScheduleService
    attendance_service: AttendanceService


def build_container(
    *,
    db_config: dict,
    late_threshold_minutes: int = DEFAULT_LATE_THRESHOLD_MINUTES,
    lock_timeout_seconds: int = DEFAULT_SCHEDULE_LOCK_TIMEOUT_SECONDS,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_settings(db_config))

    schedules_repo = MySQLScheduleRepository(conn, lock_timeout_seconds=lock_timeout_seconds)
    courses_repo = MySQLCourseRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    students_repo = MySQLStudentRepository(conn)
    devices_repo = MySQLDeviceRepository(conn)

    schedule_service = ScheduleService(schedules_repo, courses_repo)
    attendance_service = AttendanceService(
        attendance_repo,
        schedules_repo,
        students_repo,
        devices_repo,
        strategy_factory=AttendanceStrategyFactory(late_threshold_minutes=late_threshold_minutes),
    )

    return Container(
        conn=conn,
        schedules_repo=schedules_repo,
        courses_repo=courses_repo,
        attendance_repo=attendance_repo,
        students_repo=students_repo,
        devices_repo=devices_repo,
        schedule_service=schedule_service,
        attendance_service=attendance_service,
    )
