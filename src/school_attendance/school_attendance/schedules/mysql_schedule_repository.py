from __future__ import annotations

from contextlib import contextmanager
from datetime import date
from typing import Iterator, Optional, Sequence

from ..common.log import get_logger
from ..core.constants import DEFAULT_SCHEDULE_LOCK_TIMEOUT_SECONDS
from ..core.enums import DayOfWeek
from ..core.exceptions import ResourceBusyError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, mysql_time_to_hhmm, updated_or_exists
from .model import CourseSchedule, WeeklySession
from .repository import ScheduleRepository

logger = get_logger(__name__)

_SELECT_SCHEDULES = """
    SELECT
        sc.schedule_id,
        sc.school_id,
        sc.course_id,
        sc.classroom,
        sc.teacher_id,
        sc.start_date,
        sc.end_date,
        sc.is_active,
        sc.max_students,
        sc.current_students,
        c.name AS course_name,
        t.name AS teacher_name
    FROM course_schedules sc
    LEFT JOIN courses c ON c.course_id = sc.course_id
    LEFT JOIN teachers t ON t.teacher_id = sc.teacher_id
"""


_EXISTS_SQL = "SELECT 1 AS found FROM course_schedules WHERE schedule_id=%s"


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection, *, lock_timeout_seconds: int = DEFAULT_SCHEDULE_LOCK_TIMEOUT_SECONDS):
        self._conn_factory = conn_factory
        self._lock_timeout_seconds = int(lock_timeout_seconds)

    def _load(
        self,
        cur,
        where: str,
        params: tuple,
        *,
        order_by: str = "sc.start_date ASC, sc.schedule_id ASC",
        limit_offset: Optional[tuple[int, int]] = None,
    ) -> list[CourseSchedule]:
        sql = f"{_SELECT_SCHEDULES} WHERE {where} ORDER BY {order_by}"
        if limit_offset is not None:
            sql += " LIMIT %s OFFSET %s"
            params = (*params, *limit_offset)
        cur.execute(sql, params)
        rows = fetchall(cur)
        if not rows:
            return []

        ids = [int(r["schedule_id"]) for r in rows]
        placeholders = ",".join(["%s"] * len(ids))
        cur.execute(
            f"""
            SELECT schedule_id, day, start_time, end_time
            FROM schedule_sessions
            WHERE schedule_id IN ({placeholders})
            ORDER BY schedule_id, position
            """,
            tuple(ids),
        )
        sessions: dict[int, list[WeeklySession]] = {}
        for s in fetchall(cur):
            sessions.setdefault(int(s["schedule_id"]), []).append(
                WeeklySession(
                    day=DayOfWeek(s["day"]),
                    start_time=mysql_time_to_hhmm(s["start_time"]),
                    end_time=mysql_time_to_hhmm(s["end_time"]),
                )
            )

        return [
            CourseSchedule(
                schedule_id=int(r["schedule_id"]),
                school_id=int(r["school_id"]),
                course_id=int(r["course_id"]),
                classroom=r["classroom"],
                teacher_id=int(r["teacher_id"]),
                start_date=r["start_date"],
                end_date=r["end_date"],
                weekly_sessions=tuple(sessions.get(int(r["schedule_id"]), [])),
                is_active=bool(r["is_active"]),
                max_students=int(r["max_students"]),
                current_students=int(r["current_students"]),
                course_name=r.get("course_name"),
                teacher_name=r.get("teacher_name"),
            )
            for r in rows
        ]

    @staticmethod
    def _write_sessions(cur, schedule_id: int, sessions: Sequence[WeeklySession]) -> None:
        cur.execute("DELETE FROM schedule_sessions WHERE schedule_id=%s", (schedule_id,))
        cur.executemany(
            """
            INSERT INTO schedule_sessions(schedule_id, position, day, start_time, end_time)
            VALUES(%s,%s,%s,%s,%s)
            """,
            [(schedule_id, pos, s.day.value, s.start_time, s.end_time) for pos, s in enumerate(sessions)],
        )

    def get_by_id(self, schedule_id: int) -> Optional[CourseSchedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            found = self._load(cur, "sc.schedule_id=%s", (int(schedule_id),))
            return found[0] if found else None

    def find_overlapping_active(
        self,
        *,
        school_id: int,
        start_date: date,
        end_date: date,
        exclude_schedule_id: Optional[int] = None,
    ) -> Sequence[CourseSchedule]:
        clauses = ["sc.school_id=%s", "sc.is_active=1", "sc.start_date<=%s", "sc.end_date>=%s"]
        params: list[object] = [int(school_id), end_date, start_date]
        if exclude_schedule_id is not None:
            clauses.append("sc.schedule_id<>%s")
            params.append(int(exclude_schedule_id))

        with db_cursor(self._conn_factory) as (_, cur):
            return self._load(cur, " AND ".join(clauses), tuple(params))

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
        clauses: list[str] = []
        params: list[object] = []
        for column, value in (("sc.school_id", school_id), ("sc.course_id", course_id), ("sc.teacher_id", teacher_id)):
            if value is not None:
                clauses.append(f"{column}=%s")
                params.append(int(value))
        if classroom:
            escaped = classroom.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
            clauses.append("sc.classroom LIKE %s")
            params.append(f"%{escaped}%")
        if is_active is not None:
            clauses.append("sc.is_active=%s")
            params.append(int(is_active))
        where = " AND ".join(clauses) or "1=1"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM course_schedules sc WHERE {where}", tuple(params))
            total = int(fetchone(cur)["total"])
            items = self._load(cur, where, tuple(params), limit_offset=(int(limit), int(offset)))
            return items, total

    def list_active_in_range(self, *, start: date, end: date, school_id: Optional[int] = None) -> Sequence[CourseSchedule]:
        clauses = ["sc.is_active=1", "sc.start_date<=%s", "sc.end_date>=%s"]
        params: list[object] = [end, start]
        if school_id is not None:
            clauses.append("sc.school_id=%s")
            params.append(int(school_id))

        with db_cursor(self._conn_factory) as (_, cur):
            return self._load(cur, " AND ".join(clauses), tuple(params))

    def list_active_for_classroom(self, *, school_id: int, classroom: str, on_date: date) -> Sequence[CourseSchedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._load(
                cur,
                "sc.school_id=%s AND sc.classroom=%s AND sc.is_active=1 AND sc.start_date<=%s AND sc.end_date>=%s",
                (int(school_id), classroom, on_date, on_date),
            )

    def create(self, schedule: CourseSchedule) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO course_schedules(
                    school_id, course_id, classroom, teacher_id, start_date, end_date,
                    is_active, max_students, current_students
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(schedule.school_id),
                    int(schedule.course_id),
                    schedule.classroom,
                    int(schedule.teacher_id),
                    schedule.start_date,
                    schedule.end_date,
                    int(schedule.is_active),
                    int(schedule.max_students),
                    int(schedule.current_students),
                ),
            )
            schedule_id = int(cur.lastrowid)
            self._write_sessions(cur, schedule_id, schedule.weekly_sessions)
            return schedule_id

    def update(self, schedule: CourseSchedule) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE course_schedules
                SET classroom=%s, teacher_id=%s, start_date=%s, end_date=%s, is_active=%s, max_students=%s
                WHERE schedule_id=%s
                """,
                (
                    schedule.classroom,
                    int(schedule.teacher_id),
                    schedule.start_date,
                    schedule.end_date,
                    int(schedule.is_active),
                    int(schedule.max_students),
                    int(schedule.schedule_id),
                ),
            )
            if not updated_or_exists(cur, _EXISTS_SQL, (int(schedule.schedule_id),)):
                return False
            self._write_sessions(cur, int(schedule.schedule_id), schedule.weekly_sessions)
            return True

    def set_active(self, schedule_id: int, *, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE course_schedules SET is_active=%s WHERE schedule_id=%s",
                (int(bool(is_active)), int(schedule_id)),
            )
            return updated_or_exists(cur, _EXISTS_SQL, (int(schedule_id),))

    def delete(self, schedule_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM course_schedules WHERE schedule_id=%s", (int(schedule_id),))
            return cur.rowcount > 0

    def has_attendance(self, schedule_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 AS found FROM attendance_records WHERE schedule_id=%s LIMIT 1", (int(schedule_id),))
            return fetchone(cur) is not None

    @contextmanager
    def write_lock(self, school_id: int) -> Iterator[None]:
        """MySQL named lock held on a dedicated connection for the duration of the block."""
        name = f"{self._conn_factory.database}:schedules:{int(school_id)}"
        conn = self._conn_factory.connect()
        try:
            cur = conn.cursor()
            cur.execute("SELECT GET_LOCK(%s, %s)", (name, self._lock_timeout_seconds))
            (acquired,) = cur.fetchone()
            if acquired != 1:
                logger.warning("schedule_lock_timeout", lock=name, timeout=self._lock_timeout_seconds)
                raise ResourceBusyError("Another schedule change for this school is in progress, please retry")
            try:
                yield
            finally:
                cur.execute("SELECT RELEASE_LOCK(%s)", (name,))
                cur.fetchone()
                cur.close()
        finally:
            conn.close()
