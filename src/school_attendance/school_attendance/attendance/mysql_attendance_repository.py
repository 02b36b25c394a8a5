from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from ..core.enums import AttendanceStatus, DayOfWeek
from ..core.exceptions import DuplicateRecordError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    fetchall,
    fetchone,
    is_duplicate_key,
    mysql_time_to_hhmm,
    updated_or_exists,
)
from .model import AttendanceRecord
from .repository import AttendanceRepository

_EXISTS_SQL = "SELECT 1 AS found FROM attendance_records WHERE attendance_id=%s"

# The schedule join gives the school of a record for tenant filtering.
_FROM_ATTENDANCE = """
    FROM attendance_records a
    JOIN course_schedules sc ON sc.schedule_id = a.schedule_id
"""

_SELECT_ATTENDANCE = f"""
    SELECT a.attendance_id, a.student_id, a.course_id, a.schedule_id, a.device_id, a.classroom,
           a.check_in_time, a.session_date, a.session_day, a.session_start_time, a.session_end_time,
           a.status, a.notes, a.card_id
    {_FROM_ATTENDANCE}
"""


def _to_record(r: dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        student_id=int(r["student_id"]),
        course_id=int(r["course_id"]),
        schedule_id=int(r["schedule_id"]),
        device_id=int(r["device_id"]) if r.get("device_id") is not None else None,
        classroom=r["classroom"],
        check_in_time=r["check_in_time"],
        session_date=r["session_date"],
        session_day=DayOfWeek(r["session_day"]) if r.get("session_day") else None,
        session_start_time=mysql_time_to_hhmm(r.get("session_start_time")),
        session_end_time=mysql_time_to_hhmm(r.get("session_end_time")),
        status=AttendanceStatus(r["status"]),
        notes=r.get("notes"),
        card_id=r.get("card_id"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT_ATTENDANCE} WHERE a.attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

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
        clauses: list[str] = []
        params: list[object] = []
        for column, value in (
            ("sc.school_id", school_id),
            ("a.course_id", course_id),
            ("a.schedule_id", schedule_id),
            ("a.student_id", student_id),
        ):
            if value is not None:
                clauses.append(f"{column}=%s")
                params.append(int(value))
        if status is not None:
            clauses.append("a.status=%s")
            params.append(status.value)
        if start_date is not None:
            clauses.append("a.session_date>=%s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("a.session_date<=%s")
            params.append(end_date)
        where = " AND ".join(clauses) or "1=1"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total {_FROM_ATTENDANCE} WHERE {where}", tuple(params))
            total = int(fetchone(cur)["total"])
            cur.execute(
                f"""
                {_SELECT_ATTENDANCE}
                WHERE {where}
                ORDER BY a.session_date DESC, a.check_in_time DESC, a.attendance_id DESC
                LIMIT %s OFFSET %s
                """,
                (*params, int(limit), int(offset)),
            )
            return [_to_record(r) for r in fetchall(cur)], total

    def exists_for_session(self, *, student_id: int, schedule_id: int, session_date: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT 1 AS found
                FROM attendance_records
                WHERE student_id=%s AND schedule_id=%s AND session_date=%s
                LIMIT 1
                """,
                (int(student_id), int(schedule_id), session_date),
            )
            return fetchone(cur) is not None

    def create(self, record: AttendanceRecord) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        student_id, course_id, schedule_id, device_id, classroom, check_in_time,
                        session_date, session_day, session_start_time, session_end_time,
                        status, notes, card_id
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(record.student_id),
                        int(record.course_id),
                        int(record.schedule_id),
                        record.device_id,
                        record.classroom,
                        record.check_in_time,
                        record.session_date,
                        record.session_day.value if record.session_day else None,
                        record.session_start_time,
                        record.session_end_time,
                        record.status.value,
                        record.notes,
                        record.card_id,
                    ),
                )
                return int(cur.lastrowid)
        except Exception as exc:
            if is_duplicate_key(exc):
                raise DuplicateRecordError("Attendance already recorded for this student and session") from exc
            raise

    def update_status(self, *, attendance_id: int, status: AttendanceStatus, notes: Optional[str] = None) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendance_records SET status=%s, notes=%s WHERE attendance_id=%s",
                (status.value, notes, int(attendance_id)),
            )
            return updated_or_exists(cur, _EXISTS_SQL, (int(attendance_id),))

    def update_check_in(self, *, attendance_id: int, check_in_time: datetime, status: AttendanceStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendance_records SET check_in_time=%s, status=%s WHERE attendance_id=%s",
                (check_in_time, status.value, int(attendance_id)),
            )
            return updated_or_exists(cur, _EXISTS_SQL, (int(attendance_id),))
