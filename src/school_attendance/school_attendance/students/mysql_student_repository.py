from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Student
from .repository import StudentRepository

_COLUMNS = "student_id, school_id, first_name, last_name, student_code, rfid_card_id, is_active"


def _to_student(r: dict) -> Student:
    return Student(
        student_id=int(r["student_id"]),
        school_id=int(r["school_id"]),
        first_name=r["first_name"],
        last_name=r["last_name"],
        student_code=r["student_code"],
        rfid_card_id=r.get("rfid_card_id"),
        is_active=bool(r["is_active"]),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, student_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE student_id=%s", (int(student_id),))
            r = fetchone(cur)
            return _to_student(r) if r else None

    def get_by_card(self, *, school_id: int, card_id: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM students WHERE rfid_card_id=%s AND school_id=%s AND is_active=1",
                (card_id, int(school_id)),
            )
            r = fetchone(cur)
            return _to_student(r) if r else None
