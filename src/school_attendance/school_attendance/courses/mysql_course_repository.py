from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Course, Teacher
from .repository import CourseRepository


class MySQLCourseRepository(CourseRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_course(self, course_id: int) -> Optional[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT course_id, school_id, name, code FROM courses WHERE course_id=%s",
                (int(course_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Course(course_id=int(r["course_id"]), school_id=int(r["school_id"]), name=r["name"], code=r["code"])

    def get_teacher(self, teacher_id: int) -> Optional[Teacher]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT teacher_id, school_id, name, email, is_active FROM teachers WHERE teacher_id=%s",
                (int(teacher_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Teacher(
                teacher_id=int(r["teacher_id"]),
                school_id=int(r["school_id"]),
                name=r["name"],
                email=r.get("email"),
                is_active=bool(r["is_active"]),
            )
