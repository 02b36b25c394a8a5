from __future__ import annotations

from datetime import datetime

import pytest

from fakes import InMemoryCourses, InMemoryDevices, InMemoryStudents
from school_attendance.courses.model import Course, Teacher
from school_attendance.core.enums import Role
from school_attendance.devices.model import Device
from school_attendance.students.model import Student
from school_attendance.users.model import AdminUser


@pytest.fixture
def fixed_now() -> datetime:
    # Monday
    return datetime(2026, 2, 2, 9, 0, 0)


@pytest.fixture
def school_admin() -> AdminUser:
    return AdminUser(user_id=10, role=Role.SCHOOL_ADMIN, school_id=1)


@pytest.fixture
def super_admin() -> AdminUser:
    return AdminUser(user_id=1, role=Role.SUPER_ADMIN)


@pytest.fixture
def courses() -> InMemoryCourses:
    return InMemoryCourses(
        courses=[
            Course(course_id=1, school_id=1, name="Course A", code="A101"),
            Course(course_id=2, school_id=1, name="Course B", code="B101"),
            Course(course_id=9, school_id=2, name="Other School Course", code="X900"),
        ],
        teachers=[
            Teacher(teacher_id=1, school_id=1, name="T1"),
            Teacher(teacher_id=2, school_id=1, name="T2"),
            Teacher(teacher_id=9, school_id=2, name="T9"),
        ],
    )


@pytest.fixture
def students() -> InMemoryStudents:
    return InMemoryStudents(
        [
            Student(
                student_id=1,
                school_id=1,
                first_name="Chloe",
                last_name="Dubois",
                student_code="S0001",
                rfid_card_id="RFID123456",
            ),
            Student(
                student_id=2,
                school_id=2,
                first_name="Other",
                last_name="School",
                student_code="S9000",
                rfid_card_id="RFID999999",
            ),
        ]
    )


@pytest.fixture
def devices() -> InMemoryDevices:
    return InMemoryDevices(
        [
            Device(device_id=1, school_id=1, classroom="Room 101", location="Room 101 door"),
            Device(device_id=2, school_id=1, classroom="Room 202", location="Room 202 door", is_active=False),
        ]
    )
