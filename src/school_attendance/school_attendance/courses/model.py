from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Course:
    course_id: int
    school_id: int
    name: str
    code: str


@dataclass(frozen=True)
class Teacher:
    teacher_id: int
    school_id: int
    name: str
    email: Optional[str] = None
    is_active: bool = True
