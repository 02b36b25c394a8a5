from __future__ import annotations

import re
from datetime import date
from typing import Any, Iterable, Optional

from ..core.enums import DayOfWeek
from ..core.exceptions import ValidationError
from ..schedules.model import WeeklySession

_HHMM_RE = re.compile(r"^([01]?[0-9]|2[0-3]):([0-5][0-9])$")


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_max_length(value: Optional[str], field_name: str, max_len: int) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")
    if len(value) > max_len:
        raise ValidationError(f"{field_name} cannot exceed {max_len} characters")
    return value


def require_positive_int(value: Any, field_name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer") from None
    if number <= 0:
        raise ValidationError(f"{field_name} must be positive")
    return number


def require_hhmm(value: Optional[str], field_name: str) -> str:
    """Validate "H:MM"/"HH:MM" and return the zero-padded "HH:MM" form.

    Zero padding matters: session times are compared as strings.
    """
    match = _HHMM_RE.match(str(value or "").strip())
    if not match:
        raise ValidationError(f"{field_name} must be in HH:MM format")
    return f"{int(match.group(1)):02d}:{match.group(2)}"


def require_day(value: Any) -> DayOfWeek:
    if isinstance(value, DayOfWeek):
        return value
    try:
        return DayOfWeek(str(value).strip().capitalize())
    except ValueError:
        raise ValidationError(f"Invalid day: {value!r}") from None


def require_weekly_sessions(sessions: Optional[Iterable[Any]]):
    """Validate raw weekly sessions (dicts or WeeklySession) into a tuple of WeeklySession."""
    out = []
    for raw in sessions or ():
        if isinstance(raw, WeeklySession):
            raw = {"day": raw.day, "start_time": raw.start_time, "end_time": raw.end_time}
        if not isinstance(raw, dict):
            raise ValidationError("Each weekly session must be an object")

        day = require_day(raw.get("day"))
        start = require_hhmm(raw.get("start_time", raw.get("startTime")), "Start time")
        end = require_hhmm(raw.get("end_time", raw.get("endTime")), "End time")
        if start >= end:
            raise ValidationError(f"Session on {day.value} must end after it starts")
        out.append(WeeklySession(day=day, start_time=start, end_time=end))

    if not out:
        raise ValidationError("At least one weekly session is required")
    return tuple(out)


def require_date_range(start: date, end: date) -> None:
    if start > end:
        raise ValidationError("Start date must not be after end date")
