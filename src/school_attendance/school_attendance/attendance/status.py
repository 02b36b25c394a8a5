"""Attendance status derivation from check-in time vs. session start.

Policy, with `threshold` = late threshold in minutes (15 by default):

    minutes <= 0                 -> Present  (on time or early)
    0 < minutes <= threshold     -> Late
    minutes > threshold          -> Absent

No session start time (an ad-hoc check-in) is always Present.
"""

from __future__ import annotations

import math
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import combine_hhmm
from ..core.constants import DEFAULT_LATE_THRESHOLD_MINUTES
from ..core.enums import AttendanceStatus


def minutes_from_start(check_in_time: datetime, session_date: date, session_start_time: str) -> int:
    """Whole minutes between the scheduled start and the check-in, rounded half up.

    Negative when the student arrived early.
    """
    scheduled_start = combine_hhmm(session_date, session_start_time)
    seconds = (check_in_time - scheduled_start).total_seconds()
    return math.floor(seconds / 60 + 0.5)


def derive_status(
    check_in_time: datetime,
    session_date: date,
    session_start_time: Optional[str] = None,
    *,
    late_threshold_minutes: int = DEFAULT_LATE_THRESHOLD_MINUTES,
) -> AttendanceStatus:
    if not session_start_time:
        return AttendanceStatus.PRESENT

    minutes = minutes_from_start(check_in_time, session_date, session_start_time)
    if minutes <= 0:
        return AttendanceStatus.PRESENT
    if minutes <= late_threshold_minutes:
        return AttendanceStatus.LATE
    return AttendanceStatus.ABSENT
