from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.constants import DEFAULT_LATE_THRESHOLD_MINUTES
from ..core.enums import AttendanceStatus
from .status import derive_status, minutes_from_start
from .strategies.absent_strategy import AbsentStrategy
from .strategies.base import AttendanceStrategy, StatusDecision
from .strategies.late_strategy import LateStrategy
from .strategies.present_strategy import PresentStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose the strategy matching the derived status."""

    late_threshold_minutes: int = DEFAULT_LATE_THRESHOLD_MINUTES

    def for_checkin(
        self,
        *,
        check_in_time: datetime,
        session_date: date,
        session_start_time: Optional[str],
    ) -> AttendanceStrategy:
        status = derive_status(
            check_in_time,
            session_date,
            session_start_time,
            late_threshold_minutes=self.late_threshold_minutes,
        )
        if status == AttendanceStatus.LATE:
            return LateStrategy()
        if status == AttendanceStatus.ABSENT:
            return AbsentStrategy()
        return PresentStrategy()

    def decide(
        self,
        *,
        check_in_time: datetime,
        session_date: date,
        session_start_time: Optional[str],
    ) -> StatusDecision:
        strategy = self.for_checkin(
            check_in_time=check_in_time,
            session_date=session_date,
            session_start_time=session_start_time,
        )
        minutes = minutes_from_start(check_in_time, session_date, session_start_time) if session_start_time else None
        return strategy.decide_checkin(minutes_from_start=minutes)
