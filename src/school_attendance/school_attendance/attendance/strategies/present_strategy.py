from __future__ import annotations

from typing import Optional

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class PresentStrategy(AttendanceStrategy):
    """On-time, early, or unscheduled check-in."""

    def decide_checkin(self, *, minutes_from_start: Optional[int]) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)
