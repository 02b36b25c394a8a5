from __future__ import annotations

from typing import Optional

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Check-in within the grace window after the session started."""

    def decide_checkin(self, *, minutes_from_start: Optional[int]) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.LATE, note=f"Late by {minutes_from_start} min")
