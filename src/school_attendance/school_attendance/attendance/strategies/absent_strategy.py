from __future__ import annotations

from typing import Optional

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class AbsentStrategy(AttendanceStrategy):
    """Check-in past the grace window; the session counts as missed."""

    def decide_checkin(self, *, minutes_from_start: Optional[int]) -> StatusDecision:
        return StatusDecision(
            status=AttendanceStatus.ABSENT,
            note=f"Checked in {minutes_from_start} min after session start",
        )
