from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ...core.enums import AttendanceStatus


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    note: Optional[str] = None


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate the outcome recorded for a check-in."""

    @abstractmethod
    def decide_checkin(self, *, minutes_from_start: Optional[int]) -> StatusDecision:
        """`minutes_from_start` is None for check-ins without a scheduled start."""
        raise NotImplementedError
