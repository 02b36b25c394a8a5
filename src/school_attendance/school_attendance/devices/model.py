from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Device:
    """RFID reader installed in a classroom."""

    device_id: int
    school_id: int
    classroom: str
    location: str
    is_active: bool = True
    status: str = "Operational"
    last_seen: Optional[datetime] = None
