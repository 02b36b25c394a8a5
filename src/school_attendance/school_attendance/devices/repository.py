from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from .model import Device


class DeviceRepository(Protocol):
    def get_by_id(self, device_id: int) -> Optional[Device]:
        raise NotImplementedError

    def touch_last_seen(self, device_id: int, *, seen_at: datetime) -> bool:
        raise NotImplementedError
