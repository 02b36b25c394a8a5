from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, updated_or_exists
from .model import Device
from .repository import DeviceRepository


class MySQLDeviceRepository(DeviceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, device_id: int) -> Optional[Device]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT device_id, school_id, classroom, location, is_active, status, last_seen
                FROM devices
                WHERE device_id=%s
                """,
                (int(device_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Device(
                device_id=int(r["device_id"]),
                school_id=int(r["school_id"]),
                classroom=r["classroom"],
                location=r["location"],
                is_active=bool(r["is_active"]),
                status=r["status"],
                last_seen=r.get("last_seen"),
            )

    def touch_last_seen(self, device_id: int, *, seen_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE devices SET last_seen=%s WHERE device_id=%s", (seen_at, int(device_id)))
            return updated_or_exists(cur, "SELECT 1 AS found FROM devices WHERE device_id=%s", (int(device_id),))
