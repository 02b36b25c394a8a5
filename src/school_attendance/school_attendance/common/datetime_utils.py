from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Iterator


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp ("2024-01-15T09:05:00").

    A trailing "Z" is accepted; the result is converted to naive local time so
    it compares with session start times, which are local wall-clock times.
    """
    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def parse_hhmm(value: str) -> time:
    hours, minutes = value.split(":")
    return time(hour=int(hours), minute=int(minutes))


def combine_hhmm(day: date, hhmm: str) -> datetime:
    """Local datetime for "HH:MM" on the given calendar day."""
    return datetime.combine(day, parse_hhmm(hhmm))


def week_dates(start: date, end: date, weekday: int) -> Iterator[date]:
    """Yield every date in [start, end] falling on `weekday` (Monday=0)."""
    current = start + timedelta(days=(weekday - start.weekday()) % 7)
    while current <= end:
        yield current
        current += timedelta(days=7)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
