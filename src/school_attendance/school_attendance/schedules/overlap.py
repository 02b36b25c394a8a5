"""Time-window overlap between weekly sessions.

Precondition: times are validated, zero-padded "HH:MM" strings (see
common.validators.require_hhmm). Malformed input is not re-checked here.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable

from .model import WeeklySession


def session_pair_overlaps(a: WeeklySession, b: WeeklySession) -> bool:
    # Half-open intervals: a session ending at 10:00 does not clash with one starting at 10:00.
    return a.day == b.day and a.start_time < b.end_time and a.end_time > b.start_time


def sessions_overlap(sessions_a: Iterable[WeeklySession], sessions_b: Iterable[WeeklySession]) -> bool:
    """True if any session of `sessions_a` overlaps any session of `sessions_b`."""
    sessions_b = list(sessions_b)
    for a in sessions_a:
        for b in sessions_b:
            if session_pair_overlaps(a, b):
                return True
    return False


def date_ranges_intersect(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """Inclusive range intersection; ranges sharing a single day intersect."""
    return a_start <= b_end and a_end >= b_start
