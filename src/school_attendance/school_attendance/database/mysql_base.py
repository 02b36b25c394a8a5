"""Helpers shared by the MySQL repositories."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Dict, Iterator, List, Optional

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True) -> Iterator[tuple[Any, Any]]:
    """Yield (connection, cursor) for one unit of work.

    Commits when the block finishes, rolls back when it raises.
    """
    conn = conn_factory.connect()
    cur = conn.cursor(dictionary=dictionary)
    try:
        yield conn, cur
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        cur.close()
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return dict(row) if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    return [dict(r) for r in cur.fetchall()]


def is_duplicate_key(exc: Exception) -> bool:
    """True for MySQL error 1062, raised when a UNIQUE key rejects an insert."""
    return isinstance(exc, IntegrityError) and getattr(exc, "errno", None) == errorcode.ER_DUP_ENTRY


def normalize_mysql_time(value: Any) -> Optional[time]:
    # The C extension returns TIME columns as timedelta, the pure connector
    # sometimes as "HH:MM:SS" strings.
    if value is None or isinstance(value, time):
        return value
    if isinstance(value, timedelta):
        seconds = int(value.total_seconds()) % 86400
        return time(seconds // 3600, (seconds % 3600) // 60, seconds % 60)
    if isinstance(value, str):
        parts = [int(p) for p in value.strip().split(":") if p]
        if len(parts) < 2:
            raise ValueError(f"Invalid time string: {value!r}")
        return time(*parts[:3])
    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")


def mysql_time_to_hhmm(value: Any) -> Optional[str]:
    """TIME column as the zero-padded "HH:MM" used by weekly sessions."""
    t = normalize_mysql_time(value)
    return t.strftime("%H:%M") if t is not None else None


def updated_or_exists(cur, exists_sql: str, params: tuple) -> bool:
    """Whether the row targeted by the UPDATE just executed on `cur` exists.

    MySQL counts changed rows, not matched ones, so an UPDATE writing the
    values already stored reports rowcount 0.
    """
    if cur.rowcount > 0:
        return True
    cur.execute(exists_sql, params)
    return cur.fetchone() is not None
