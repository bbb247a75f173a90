from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional, Tuple

from ..common.datetime_utils import parse_timestamp
from ..core.exceptions import TimestampFormatError


@contextmanager
def db_cursor(conn_factory, *, dictionary: bool = True) -> Iterator[Tuple[Any, Any]]:
    """Open a connection and cursor for one unit of work.

    Commits when the block exits cleanly, rolls back on any error.
    """
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def normalize_mysql_datetime(value: Any) -> Optional[datetime]:
    """Normalize DATETIME columns across connector implementations.

    The C extension returns ``datetime``; the pure-Python connector and
    some proxies hand back strings. Zero dates and unparsable values map
    to None.
    """

    if value is None or isinstance(value, datetime):
        return value

    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8", "replace")

    text = str(value).strip()
    if not text or text.startswith("0000-00-00"):
        return None
    try:
        return parse_timestamp(text)
    except TimestampFormatError:
        return None
