from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

from ..core.constants import DISPLAY_TIMESTAMP_FORMAT
from ..core.exceptions import TimestampFormatError

# ISO-8601 with optional fraction and zone, or MySQL "YYYY-MM-DD HH:MM:SS".
_ACCEPTED = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}(?::\d{2})?)"
    r"(?:\.(?P<frac>\d{1,6}))?"
    r"(?P<zone>Z|[+-]\d{2}:?\d{2})?$"
)


def parse_timestamp(value: object) -> datetime:
    """Parse a timestamp from the backing service.

    Only ISO-8601 and MySQL DATETIME strings are accepted. Anything else,
    including values with trailing bracketed suffixes such as ``[PM1]``,
    raises TimestampFormatError instead of being patched up.
    """
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise TimestampFormatError(f"Unsupported timestamp value: {value!r}")

    m = _ACCEPTED.match(value.strip())
    if not m:
        raise TimestampFormatError(f"Unsupported timestamp format: {value!r}")

    # fromisoformat on 3.10 wants a 3 or 6 digit fraction and a +HH:MM offset.
    v = m.group("base")
    if m.group("frac"):
        v += "." + m.group("frac").ljust(6, "0")
    zone = m.group("zone")
    if zone == "Z":
        v += "+00:00"
    elif zone:
        v += zone if ":" in zone else f"{zone[:3]}:{zone[3:]}"
    try:
        return datetime.fromisoformat(v)
    except ValueError:
        raise TimestampFormatError(f"Invalid timestamp: {value!r}")


def format_timestamp(value: Optional[datetime]) -> str:
    if value is None:
        return "N/A"
    return value.strftime(DISPLAY_TIMESTAMP_FORMAT)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch it.
    """
    return datetime.now()
