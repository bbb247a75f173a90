from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from src.apology_review.apology_review.common.datetime_utils import format_timestamp, parse_timestamp
from src.apology_review.apology_review.core.exceptions import TimestampFormatError


def test_parses_iso_with_zulu():
    assert parse_timestamp("2026-03-01T09:30:00Z") == datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)


def test_parses_mysql_datetime():
    assert parse_timestamp("2026-03-01 09:30:00") == datetime(2026, 3, 1, 9, 30)


def test_parses_offset():
    dt = parse_timestamp("2026-03-01T09:30:00+02:00")
    assert dt.utcoffset() == timedelta(hours=2)


@pytest.mark.parametrize(
    "value",
    ["2026-03-01 09:30:00 [PM1]", "03/01/2026 9:30 PM", "", "yesterday", 1700000000, None],
)
def test_rejects_anything_else(value):
    with pytest.raises(TimestampFormatError):
        parse_timestamp(value)


def test_datetime_passes_through():
    dt = datetime(2026, 3, 1)
    assert parse_timestamp(dt) is dt


def test_format_timestamp():
    assert format_timestamp(None) == "N/A"
    assert format_timestamp(datetime(2026, 3, 1, 21, 5)) == "Mar 01, 2026 at 09:05 PM"


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2026-03-01T09:30:00.5+0300", datetime(2026, 3, 1, 9, 30, 0, 500000, tzinfo=timezone(timedelta(hours=3)))),
        ("2026-03-01T09:30:00.1234Z", datetime(2026, 3, 1, 9, 30, 0, 123400, tzinfo=timezone.utc)),
        ("2026-03-01 09:30:00-0130", datetime(2026, 3, 1, 9, 30, tzinfo=timezone(-timedelta(hours=1, minutes=30)))),
    ],
)
def test_short_fractions_and_compact_offsets(value, expected):
    assert parse_timestamp(value) == expected
