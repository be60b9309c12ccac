"""Timestamp normalization utilities for patch server data."""

import re
from datetime import MINYEAR, datetime, timezone
from typing import Any, Optional

from dateutil import parser as dateutil_parser

# JSON serializers on Windows servers emit dates as /Date(1705084800000)/
_MS_DATE_RE = re.compile(r"^/Date\((-?\d+)(?:[+-]\d{4})?\)/$")

# Never-synced machines report the minimum date or the Unix epoch
_NEVER_SYNCED_BEFORE = datetime(1970, 1, 2, tzinfo=timezone.utc)


class TimestampRangeError(ValueError):
    """A timestamp that parses but falls outside the datetime range.

    Attributes:
        below_minimum: True when the value lies before year 1.
    """

    def __init__(self, value: Any, below_minimum: bool) -> None:
        self.below_minimum = below_minimum
        super().__init__(f"Timestamp out of range: {value!r}")


def _from_epoch(seconds: float, value: Any) -> datetime:
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise TimestampRangeError(value, below_minimum=seconds < 0) from e


def normalize_timestamp(
    value: Any,
    assume_utc: bool = True,
) -> datetime:
    """Convert various timestamp formats to UTC datetime.

    Handles:
    - int/float: Unix timestamp (auto-detects milliseconds vs seconds)
    - str: ISO format, "/Date(ms)/" or other parseable formats via dateutil
    - datetime: Returns as-is if aware, converts if naive

    Args:
        value: Timestamp as int (ms or s), float, str, or datetime
        assume_utc: If True, treat naive timestamps as UTC (default True)

    Returns:
        Timezone-aware datetime in UTC

    Raises:
        ValueError: If value cannot be parsed as a timestamp
        TimestampRangeError: If value parses but has no UTC datetime

    Example:
        >>> normalize_timestamp(1705084800000)  # milliseconds
        datetime.datetime(2024, 1, 12, 18, 40, tzinfo=datetime.timezone.utc)
        >>> normalize_timestamp("/Date(1705084800000)/")
        datetime.datetime(2024, 1, 12, 18, 40, tzinfo=datetime.timezone.utc)
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, bool):
        raise ValueError(f"Cannot parse timestamp: {value!r} (type: bool)")
    elif isinstance(value, (int, float)):
        # Timestamps > 1e12 are milliseconds (after year 2001)
        if abs(value) > 1e12:
            return _from_epoch(value / 1000, value)
        return _from_epoch(value, value)
    elif isinstance(value, str):
        match = _MS_DATE_RE.match(value.strip())
        if match:
            return _from_epoch(int(match.group(1)) / 1000, value)
        try:
            dt = dateutil_parser.parse(value)
        except (dateutil_parser.ParserError, OverflowError) as e:
            raise ValueError(f"Cannot parse timestamp: {value!r}") from e
    else:
        raise ValueError(f"Cannot parse timestamp: {value!r} (type: {type(value).__name__})")

    if dt.tzinfo is None and assume_utc:
        return dt.replace(tzinfo=timezone.utc)

    try:
        return dt.astimezone(timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise TimestampRangeError(value, below_minimum=dt.year == MINYEAR) from e


def parse_last_sync(value: Any) -> Optional[datetime]:
    """Normalize a machine's last-sync time, mapping "never" sentinels to None.

    Empty values, the minimum date (0001-01-01) and the Unix epoch (shifted
    by any local offset) all mean the machine has never synced. A minimum
    date whose offset pushes it before year 1 in UTC counts too.
    """
    if value is None or value == "":
        return None
    try:
        dt = normalize_timestamp(value)
    except TimestampRangeError as e:
        if e.below_minimum:
            return None
        raise
    if dt < _NEVER_SYNCED_BEFORE:
        return None
    return dt
