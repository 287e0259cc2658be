"""
Time helpers for the reminder pipeline.

Task start times are stored and transported as naive local wall-clock values.
They are interpreted under a single fixed UTC offset
(REMINDER_DEFAULT_TZ_OFFSET_MINUTES), not per-user timezone data.
"""
import calendar
import math
import re
import time
from datetime import datetime, timedelta, timezone as dt_timezone
from typing import Any, Optional

from pecal.core.config import settings

FALLBACK_OFFSET_MINUTES = 540
MAX_REMINDER_MINUTES = 7 * 24 * 60

_NAIVE_DATETIME_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})[ T](\d{2}):(\d{2})(?::(\d{2}))?")


def resolve_offset_minutes(value: Optional[int] = None) -> int:
    offset = settings.REMINDER_DEFAULT_TZ_OFFSET_MINUTES if value is None else value
    try:
        offset_f = float(offset)
    except (TypeError, ValueError):
        return FALLBACK_OFFSET_MINUTES
    if math.isfinite(offset_f) and abs(offset_f) <= 24 * 60:
        return int(offset_f)
    return FALLBACK_OFFSET_MINUTES


def now_unix() -> int:
    return int(time.time())


def to_local_naive(dt: datetime, offset_minutes: Optional[int] = None) -> datetime:
    """
    Express a datetime as naive wall time under the fixed offset.
    - Aware datetimes are converted to the offset and tzinfo is stripped
    - Naive datetimes are assumed local and returned as-is
    """
    if dt.tzinfo is None:
        return dt
    tz = dt_timezone(timedelta(minutes=resolve_offset_minutes(offset_minutes)))
    return dt.astimezone(tz).replace(tzinfo=None)


def parse_datetime_to_unix(value: Any, offset_minutes: Optional[int] = None) -> Optional[int]:
    """
    Convert a task start time to unix seconds.
    - Aware datetimes are converted directly
    - Naive datetimes and "YYYY-MM-DD HH:MM[:SS]" strings are local wall time
      under the configured fixed offset
    Returns None when the value cannot be parsed.
    """
    if value is None:
        return None
    offset = resolve_offset_minutes(offset_minutes)
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return int(math.floor(value.timestamp()))
        return calendar.timegm(value.timetuple()) - offset * 60
    if not isinstance(value, str):
        return None
    match = _NAIVE_DATETIME_RE.match(value.strip())
    if not match:
        return None
    y, m, d, hh, mm, ss = match.groups()
    try:
        wall = datetime(int(y), int(m), int(d), int(hh), int(mm), int(ss or "0"))
    except ValueError:
        return None
    return calendar.timegm(wall.timetuple()) - offset * 60


def sanitize_reminder_minutes(value: Any) -> Optional[int]:
    """Return the reminder offset as an int in [0, 10080], or None if disabled/invalid."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if value == "":
            return None
    try:
        minutes = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(minutes):
        return None
    safe = int(minutes)  # truncates toward zero
    if safe < 0 or safe > MAX_REMINDER_MINUTES:
        return None
    return safe
