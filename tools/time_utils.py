"""
Time Utilities
UTC normalization, timezone resolution and local-day arithmetic shared by
the adherence engine and the services around it
"""

import logging
from datetime import datetime, date, time, timedelta, timezone
from typing import Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from config import settings


logger = logging.getLogger(__name__)

UTC = timezone.utc

# Local days whose UTC bounds stay representable for any real UTC offset
MIN_LOCAL_DATE = date.min + timedelta(days=1)
MAX_LOCAL_DATE = date.max - timedelta(days=1)


def utc_now() -> datetime:
    """Current instant as an aware UTC datetime"""
    return datetime.now(UTC)


def ensure_utc(dt: datetime) -> datetime:
    """Return an aware UTC datetime; naive values are taken to be UTC already"""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def to_naive_utc(dt: datetime) -> datetime:
    """Form used for DateTime columns"""
    return ensure_utc(dt).replace(tzinfo=None)


def isoformat_utc(dt: datetime) -> str:
    """ISO-8601 string with a Z suffix"""
    return ensure_utc(dt).isoformat().replace("+00:00", "Z")


def is_valid_timezone(name: Optional[str]) -> bool:
    """Strict IANA name check for the profile write path"""
    if not name or not isinstance(name, str):
        return False
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True


def resolve_timezone(name: Optional[str]) -> ZoneInfo:
    """
    Resolve a user's timezone for expansion.

    Missing names use the configured default. Unknown names fall back to UTC
    so a bad profile value degrades a report instead of failing it.
    """
    candidate = name or settings.DEFAULT_TIMEZONE
    try:
        return ZoneInfo(candidate)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone {candidate!r}, falling back to UTC")
        return ZoneInfo("UTC")


def parse_hhmm(value) -> Optional[time]:
    """
    Parse a wall-clock time string.

    Accepts 'HH:MM' (and 'HH:MM:SS' as stored by older clients).
    Returns None for anything unparseable.
    """
    if not isinstance(value, str) or not value:
        return None
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(value, fmt).time()
        except ValueError:
            continue
    return None


def local_range_to_utc(from_date: date, to_date: date, tz: ZoneInfo) -> Tuple[datetime, datetime]:
    """
    Convert an inclusive range of local calendar days into UTC instants.

    The range starts at local midnight of from_date and ends at the last
    microsecond of to_date.
    """
    start = datetime.combine(from_date, time.min, tzinfo=tz)
    end = datetime.combine(to_date, time.max, tzinfo=tz)
    return start.astimezone(UTC), end.astimezone(UTC)


def shift_clamped(dt: datetime, delta: timedelta) -> datetime:
    """Shift an aware UTC instant, saturating at the datetime limits"""
    try:
        return dt + delta
    except OverflowError:
        limit = datetime.max if delta > timedelta(0) else datetime.min
        return limit.replace(tzinfo=UTC)


def is_reportable_date(value: date) -> bool:
    """True when value can bound a report in any timezone"""
    return MIN_LOCAL_DATE <= value <= MAX_LOCAL_DATE
