"""
Standardized Date/Time Handling Utilities

Streaks are counted in calendar days of a single reference timezone.

CRITICAL RULES:
- Timezone-aware datetimes are converted to the reference timezone first
- Naive datetimes are assumed to already be in the reference timezone
- Plain dates are used as-is
- Time of day never affects day differences
"""

import logging
from datetime import datetime, date, timezone
from typing import Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from src import config

logger = logging.getLogger(__name__)

DateLike = Union[datetime, date]

# Fallback if the configured timezone cannot be loaded
DEFAULT_TIMEZONE = "UTC"


def get_reference_timezone(tz_name: Optional[str] = None) -> ZoneInfo:
    """
    Get the reference timezone, or the default when it is invalid

    Args:
        tz_name: IANA timezone name (defaults to REFERENCE_TIMEZONE)

    Returns:
        ZoneInfo object for the reference calendar
    """
    tz_str = tz_name or config.REFERENCE_TIMEZONE

    try:
        return ZoneInfo(tz_str)
    except (ZoneInfoNotFoundError, ValueError) as e:
        logger.error(f"Invalid timezone '{tz_str}': {e}")
        return ZoneInfo(DEFAULT_TIMEZONE)


def now_utc() -> datetime:
    """
    Get current datetime in UTC (timezone-aware)

    Returns:
        Current datetime in UTC with timezone info
    """
    return datetime.now(timezone.utc)


def to_reference_datetime(value: datetime, tz_name: Optional[str] = None) -> datetime:
    """Express a datetime in the reference timezone (naive values pass through)"""
    if value.tzinfo is None:
        return value
    return value.astimezone(get_reference_timezone(tz_name))


def to_reference_date(value: DateLike, tz_name: Optional[str] = None) -> date:
    """Calendar day of a date/datetime in the reference timezone"""
    if not isinstance(value, datetime):
        return value
    return to_reference_datetime(value, tz_name).date()


def days_between(earlier: DateLike, later: DateLike, tz_name: Optional[str] = None) -> int:
    """
    Whole calendar days from earlier to later, ignoring time of day

    Negative when later falls on an earlier day than earlier.

    Example:
        >>> days_between(datetime(2024, 1, 1, 23, 59), datetime(2024, 1, 2, 0, 1))
        1
    """
    return (to_reference_date(later, tz_name) - to_reference_date(earlier, tz_name)).days


def local_hour(value: datetime, tz_name: Optional[str] = None) -> int:
    """Hour of day (0-23) of a datetime in the reference timezone"""
    return to_reference_datetime(value, tz_name).hour


def _comparable(value: datetime, tz_name: Optional[str] = None) -> datetime:
    """Aware form of a datetime; naive values are read as reference-local"""
    if value.tzinfo is None:
        return value.replace(tzinfo=get_reference_timezone(tz_name))
    return value


def latest(current: Optional[datetime], candidate: datetime, tz_name: Optional[str] = None) -> datetime:
    """The later of two datetimes, mixing naive and aware values safely"""
    if current is None:
        return candidate
    return candidate if _comparable(candidate, tz_name) > _comparable(current, tz_name) else current


def earliest(current: Optional[datetime], candidate: datetime, tz_name: Optional[str] = None) -> datetime:
    """The earlier of two datetimes, mixing naive and aware values safely"""
    if current is None:
        return candidate
    return candidate if _comparable(candidate, tz_name) < _comparable(current, tz_name) else current
