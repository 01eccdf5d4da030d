"""
Standardized Date/Time Handling Utilities

Centralizes the conversions the tracker relies on:
1. Timestamps are stored as integer epoch milliseconds
2. Calendar days are stored as local "YYYY-MM-DD" keys
3. "Local" means the configured USER_TIMEZONE, or the host zone when unset

Never derive a calendar key from a UTC datetime; the day boundary must be
the user's local midnight.
"""

import logging
from datetime import datetime, date, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from skincare_tracker import config
from skincare_tracker.exceptions import ValidationError

logger = logging.getLogger(__name__)

DATE_KEY_FORMAT = "%Y-%m-%d"


def now_ms() -> int:
    """Current time as epoch milliseconds"""
    return int(datetime.now(timezone.utc).timestamp() * 1000)


def to_millis(dt: datetime) -> int:
    """
    Convert a datetime to epoch milliseconds

    Naive datetimes are interpreted in the host's local zone.
    """
    return int(dt.timestamp() * 1000)


def user_timezone(tz: Optional[ZoneInfo] = None) -> Optional[ZoneInfo]:
    """
    Zone that decides the user's calendar day

    An explicit zone wins; otherwise USER_TIMEZONE, read at call time.
    None means the host's local zone.
    """
    return tz if tz is not None else config.get_user_timezone()


def from_millis(ms: int, tz: Optional[ZoneInfo] = None) -> datetime:
    """
    Convert epoch milliseconds to an aware datetime in the user's zone

    Args:
        ms: Epoch milliseconds
        tz: Target zone (None = USER_TIMEZONE, else host local zone)

    Returns:
        Timezone-aware datetime
    """
    tz = user_timezone(tz)
    dt = datetime.fromtimestamp(ms / 1000, tz=timezone.utc)
    return dt.astimezone(tz) if tz else dt.astimezone()


def local_now(now: Optional[datetime] = None, tz: Optional[ZoneInfo] = None) -> datetime:
    """
    Resolve "now" as an aware datetime in the user's local zone

    Args:
        now: Reference instant (defaults to the current time). Naive values
            are treated as already local.
        tz: User zone (None = USER_TIMEZONE, else host local zone)
    """
    tz = user_timezone(tz)
    if now is None:
        return datetime.now(tz) if tz else datetime.now().astimezone()
    if now.tzinfo is None:
        return now.replace(tzinfo=tz) if tz else now.astimezone()
    return now.astimezone(tz) if tz else now.astimezone()


def date_key(day: date) -> str:
    """Format a calendar date as a completion-map key"""
    return day.strftime(DATE_KEY_FORMAT)


def parse_date_key(value: str, field: str = "date") -> date:
    """
    Parse a "YYYY-MM-DD" completion-map key

    Raises:
        ValidationError: if the value is not a real calendar date in that format
    """
    if not isinstance(value, str) or len(value) != 10:
        raise ValidationError(
            f"Invalid date format: '{value}'. Must be YYYY-MM-DD",
            field=field,
            value=value
        )
    try:
        return datetime.strptime(value, DATE_KEY_FORMAT).date()
    except ValueError:
        raise ValidationError(
            f"Invalid date format: '{value}'. Must be YYYY-MM-DD",
            field=field,
            value=value
        )
