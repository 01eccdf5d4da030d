"""
Routine Streak Calculation

A streak is the number of consecutive local calendar days, walked backward
from the logical "today", on which at least one routine slot (morning or
night) was completed.

Rules:
- Before DAY_ROLLOVER_HOUR (6 AM) local time, "today" is still yesterday,
  so a routine done after midnight counts for the night it belongs to
- Today may be missing without breaking the streak (one grace day, only
  for today, never for any earlier day)
- The walk stops at the first missing day after that, or after
  STREAK_LOOKBACK_DAYS iterations

The streak is always recomputed from the full completion map, so the stored
counters can never drift from the raw history.
"""

from typing import Mapping, Optional
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo
import logging

from skincare_tracker.config import DAY_ROLLOVER_HOUR, STREAK_LOOKBACK_DAYS
from skincare_tracker.models.progress import DayCompletions, StreakResult
from skincare_tracker.utils.datetime_helpers import date_key, local_now

logger = logging.getLogger(__name__)


def logical_today(
    now: Optional[datetime] = None,
    tz: Optional[ZoneInfo] = None,
    rollover_hour: int = DAY_ROLLOVER_HOUR
) -> date:
    """
    Local calendar date the user is currently "in"

    Args:
        now: Reference instant (defaults to current time)
        tz: User zone (None = USER_TIMEZONE, else host local zone)
        rollover_hour: Local hour at which the new day starts

    Returns:
        Today's local date, or yesterday's when before the rollover hour
    """
    local = local_now(now, tz)
    today = local.date()
    if local.hour < rollover_hour:
        today -= timedelta(days=1)
    return today


def is_qualifying_day(day: Optional[DayCompletions | Mapping]) -> bool:
    """True when the day has a completed morning or night slot"""
    if day is None:
        return False
    if not isinstance(day, DayCompletions):
        day = DayCompletions.model_validate(day)
    return day.qualifies


def calculate_streak(
    completions: Mapping[str, DayCompletions | Mapping],
    now: Optional[datetime] = None,
    tz: Optional[ZoneInfo] = None
) -> StreakResult:
    """
    Calculate the current streak from a completion map

    Pure function: reads nothing but its arguments (and the clock when
    `now` is omitted).

    Args:
        completions: {"YYYY-MM-DD": DayCompletions} in local calendar dates
        now: Reference instant (defaults to current time)
        tz: User zone (None = USER_TIMEZONE, else host local zone)

    Returns:
        StreakResult with the streak length and contributing dates,
        most recent first
    """
    if not completions:
        return StreakResult(current=0, dates=[])

    current_day = logical_today(now, tz)
    streak_dates: list[str] = []

    for offset in range(STREAK_LOOKBACK_DAYS):
        key = date_key(current_day)

        if is_qualifying_day(completions.get(key)):
            streak_dates.append(key)
        elif offset == 0:
            # Today not done yet: look at yesterday instead
            pass
        else:
            break

        current_day -= timedelta(days=1)

    logger.debug(f"Calculated streak of {len(streak_dates)} days ending {streak_dates[:1]}")
    return StreakResult(current=len(streak_dates), dates=streak_dates)
