"""Formatters for reminder times"""
from datetime import timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from skincare_tracker.utils.datetime_helpers import from_millis


def get_time_until(when: int, now: int) -> str:
    """
    Compact countdown to a reminder

    Args:
        when: Fire time, epoch millis
        now: Current time, epoch millis

    Returns:
        "Expired", "2d 3h", "1h 15m" or "42m"
    """
    diff = when - now
    if diff <= 0:
        return "Expired"

    minutes = diff // 1000 // 60
    hours = minutes // 60
    days = hours // 24

    if days > 0:
        return f"{days}d {hours % 24}h"
    if hours > 0:
        return f"{hours}h {minutes % 60}m"
    return f"{minutes}m"


def format_reminder_time(when: int, now: int, tz: Optional[ZoneInfo] = None) -> str:
    """
    Human-readable fire time relative to today

    Args:
        when: Fire time, epoch millis
        now: Current time, epoch millis
        tz: User zone (None = USER_TIMEZONE, else host local zone)

    Returns:
        "Today at 21:30", "Tomorrow at 08:00" or "5 Jun, 08:00"
    """
    fire_at = from_millis(when, tz)
    today = from_millis(now, tz).date()
    time_str = fire_at.strftime("%H:%M")

    if fire_at.date() == today:
        return f"Today at {time_str}"
    if fire_at.date() == today + timedelta(days=1):
        return f"Tomorrow at {time_str}"
    return f"{fire_at.day} {fire_at.strftime('%b')}, {time_str}"
