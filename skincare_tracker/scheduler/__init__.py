"""Reminder scheduling"""

from skincare_tracker.scheduler.reminder_manager import ReminderManager, create_reminder

__all__ = ["ReminderManager", "create_reminder"]
