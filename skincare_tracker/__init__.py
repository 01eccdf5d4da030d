"""Skincare routine tracker: completion streaks and local reminders"""

__version__ = "0.1.0"
