"""
Gamification for the skincare tracker

- Streak calculation over the completion history
- Progress ledger (completion marking, manual back-fill, undo)
- Achievements and streak challenges
"""

from skincare_tracker.gamification.streak_system import calculate_streak, logical_today, is_qualifying_day
from skincare_tracker.gamification.progress_ledger import ProgressLedger
from skincare_tracker.gamification.achievement_system import (
    build_user_stats,
    check_new_achievements,
    get_current_challenge,
    get_unlocked_achievements,
)

__all__ = [
    "calculate_streak",
    "logical_today",
    "is_qualifying_day",
    "ProgressLedger",
    "build_user_stats",
    "check_new_achievements",
    "get_current_challenge",
    "get_unlocked_achievements",
]
