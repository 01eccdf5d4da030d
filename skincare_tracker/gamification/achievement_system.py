"""
Achievement System

Achievements and streak challenges derived from a progress document:
- Consistency (streak lengths, perfect weeks)
- Volume (total days, morning/night routine counts)

Nothing here is persisted. Unlocked achievements are recomputed from the
stats each time; callers that want "newly unlocked" pass the ids they have
already shown to the user.
"""

from typing import Iterable, List, Optional
from datetime import timedelta
import logging

from skincare_tracker.exceptions import ValidationError
from skincare_tracker.models.achievement import (
    Achievement,
    Challenge,
    ChallengeReward,
    Rarity,
    UserStats,
)
from skincare_tracker.models.progress import ProgressData, Slot
from skincare_tracker.utils.datetime_helpers import parse_date_key

logger = logging.getLogger(__name__)

PERFECT_WEEK_DAYS = 7


ACHIEVEMENTS: List[Achievement] = [
    # Common (first days)
    Achievement(
        id="first-day",
        name="First Day",
        description="Complete your first routine",
        icon="✨",
        rarity=Rarity.COMMON,
        condition=lambda s: s.total_days_completed >= 1,
    ),
    Achievement(
        id="three-days",
        name="Consistency",
        description="Complete 3 days in a row",
        icon="🌟",
        rarity=Rarity.COMMON,
        condition=lambda s: s.current_streak >= 3,
    ),
    Achievement(
        id="morning-person",
        name="Early Bird",
        description="Complete 5 morning routines",
        icon="🌅",
        rarity=Rarity.COMMON,
        condition=lambda s: s.morning_routines >= 5,
    ),
    Achievement(
        id="night-owl",
        name="Night Owl",
        description="Complete 5 night routines",
        icon="🌙",
        rarity=Rarity.COMMON,
        condition=lambda s: s.night_routines >= 5,
    ),
    # Rare (one to two weeks)
    Achievement(
        id="week-warrior",
        name="Week Warrior",
        description="Complete 7 days in a row",
        icon="🔥",
        rarity=Rarity.RARE,
        condition=lambda s: s.current_streak >= 7,
    ),
    Achievement(
        id="two-weeks",
        name="Perfect Fortnight",
        description="Complete 15 days in a row",
        icon="💪",
        rarity=Rarity.RARE,
        condition=lambda s: s.current_streak >= 15,
    ),
    Achievement(
        id="perfect-week",
        name="Flawless Week",
        description="Complete morning and night for a whole week",
        icon="⭐",
        rarity=Rarity.RARE,
        condition=lambda s: s.perfect_weeks >= 1,
    ),
    Achievement(
        id="dedicated",
        name="Dedicated",
        description="Complete 20 routines in total",
        icon="🎯",
        rarity=Rarity.RARE,
        condition=lambda s: s.total_days_completed >= 20,
    ),
    # Epic (a month)
    Achievement(
        id="monthly-master",
        name="Monthly Master",
        description="Complete 30 days in a row",
        icon="👑",
        rarity=Rarity.EPIC,
        condition=lambda s: s.current_streak >= 30,
    ),
    Achievement(
        id="habit-former",
        name="Habit Former",
        description="Complete 50 routines in total",
        icon="🏅",
        rarity=Rarity.EPIC,
        condition=lambda s: s.total_days_completed >= 50,
    ),
    # Legendary (100+ days)
    Achievement(
        id="century-club",
        name="Century Club",
        description="Complete 100 days in a row",
        icon="💎",
        rarity=Rarity.LEGENDARY,
        condition=lambda s: s.current_streak >= 100,
    ),
    Achievement(
        id="skincare-legend",
        name="Skincare Legend",
        description="Complete 100 routines in total",
        icon="🌈",
        rarity=Rarity.LEGENDARY,
        condition=lambda s: s.total_days_completed >= 100,
    ),
]


def _challenge(target: int, icon: str, reward_icon: str, rarity: Rarity) -> Challenge:
    return Challenge(
        id=f"challenge-{target}-days",
        title=f"{target}-day streak",
        description=f"Complete your routine {target} days in a row",
        icon=icon,
        target=target,
        reward=ChallengeReward(icon=reward_icon, name=rarity.value.capitalize(), rarity=rarity),
    )


CHALLENGES: List[Challenge] = [
    _challenge(3, "🌟", "✨", Rarity.COMMON),
    _challenge(7, "🔥", "⭐", Rarity.RARE),
    _challenge(15, "💪", "👑", Rarity.EPIC),
    _challenge(30, "👑", "💎", Rarity.LEGENDARY),
    _challenge(100, "💎", "🌈", Rarity.LEGENDARY),
]


def _count_perfect_weeks(progress: ProgressData) -> int:
    """
    Count non-overlapping runs of 7 consecutive days with both slots done
    """
    perfect_days = []
    for key, day in progress.completions.items():
        if not (day.is_completed(Slot.MORNING) and day.is_completed(Slot.NIGHT)):
            continue
        try:
            perfect_days.append(parse_date_key(key))
        except ValidationError:
            logger.warning(f"Skipping malformed completion date {key!r}")
    perfect_days.sort()

    weeks = 0
    run = 0
    previous = None
    for day in perfect_days:
        run = run + 1 if previous and day - previous == timedelta(days=1) else 1
        previous = day
        if run == PERFECT_WEEK_DAYS:
            weeks += 1
            run = 0
            # next week must start on a fresh day
            previous = None
    return weeks


def build_user_stats(progress: Optional[ProgressData]) -> UserStats:
    """
    Derive achievement statistics from a progress document

    Args:
        progress: The user's progress (None is treated as empty)

    Returns:
        UserStats with day and slot counts
    """
    if progress is None:
        return UserStats()

    morning = sum(1 for day in progress.completions.values() if day.is_completed(Slot.MORNING))
    night = sum(1 for day in progress.completions.values() if day.is_completed(Slot.NIGHT))
    days = sum(1 for day in progress.completions.values() if day.qualifies)

    return UserStats(
        current_streak=progress.current_streak,
        longest_streak=progress.longest_streak,
        total_days_completed=days,
        perfect_weeks=_count_perfect_weeks(progress),
        morning_routines=morning,
        night_routines=night,
        consecutive_days=progress.current_streak,
    )


def get_unlocked_achievements(stats: UserStats) -> List[Achievement]:
    """All achievements whose condition holds for the stats"""
    return [achievement for achievement in ACHIEVEMENTS if achievement.condition(stats)]


def check_new_achievements(
    stats: UserStats,
    previously_unlocked: Iterable[str]
) -> List[Achievement]:
    """
    Achievements unlocked by the stats that the user has not seen yet

    Args:
        stats: Current user stats
        previously_unlocked: Achievement ids already awarded

    Returns:
        Newly unlocked achievements, in table order
    """
    seen = set(previously_unlocked)
    newly_unlocked = [a for a in get_unlocked_achievements(stats) if a.id not in seen]

    for achievement in newly_unlocked:
        logger.info(f"Achievement unlocked: {achievement.id} ({achievement.name}, {achievement.rarity.value})")

    return newly_unlocked


def get_current_challenge(current_streak: int) -> Challenge:
    """
    The challenge the user is working towards

    Returns the first challenge whose target is above the current streak,
    or the last one once every target has been reached, with `current`
    filled in.
    """
    ordered = sorted(CHALLENGES, key=lambda c: c.target)
    for challenge in ordered:
        if current_streak < challenge.target:
            return challenge.model_copy(update={"current": current_streak})
    return ordered[-1].model_copy(update={"current": current_streak})


def format_achievements_display(unlocked: List[Achievement]) -> str:
    """
    Format unlocked achievements as a plain-text list

    Args:
        unlocked: Achievements from get_unlocked_achievements()
    """
    if not unlocked:
        return "No achievements yet. Complete your first routine to get started! ✨"

    lines = [f"🏆 ACHIEVEMENTS ({len(unlocked)}/{len(ACHIEVEMENTS)})\n"]
    for achievement in unlocked:
        lines.append(f"{achievement.icon} {achievement.name} [{achievement.rarity.value}]: {achievement.description}")
    return "\n".join(lines)
