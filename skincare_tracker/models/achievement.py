"""Achievement models for gamification"""
from enum import Enum
from typing import Callable
from pydantic import BaseModel, ConfigDict


class Rarity(str, Enum):
    """Achievement rarity tiers"""
    COMMON = "common"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


class UserStats(BaseModel):
    """Statistics derived from a progress document"""
    current_streak: int = 0
    longest_streak: int = 0
    total_days_completed: int = 0
    perfect_weeks: int = 0
    morning_routines: int = 0
    night_routines: int = 0
    consecutive_days: int = 0


class Achievement(BaseModel):
    """Achievement definition"""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    icon: str
    rarity: Rarity
    condition: Callable[[UserStats], bool]


class ChallengeReward(BaseModel):
    """Badge handed out when a challenge target is reached"""
    icon: str
    name: str
    rarity: Rarity


class Challenge(BaseModel):
    """Streak target with progress"""
    id: str
    title: str
    description: str
    icon: str
    target: int
    current: int = 0
    reward: ChallengeReward
