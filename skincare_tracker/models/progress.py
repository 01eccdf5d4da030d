"""Routine completion and streak models

Persisted documents keep camelCase keys (currentStreak, lastCompletedDate, ...)
so the same progress document can be shared with the web client.
"""
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Slot(str, Enum):
    """Daily routine occasion"""
    MORNING = "morning"
    NIGHT = "night"


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CompletionRecord(CamelModel):
    """Completion state of one slot on one day"""
    completed: bool
    timestamp: int  # epoch millis of the last change


class DayCompletions(CamelModel):
    """Slots recorded for a single calendar day (zero, one or both)"""
    morning: Optional[CompletionRecord] = None
    night: Optional[CompletionRecord] = None

    def get(self, slot: Slot) -> Optional[CompletionRecord]:
        return getattr(self, Slot(slot).value)

    def set(self, slot: Slot, record: CompletionRecord) -> None:
        setattr(self, Slot(slot).value, record)

    def is_completed(self, slot: Slot) -> bool:
        record = self.get(slot)
        return bool(record and record.completed)

    @property
    def qualifies(self) -> bool:
        """True when at least one slot is completed"""
        return self.is_completed(Slot.MORNING) or self.is_completed(Slot.NIGHT)


class ProgressData(CamelModel):
    """Per-user progress document"""
    current_streak: int = Field(default=0, ge=0)
    longest_streak: int = Field(default=0, ge=0)
    total_completions: int = Field(default=0, ge=0)
    last_completed_date: str = ""  # "YYYY-MM-DD" or "" before the first completion
    completions: dict[str, DayCompletions] = Field(default_factory=dict)

    def to_document(self) -> dict:
        """Serialize for the document store (absent slots stay absent)"""
        return self.model_dump(by_alias=True, exclude_none=True)


class StreakResult(BaseModel):
    """Outcome of a streak walk"""
    current: int = 0
    dates: list[str] = Field(default_factory=list)  # most recent first
