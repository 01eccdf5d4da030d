"""Reminder models"""
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ReminderType(str, Enum):
    """Kind of reminder; decides the default title"""
    MORNING = "morning"
    EVENING = "evening"
    CUSTOM = "custom"


DEFAULT_TITLES: dict[ReminderType, str] = {
    ReminderType.MORNING: "🌅 Morning Routine",
    ReminderType.EVENING: "🌙 Night Routine",
    ReminderType.CUSTOM: "⏰ Reminder",
}


class Reminder(BaseModel):
    """Point-in-time reminder stored on the device"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, use_enum_values=True)

    id: str = Field(min_length=1)
    title: str
    type: ReminderType
    when: int  # absolute fire time, epoch millis
    fired: bool = False
    created_at: int  # epoch millis

    @field_validator('title')
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Titles are shown as notification bodies, keep them non-blank"""
        trimmed = v.strip()
        if not trimmed:
            raise ValueError("Reminder title cannot be empty or only whitespace")
        return trimmed
