"""Routine product models"""
from typing import Literal, Optional
from pydantic import Field

from skincare_tracker.models.progress import CamelModel

WEEKDAYS: tuple[str, ...] = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)


class Product(CamelModel):
    """One step of a routine"""
    id: str
    step: int = Field(ge=1)
    title: str
    access_code: str  # product name as sold
    function: str
    usage: str
    image: str
    routine_type: Literal["day", "night", "both"]
    frequency: Optional[Literal["daily", "alternate", "custom"]] = None
    days_of_week: Optional[list[str]] = None  # night products only
    enabled: bool = True  # disabled products are kept but skipped


class RoutineData(CamelModel):
    """Per-user routine document"""
    daily_routine: list[Product] = Field(default_factory=list)
    nightly_routines: dict[str, list[Product]] = Field(default_factory=dict)  # keyed by weekday
    last_updated: int = 0  # epoch millis

    @property
    def is_empty(self) -> bool:
        return not self.daily_routine and not any(self.nightly_routines.values())

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
