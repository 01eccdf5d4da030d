"""Unit tests for Pydantic models"""
import pytest
from pydantic import ValidationError

from skincare_tracker.models.progress import (
    CompletionRecord,
    DayCompletions,
    ProgressData,
    Slot,
)
from skincare_tracker.models.reminder import Reminder
from skincare_tracker.models.routine import Product


class TestProgressData:
    """Test the per-user progress document"""

    def test_defaults(self):
        progress = ProgressData()
        assert progress.current_streak == 0
        assert progress.total_completions == 0
        assert progress.last_completed_date == ""
        assert progress.completions == {}

    def test_parses_camel_case_document(self):
        progress = ProgressData.model_validate({
            "currentStreak": 2,
            "longestStreak": 5,
            "totalCompletions": 9,
            "lastCompletedDate": "2025-06-02",
            "completions": {"2025-06-02": {"night": {"completed": True, "timestamp": 1}}},
        })
        assert progress.longest_streak == 5
        assert progress.completions["2025-06-02"].is_completed(Slot.NIGHT)
        assert progress.completions["2025-06-02"].morning is None

    def test_to_document_omits_absent_slots(self):
        progress = ProgressData(completions={
            "2025-06-02": DayCompletions(morning=CompletionRecord(completed=True, timestamp=1))
        })
        document = progress.to_document()
        assert document["completions"] == {"2025-06-02": {"morning": {"completed": True, "timestamp": 1}}}
        assert "currentStreak" in document
        assert "lastCompletedDate" in document

    def test_negative_total_rejected(self):
        with pytest.raises(ValidationError):
            ProgressData(total_completions=-1)


class TestDayCompletions:
    """Test slot access"""

    def test_set_and_get(self):
        day = DayCompletions()
        day.set(Slot.MORNING, CompletionRecord(completed=True, timestamp=5))
        assert day.get("morning").timestamp == 5
        assert day.is_completed(Slot.MORNING)
        assert not day.is_completed(Slot.NIGHT)
        assert day.qualifies

    def test_tombstone_does_not_qualify(self):
        day = DayCompletions(night=CompletionRecord(completed=False, timestamp=5))
        assert not day.qualifies

    def test_unknown_slot(self):
        with pytest.raises(ValueError):
            DayCompletions().get("afternoon")


class TestReminder:
    """Test reminder model"""

    def test_camel_case_round_trip(self):
        reminder = Reminder.model_validate({
            "id": "r-1",
            "title": "  Retinol  ",
            "type": "evening",
            "when": 2000,
            "fired": False,
            "createdAt": 1000,
        })
        assert reminder.title == "Retinol"
        assert reminder.type == "evening"
        assert reminder.model_dump(by_alias=True)["createdAt"] == 1000

    def test_blank_title_rejected(self):
        with pytest.raises(ValidationError):
            Reminder(id="r-1", title="   ", type="custom", when=1, created_at=0)

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            Reminder(id="r-1", title="x", type="weekly", when=1, created_at=0)


class TestProduct:
    """Test routine product model"""

    def test_step_must_be_positive(self):
        with pytest.raises(ValidationError):
            Product(
                id="p", step=0, title="t", access_code="c", function="f",
                usage="u", image="i", routine_type="day"
            )

    def test_routine_type_restricted(self):
        with pytest.raises(ValidationError):
            Product(
                id="p", step=1, title="t", access_code="c", function="f",
                usage="u", image="i", routine_type="weekly"
            )
