"""
Progress Ledger

Owns the per-user completion history and keeps the derived counters
(current/longest streak, total completions) consistent with it.

Every mutation is a full read-modify-write of the user's progress document:
1. Read the document (created zeroed on first use)
2. Apply the change and recompute the streak from the whole history
3. Write the whole document back

There is no cross-session lock. Two sessions mutating the same user's
document concurrently race and the last write wins. Within one process the
event loop serializes the local recompute step.
"""

from typing import Callable, Iterable, Optional
from zoneinfo import ZoneInfo
import logging

from skincare_tracker.auth.session import UserSession
from skincare_tracker.db.documents import DocumentStore, PROGRESS_COLLECTION
from skincare_tracker.exceptions import (
    PersistenceError,
    ValidationError,
)
from skincare_tracker.gamification.streak_system import calculate_streak
from skincare_tracker.models.progress import (
    CompletionRecord,
    DayCompletions,
    ProgressData,
    Slot,
)
from skincare_tracker.utils.datetime_helpers import from_millis, now_ms, parse_date_key, user_timezone

logger = logging.getLogger(__name__)


def _validate_slot(slot: Slot | str) -> Slot:
    try:
        return Slot(slot)
    except ValueError:
        raise ValidationError(
            f"Unknown routine slot: '{slot}'. Must be one of: morning, night",
            field="slot",
            value=slot
        )


class ProgressLedger:
    """Completion tracking and streak bookkeeping for the signed-in user"""

    def __init__(
        self,
        store: DocumentStore,
        session: UserSession,
        clock: Callable[[], int] = now_ms,
        tz: Optional[ZoneInfo] = None
    ):
        """
        Args:
            store: Per-user document persistence
            session: Current-user context
            clock: Returns current epoch millis (injectable for tests)
            tz: User zone for calendar dates (None = USER_TIMEZONE, else host local zone)
        """
        self.store = store
        self.session = session
        self.clock = clock
        self.tz = user_timezone(tz)

    # ==========================================
    # Reads (absorb failures)
    # ==========================================

    async def get_progress_data(self) -> Optional[ProgressData]:
        """
        Get the signed-in user's progress document

        Creates and persists a zeroed document on first access.

        Returns:
            ProgressData, or None when signed out or storage failed
        """
        user_id = self.session.current_user()
        if not user_id:
            logger.info("No authenticated user, cannot load progress")
            return None

        try:
            return await self._load(user_id)
        except Exception as e:
            logger.error(f"Failed to load progress for {user_id}: {e}", exc_info=True)
            return None

    async def is_completed(self, date: str, slot: Slot | str) -> bool:
        """
        Check whether a slot is completed on a date

        Returns False when the document, the day or the slot is missing,
        and also when the lookup itself failed.
        """
        try:
            progress = await self.get_progress_data()
            if not progress:
                return False
            day = progress.completions.get(date)
            return bool(day and day.is_completed(Slot(slot)))
        except Exception as e:
            logger.error(f"Failed to check completion for {date}/{slot}: {e}", exc_info=True)
            return False

    # ==========================================
    # Mutations (propagate failures)
    # ==========================================

    async def mark_complete(self, date: str, slot: Slot | str) -> ProgressData:
        """
        Mark one routine slot completed on a date

        Idempotent for the total: completing an already completed slot
        refreshes its timestamp but does not count it again.

        Args:
            date: Local calendar date "YYYY-MM-DD"
            slot: "morning" or "night"

        Returns:
            The persisted ProgressData

        Raises:
            ValidationError: malformed date or slot (nothing is read or written)
            NotAuthenticatedError: nobody is signed in
            PersistenceError: the document could not be read or written
        """
        return await self._complete(date, [slot], operation="mark_complete")

    async def register_manual_completion(
        self,
        date: str,
        slots: Iterable[Slot | str]
    ) -> ProgressData:
        """
        Register several slots for one date in a single write

        Used to back-fill days the user forgot to check off. Only slots that
        were not already completed add to the total.

        Raises:
            ValidationError: malformed date, unknown slot or empty slot list
            NotAuthenticatedError: nobody is signed in
            PersistenceError: the document could not be read or written
        """
        slots = list(slots)
        if not slots:
            raise ValidationError("At least one slot is required", field="slots", value=slots)
        return await self._complete(date, slots, operation="register_manual_completion")

    async def remove_completion(self, date: str, slot: Slot | str) -> ProgressData:
        """
        Undo a completion (for correcting mistakes)

        The slot is overwritten with a completed=False tombstone rather than
        deleted. The current streak is recomputed; the longest streak is a
        historical peak and is left alone. Nothing is written when the slot
        was not completed.

        Raises:
            ValidationError: malformed date or slot
            NotAuthenticatedError: nobody is signed in
            PersistenceError: the document could not be read or written
        """
        parse_date_key(date)
        slot = _validate_slot(slot)
        user_id = self.session.require_user("remove_completion")

        progress = await self._load(user_id)
        day = progress.completions.get(date)
        if not day or not day.is_completed(slot):
            logger.debug(f"{slot.value} on {date} not completed for {user_id}, nothing to remove")
            return progress

        day.set(slot, CompletionRecord(completed=False, timestamp=self.clock()))
        progress.total_completions = max(0, progress.total_completions - 1)
        progress.current_streak = self._streak(progress).current

        await self._save(user_id, progress, operation="remove_completion")
        logger.info(f"Removed {slot.value} completion on {date} for user {user_id}")
        return progress

    # ==========================================
    # Internals
    # ==========================================

    async def _complete(self, date: str, slots: list, operation: str) -> ProgressData:
        parse_date_key(date)
        validated = [_validate_slot(s) for s in slots]
        user_id = self.session.require_user(operation)

        progress = await self._load(user_id)
        day = progress.completions.setdefault(date, DayCompletions())

        timestamp = self.clock()
        new_completions = 0
        for slot in dict.fromkeys(validated):
            if not day.is_completed(slot):
                new_completions += 1
            day.set(slot, CompletionRecord(completed=True, timestamp=timestamp))

        old_streak = progress.current_streak
        progress.total_completions += new_completions
        progress.last_completed_date = date
        progress.current_streak = self._streak(progress).current
        progress.longest_streak = max(progress.longest_streak, progress.current_streak)

        await self._save(user_id, progress, operation=operation)

        logger.info(
            f"Completed {', '.join(s.value for s in validated)} on {date} for user {user_id}: "
            f"streak {old_streak} → {progress.current_streak}, "
            f"+{new_completions} (total {progress.total_completions})"
        )
        return progress

    def _streak(self, progress: ProgressData):
        now = from_millis(self.clock(), self.tz)
        return calculate_streak(progress.completions, now=now, tz=self.tz)

    async def _load(self, user_id: str) -> ProgressData:
        try:
            document = await self.store.read(PROGRESS_COLLECTION, user_id)
            if document is not None:
                return ProgressData.model_validate(document)

            progress = ProgressData()
            await self.store.write(PROGRESS_COLLECTION, user_id, progress.to_document())
            logger.info(f"Created progress document for user {user_id}")
            return progress
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(
                f"Could not load progress: {e}",
                user_id=user_id,
                operation="load_progress",
                cause=e
            )

    async def _save(self, user_id: str, progress: ProgressData, operation: str) -> None:
        try:
            await self.store.write(PROGRESS_COLLECTION, user_id, progress.to_document())
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(
                f"Could not save progress: {e}",
                user_id=user_id,
                operation=operation,
                cause=e
            )
