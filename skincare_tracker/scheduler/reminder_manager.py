"""Reminder scheduler on APScheduler date jobs

Reminders are persisted as a JSON list in device-local storage. Each armed
reminder is one AsyncIOScheduler job whose id is the reminder id; jobs live
in memory only. After a restart init_reminders() re-arms them from the
stored `when`/`fired` fields.

Per-reminder lifecycle:
    Scheduled -> Fired (snooze puts it back to Scheduled)
    Scheduled/Fired -> Deleted (delete_reminder)
    Scheduled/Fired -> Expired (dropped by init_reminders after the TTL)
"""
import asyncio
import json
import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
from uuid import uuid4

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger

from pydantic import ValidationError as PydanticValidationError

from skincare_tracker.config import DEFAULT_SNOOZE_MINUTES, REMINDER_TTL_HOURS, REMINDERS_KEY
from skincare_tracker.db.local_storage import KeyValueStore
from skincare_tracker.exceptions import (
    PersistenceError,
    ReminderNotFoundError,
    ValidationError,
)
from skincare_tracker.models.reminder import DEFAULT_TITLES, Reminder, ReminderType
from skincare_tracker.services.notifications import Notifier
from skincare_tracker.utils.datetime_helpers import now_ms

logger = logging.getLogger(__name__)

NOTIFICATION_TITLE = "⏰ Skincare Reminder"
MINUTE_MS = 60 * 1000


def create_reminder(
    reminder_type: ReminderType | str,
    when: int,
    title: Optional[str] = None,
    clock: Callable[[], int] = now_ms
) -> Reminder:
    """
    Build a new, unsaved reminder

    Args:
        reminder_type: "morning", "evening" or "custom"
        when: Absolute fire time, epoch millis
        title: Notification text (defaults to a label for the type)
        clock: Returns current epoch millis

    Raises:
        ValidationError: unknown type or blank title
    """
    try:
        reminder_type = ReminderType(reminder_type)
    except ValueError:
        raise ValidationError(
            f"Invalid reminder type: '{reminder_type}'. Must be one of: morning, evening, custom",
            field="type",
            value=reminder_type
        )

    created_at = clock()
    try:
        return Reminder(
            id=f"reminder-{created_at}-{uuid4().hex[:9]}",
            title=title or DEFAULT_TITLES[reminder_type],
            type=reminder_type,
            when=when,
            fired=False,
            created_at=created_at,
        )
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid reminder: {e}", field="title", value=title)


class ReminderManager:
    """Persist reminders and fire them at the right wall-clock moment"""

    def __init__(
        self,
        storage: KeyValueStore,
        notifier: Notifier,
        clock: Callable[[], int] = now_ms,
        storage_key: str = REMINDERS_KEY,
        ttl_hours: int = REMINDER_TTL_HOURS
    ):
        """
        Args:
            storage: Device-local key/value storage for the reminder list
            notifier: Notification side effects
            clock: Returns current epoch millis (injectable for tests)
            storage_key: Key the reminder list is stored under
            ttl_hours: Age after which init_reminders() drops a reminder
        """
        self.storage = storage
        self.notifier = notifier
        self.clock = clock
        self.storage_key = storage_key
        self.ttl_ms = ttl_hours * 60 * MINUTE_MS
        # Created on first arm, inside the running loop; job id = reminder id
        self._scheduler: Optional[AsyncIOScheduler] = None

    # ==========================================
    # Storage
    # ==========================================

    def load_reminders(self) -> list[Reminder]:
        """
        Load the persisted reminder list

        Unreadable storage or a corrupt list loads as empty; individual
        malformed entries are skipped.
        """
        try:
            raw = self.storage.read(self.storage_key)
            if not raw:
                return []
            entries = json.loads(raw)
            if not isinstance(entries, list):
                raise TypeError(f"expected a list, got {type(entries).__name__}")
        except Exception as e:
            logger.error(f"Failed to load reminders: {e}", exc_info=True)
            return []

        reminders = []
        for entry in entries:
            try:
                reminders.append(Reminder.model_validate(entry))
            except PydanticValidationError as e:
                logger.warning(f"Skipping malformed reminder {entry!r}: {e}")
        return reminders

    def save_reminders(self, reminders: list[Reminder]) -> None:
        """
        Replace the persisted reminder list

        Raises:
            PersistenceError: storage rejected the write
        """
        payload = json.dumps([r.model_dump(by_alias=True) for r in reminders], ensure_ascii=False)
        try:
            self.storage.write(self.storage_key, payload)
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(
                f"Failed to save reminders: {e}",
                operation="save_reminders",
                cause=e
            )

    # ==========================================
    # Operations
    # ==========================================

    def create_reminder(
        self,
        reminder_type: ReminderType | str,
        when: int,
        title: Optional[str] = None
    ) -> Reminder:
        """Build a new, unsaved reminder using this manager's clock"""
        return create_reminder(reminder_type, when, title, clock=self.clock)

    async def add_reminder(self, reminder: Reminder) -> None:
        """Persist a new reminder, arm its job and confirm to the user"""
        reminders = self.load_reminders()
        reminders.append(reminder)
        self.save_reminders(reminders)
        self.schedule_reminder(reminder)

        minutes = math.ceil((reminder.when - self.clock()) / MINUTE_MS)
        logger.info(f"Added reminder {reminder.id} ({reminder.type}) firing in {minutes} min")
        await self.notifier.toast(f"✅ Reminder scheduled in {minutes} minutes")

    def schedule_reminder(self, reminder: Reminder) -> bool:
        """
        Arm (or re-arm) the job for a reminder

        The job id is the reminder id, so arming again replaces the pending
        job. Does nothing for a reminder that already fired or whose time
        has passed. Must be called from inside a running event loop.

        Returns:
            True if a job was armed
        """
        remaining = reminder.when - self.clock()
        if remaining <= 0 or reminder.fired:
            logger.debug(f"Not arming reminder {reminder.id} (fired={reminder.fired}, remaining={remaining}ms)")
            return False

        run_date = datetime.now(timezone.utc) + timedelta(milliseconds=remaining)
        self._ensure_scheduler().add_job(
            self._run_job,
            trigger=DateTrigger(run_date=run_date),
            args=[reminder],
            id=reminder.id,
            name=f"reminder_{reminder.id}",
            replace_existing=True,
            misfire_grace_time=None,
        )
        logger.debug(f"Armed reminder {reminder.id} in {remaining}ms")
        return True

    async def fire_reminder(self, reminder: Reminder) -> None:
        """
        Mark a reminder fired and send its notification

        Firing an already fired reminder sends the notification again but
        leaves storage untouched. A failed write is logged and the
        notification is still sent.
        """
        try:
            reminders = self.load_reminders()
            stored = next((r for r in reminders if r.id == reminder.id), None)
            if stored is not None and not stored.fired:
                stored.fired = True
                self.save_reminders(reminders)
        except PersistenceError as e:
            logger.error(f"Could not mark reminder {reminder.id} fired, notifying anyway: {e}")
        reminder.fired = True

        self._cancel_job(reminder.id)

        await self.notifier.show(NOTIFICATION_TITLE, reminder.title, {"reminderId": reminder.id})
        logger.info(f"Fired reminder {reminder.id}")

    async def snooze_reminder(self, reminder_id: str, minutes: int = DEFAULT_SNOOZE_MINUTES) -> Optional[Reminder]:
        """
        Push a reminder `minutes` into the future and re-arm it

        An unknown id is ignored (no error, storage untouched).

        Returns:
            The snoozed reminder, or None if the id is unknown

        Raises:
            ValidationError: minutes is not positive
        """
        if minutes <= 0:
            raise ValidationError("Snooze minutes must be positive", field="minutes", value=minutes)

        reminders = self.load_reminders()
        reminder = next((r for r in reminders if r.id == reminder_id), None)
        if reminder is None:
            logger.debug(f"Snooze ignored, reminder {reminder_id} not found")
            return None

        reminder.when = self.clock() + minutes * MINUTE_MS
        reminder.fired = False
        self.save_reminders(reminders)
        self.schedule_reminder(reminder)

        logger.info(f"Snoozed reminder {reminder_id} for {minutes} min")
        await self.notifier.toast(f"💤 Snoozed {minutes} minutes")
        return reminder

    async def delete_reminder(self, reminder_id: str) -> bool:
        """
        Remove a reminder and disarm its job

        An unknown id is ignored (no error, storage untouched).

        Returns:
            True if a reminder was removed
        """
        self._cancel_job(reminder_id)

        reminders = self.load_reminders()
        remaining = [r for r in reminders if r.id != reminder_id]
        if len(remaining) == len(reminders):
            logger.debug(f"Delete ignored, reminder {reminder_id} not found")
            return False

        self.save_reminders(remaining)
        logger.info(f"Deleted reminder {reminder_id}")
        await self.notifier.toast("🗑️ Reminder deleted")
        return True

    def get_reminder(self, reminder_id: str) -> Reminder:
        """
        Look up a stored reminder

        Raises:
            ReminderNotFoundError: no reminder with that id
        """
        for reminder in self.load_reminders():
            if reminder.id == reminder_id:
                return reminder
        raise ReminderNotFoundError(f"Reminder {reminder_id} not found", reminder_id=reminder_id)

    def list_pending(self) -> list[Reminder]:
        """Stored reminders still waiting to fire, soonest first"""
        now = self.clock()
        pending = [r for r in self.load_reminders() if not r.fired and r.when > now]
        return sorted(pending, key=lambda r: r.when)

    async def init_reminders(self) -> int:
        """
        Restore reminders on process start

        Drops reminders older than the TTL (by creation time, fired or not),
        persists the pruned list only if something was dropped, then re-arms
        every unfired reminder that is still in the future.

        Returns:
            Number of jobs armed
        """
        logger.info("Loading reminders from storage...")
        reminders = self.load_reminders()
        now = self.clock()

        valid = [r for r in reminders if now - r.created_at < self.ttl_ms]
        if len(valid) != len(reminders):
            self.save_reminders(valid)
            logger.info(f"Dropped {len(reminders) - len(valid)} expired reminders")

        armed = 0
        for reminder in valid:
            if not reminder.fired and reminder.when > now and self.schedule_reminder(reminder):
                armed += 1

        logger.info(f"Re-armed {armed} of {len(valid)} stored reminders")
        return armed

    def reset(self) -> None:
        """Disarm every job (logout / shutdown); storage is left as is"""
        if self._scheduler is not None:
            self._scheduler.remove_all_jobs()
        logger.info("Reminder jobs cleared")

    def shutdown(self) -> None:
        """Stop the scheduler; pending jobs are dropped, storage is left as is"""
        if self._scheduler is not None and self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._scheduler = None

    @property
    def armed_ids(self) -> set[str]:
        """Ids with a pending job"""
        if self._scheduler is None:
            return set()
        return {job.id for job in self._scheduler.get_jobs()}

    # ==========================================
    # Jobs
    # ==========================================

    def _ensure_scheduler(self) -> AsyncIOScheduler:
        if self._scheduler is None:
            self._scheduler = AsyncIOScheduler(
                event_loop=asyncio.get_running_loop(),
                timezone=timezone.utc
            )
            self._scheduler.start()
            logger.info("Reminder scheduler started")
        return self._scheduler

    def _cancel_job(self, reminder_id: str) -> None:
        if self._scheduler is None:
            return
        try:
            self._scheduler.remove_job(reminder_id)
        except JobLookupError:
            # Date jobs leave the store once they start running
            pass

    async def _run_job(self, reminder: Reminder) -> None:
        try:
            await self.fire_reminder(reminder)
        except Exception as e:
            logger.error(f"Failed to fire reminder {reminder.id}: {e}", exc_info=True)
