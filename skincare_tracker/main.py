"""Main entry point for the skincare tracker reminder service"""
import logging
import asyncio
from skincare_tracker.config import DATA_PATH, LOG_LEVEL, validate_config
from skincare_tracker.db.local_storage import FileKeyValueStore
from skincare_tracker.scheduler.reminder_manager import ReminderManager
from skincare_tracker.services.notifications import build_notifier

# Configure logging
logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=getattr(logging, LOG_LEVEL)
)

logger = logging.getLogger(__name__)


async def main() -> None:
    """Restore reminders and keep their jobs running until interrupted"""
    manager = None
    notifier = None
    try:
        logger.info("Validating configuration...")
        validate_config(require_database=False)

        notifier = build_notifier()
        await notifier.start()

        storage = FileKeyValueStore(DATA_PATH / "local_storage.json")
        manager = ReminderManager(storage, notifier)

        armed = await manager.init_reminders()
        logger.info(f"Reminder service running with {armed} pending reminders. Press Ctrl+C to stop.")

        # Keep running until interrupted
        await asyncio.Event().wait()

    except asyncio.CancelledError:
        logger.info("Shutting down...")
    finally:
        if manager:
            manager.shutdown()
        if notifier:
            await notifier.stop()
        logger.info("Reminder service stopped")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
