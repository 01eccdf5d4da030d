"""Routine document management

Reads and writes the per-user routine document and seeds it with the
default products the first time a user signs in.
"""
import logging
from typing import Callable, Optional

from skincare_tracker.auth.session import UserSession
from skincare_tracker.data.routines import (
    DAILY_ROUTINE,
    LACTIC_NIGHTS,
    NIGHTLY_ROUTINE_WITH_LACTIC,
    NIGHTLY_ROUTINE_WITHOUT_LACTIC,
)
from skincare_tracker.db.documents import DocumentStore, ROUTINES_COLLECTION
from skincare_tracker.exceptions import PersistenceError, RoutineConflictError
from skincare_tracker.models.routine import WEEKDAYS, Product, RoutineData
from skincare_tracker.utils.datetime_helpers import now_ms

logger = logging.getLogger(__name__)


class RoutineService:
    """Routine CRUD for the signed-in user"""

    def __init__(
        self,
        store: DocumentStore,
        session: UserSession,
        clock: Callable[[], int] = now_ms
    ):
        self.store = store
        self.session = session
        self.clock = clock

    async def get_routines(self) -> Optional[RoutineData]:
        """
        Get the signed-in user's routines

        Returns:
            RoutineData, or None when signed out, nothing is saved yet,
            or the lookup failed
        """
        user_id = self.session.current_user()
        if not user_id:
            logger.info("No authenticated user, cannot load routines")
            return None

        try:
            document = await self.store.read(ROUTINES_COLLECTION, user_id)
            if document is None:
                logger.info(f"No routines saved for user {user_id}")
                return None
            return RoutineData.model_validate(document)
        except Exception as e:
            logger.error(f"Failed to load routines for {user_id}: {e}", exc_info=True)
            return None

    async def save_routines(self, data: RoutineData) -> RoutineData:
        """
        Save the user's routines, stamping lastUpdated

        Raises:
            NotAuthenticatedError: nobody is signed in
            PersistenceError: the write failed
        """
        user_id = self.session.require_user("save_routines")

        data.last_updated = self.clock()
        try:
            await self.store.write(ROUTINES_COLLECTION, user_id, data.to_document())
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(
                f"Could not save routines: {e}",
                user_id=user_id,
                operation="save_routines",
                cause=e
            )

        logger.info(f"Saved routines for user {user_id}")
        return data

    def create_empty_routine_data(self) -> RoutineData:
        """Routine document with no products and an empty list per weekday"""
        return RoutineData(
            daily_routine=[],
            nightly_routines={day: [] for day in WEEKDAYS},
            last_updated=self.clock(),
        )

    def build_default_routines(self) -> RoutineData:
        """Default products: lactic acid on Wednesday and Sunday nights"""
        stamp = self.clock()

        daily = [
            Product(
                id=f"day-{index}-{stamp}",
                routine_type="day",
                frequency="daily",
                enabled=True,
                **product
            )
            for index, product in enumerate(DAILY_ROUTINE)
        ]

        nightly: dict[str, list[Product]] = {}
        for day in WEEKDAYS:
            source = NIGHTLY_ROUTINE_WITH_LACTIC if day in LACTIC_NIGHTS else NIGHTLY_ROUTINE_WITHOUT_LACTIC
            nightly[day] = [
                Product(
                    id=f"night-{day}-{index}-{stamp}",
                    routine_type="night",
                    frequency="custom",
                    days_of_week=[day],
                    enabled=True,
                    **product
                )
                for index, product in enumerate(source)
            ]

        return RoutineData(daily_routine=daily, nightly_routines=nightly, last_updated=stamp)

    async def migrate_default_routines(self) -> RoutineData:
        """
        Import the default products for the signed-in user

        Raises:
            NotAuthenticatedError: nobody is signed in
            RoutineConflictError: the user already has products saved
            PersistenceError: the write failed
        """
        user_id = self.session.require_user("migrate_default_routines")

        existing = await self.get_routines()
        if existing and not existing.is_empty:
            raise RoutineConflictError(
                "User already has routines saved",
                user_id=user_id,
                operation="migrate_default_routines"
            )

        data = await self.save_routines(self.build_default_routines())
        logger.info(f"Imported default routines for user {user_id}")
        return data

    async def check_and_auto_import(self) -> bool:
        """
        Seed default routines on a user's first visit

        Failures are logged and swallowed; the user can import manually later.

        Returns:
            True if the defaults were imported
        """
        user_id = self.session.current_user()
        if not user_id:
            logger.info("No authenticated user, skipping auto-import")
            return False

        try:
            document = await self.store.read(ROUTINES_COLLECTION, user_id)
            if document is not None:
                logger.info(f"User {user_id} already has routines")
                return False

            logger.info(f"First visit for user {user_id}, importing default routines...")
            await self.migrate_default_routines()
            return True
        except Exception as e:
            logger.error(f"Auto-import failed for {user_id}: {e}", exc_info=True)
            return False
