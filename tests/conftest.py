"""Global test fixtures and utilities for skincare-tracker tests"""
import pytest
from datetime import datetime
from unittest.mock import AsyncMock
from zoneinfo import ZoneInfo

from skincare_tracker.auth.session import UserSession
from skincare_tracker.db.documents import InMemoryDocumentStore
from skincare_tracker.db.local_storage import InMemoryKeyValueStore
from skincare_tracker.gamification.progress_ledger import ProgressLedger
from skincare_tracker.scheduler.reminder_manager import ReminderManager
from skincare_tracker.services.routine_service import RoutineService
from skincare_tracker.utils.datetime_helpers import to_millis


TEST_TZ = ZoneInfo("Europe/Madrid")


class FakeClock:
    """Controllable epoch-millis clock"""

    def __init__(self, now: datetime):
        self.now_ms = to_millis(now)

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms

    def set(self, now: datetime) -> None:
        self.now_ms = to_millis(now)


class CountingDocumentStore(InMemoryDocumentStore):
    """In-memory document store that records writes"""

    def __init__(self):
        super().__init__()
        self.writes: list[tuple[str, str, dict]] = []

    async def write(self, collection: str, key: str, document: dict) -> None:
        self.writes.append((collection, key, document))
        await super().write(collection, key, document)


class CountingKeyValueStore(InMemoryKeyValueStore):
    """In-memory key/value store that records writes"""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.writes: list[tuple[str, str]] = []

    def write(self, key: str, value: str) -> None:
        self.writes.append((key, value))
        super().write(key, value)


# ============================================================================
# Time Fixtures
# ============================================================================

@pytest.fixture
def test_tz():
    """User timezone used throughout the tests"""
    return TEST_TZ


@pytest.fixture
def morning_of_june_2():
    """2025-06-02 10:00 local, comfortably after the 6 AM rollover"""
    return datetime(2025, 6, 2, 10, 0, tzinfo=TEST_TZ)


@pytest.fixture
def clock(morning_of_june_2):
    """Fake clock frozen at 2025-06-02 10:00 local"""
    return FakeClock(morning_of_june_2)


# ============================================================================
# User & Session Fixtures
# ============================================================================

@pytest.fixture
def test_user_id():
    """Standard test user ID"""
    return "user-123456789"


@pytest.fixture
def session(test_user_id):
    """Signed-in session"""
    return UserSession(test_user_id)


@pytest.fixture
def anonymous_session():
    """Session with nobody signed in"""
    return UserSession()


# ============================================================================
# Storage Fixtures
# ============================================================================

@pytest.fixture
def document_store():
    """Document store that records writes"""
    return CountingDocumentStore()


@pytest.fixture
def kv_store():
    """Key/value store that records writes"""
    return CountingKeyValueStore()


# ============================================================================
# Component Fixtures
# ============================================================================

@pytest.fixture
def ledger(document_store, session, clock, test_tz):
    """Progress ledger for the signed-in test user"""
    return ProgressLedger(document_store, session, clock=clock, tz=test_tz)


@pytest.fixture
def routine_service(document_store, session, clock):
    """Routine service for the signed-in test user"""
    return RoutineService(document_store, session, clock=clock)


@pytest.fixture
def notifier():
    """Notifier whose show/toast calls can be asserted"""
    return AsyncMock()


@pytest.fixture
def reminder_manager(kv_store, notifier, clock):
    """Reminder manager over in-memory storage"""
    return ReminderManager(kv_store, notifier, clock=clock)
