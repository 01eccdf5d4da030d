"""Unit tests for custom exception hierarchy"""
import json
import pytest
from datetime import datetime

import psycopg

from skincare_tracker.exceptions import (
    SkincareTrackerError,
    ValidationError,
    NotAuthenticatedError,
    PersistenceError,
    StorageConnectionError,
    DocumentWriteError,
    ReminderNotFoundError,
    RoutineConflictError,
    ConfigurationError,
    NotificationError,
    wrap_external_exception
)


class TestSkincareTrackerError:
    """Test base exception class"""

    def test_basic_exception(self):
        """Test basic exception creation"""
        error = SkincareTrackerError("Test error")
        assert error.message == "Test error"
        assert error.user_message == "An error occurred. Please try again."
        assert error.request_id is not None
        assert isinstance(error.timestamp, datetime)

    def test_exception_with_context(self):
        """Test exception with full context"""
        error = SkincareTrackerError(
            message="Progress save failed",
            user_id="uid-1",
            operation="mark_complete",
            context={"date": "2025-06-02"},
            user_message="Could not save your progress"
        )
        assert error.user_id == "uid-1"
        assert error.operation == "mark_complete"
        assert error.context["date"] == "2025-06-02"
        assert error.user_message == "Could not save your progress"

    def test_exception_with_cause(self):
        """Test exception wrapping another exception"""
        original_error = ValueError("Invalid value")
        error = SkincareTrackerError(message="Validation failed", cause=original_error)
        assert error.cause == original_error

    def test_to_dict(self):
        """Test serialization"""
        error = SkincareTrackerError("Test error", user_message="Friendly")
        data = error.to_dict()
        assert data["error"] == "SkincareTrackerError"
        assert data["message"] == "Test error"
        assert data["user_message"] == "Friendly"
        assert "request_id" in data
        assert "timestamp" in data

    def test_logs_on_creation(self, caplog):
        """Test that errors are logged when created"""
        with caplog.at_level("ERROR"):
            SkincareTrackerError("Logged error", operation="op")
        assert "Logged error" in caplog.text


class TestSubclasses:
    """Test specialized exceptions"""

    def test_validation_error(self):
        error = ValidationError("Must be YYYY-MM-DD", field="date", value="02/06/2025")
        assert isinstance(error, SkincareTrackerError)
        assert error.field == "date"
        assert error.value == "02/06/2025"
        assert error.context == {"field": "date", "value": "02/06/2025"}
        assert "date" in error.user_message

    def test_not_authenticated_error(self):
        error = NotAuthenticatedError(operation="mark_complete")
        assert error.message == "No authenticated user"
        assert "sign in" in error.user_message

    def test_persistence_hierarchy(self):
        assert issubclass(StorageConnectionError, PersistenceError)
        assert issubclass(DocumentWriteError, PersistenceError)

    def test_document_write_error(self):
        error = DocumentWriteError("no rows", collection="progress", key="uid-1")
        assert error.collection == "progress"
        assert error.key == "uid-1"
        assert error.context == {"collection": "progress", "key": "uid-1"}

    def test_reminder_not_found(self):
        error = ReminderNotFoundError("missing", reminder_id="r-1")
        assert error.reminder_id == "r-1"
        assert error.user_message == "Reminder not found."

    def test_routine_conflict(self):
        error = RoutineConflictError("exists", user_id="uid-1")
        assert "already" in error.user_message

    def test_configuration_error(self):
        error = ConfigurationError("bad", config_key="USER_TIMEZONE")
        assert error.config_key == "USER_TIMEZONE"

    def test_notification_error(self):
        error = NotificationError("down", channel="telegram")
        assert error.channel == "telegram"
        assert error.context == {"channel": "telegram"}


class TestWrapExternalException:
    """Test mapping of third-party errors"""

    def test_passes_through_own_errors(self):
        error = ValidationError("bad", field="slot")
        assert wrap_external_exception(error, operation="op") is error

    def test_operational_error(self):
        wrapped = wrap_external_exception(psycopg.OperationalError("down"), operation="read_document")
        assert isinstance(wrapped, StorageConnectionError)
        assert wrapped.operation == "read_document"

    def test_other_psycopg_error(self):
        wrapped = wrap_external_exception(psycopg.DataError("bad"), operation="write_document")
        assert isinstance(wrapped, PersistenceError)
        assert not isinstance(wrapped, StorageConnectionError)

    def test_os_error(self):
        wrapped = wrap_external_exception(OSError("disk full"), operation="local_storage_write")
        assert isinstance(wrapped, PersistenceError)
        assert "Local storage failed" in wrapped.message

    def test_json_error(self):
        try:
            json.loads("{")
        except json.JSONDecodeError as e:
            wrapped = wrap_external_exception(e, operation="local_storage_read")
        assert isinstance(wrapped, PersistenceError)

    def test_unknown_error(self):
        original = RuntimeError("odd")
        wrapped = wrap_external_exception(original, operation="op", user_id="uid-1")
        assert type(wrapped) is SkincareTrackerError
        assert wrapped.cause is original
        assert wrapped.user_id == "uid-1"
