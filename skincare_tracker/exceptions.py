"""
Standardized exception hierarchy for skincare-tracker
Provides rich context, consistent logging, and user-friendly error messages
"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any
from uuid import uuid4
import json
import logging

import psycopg

logger = logging.getLogger(__name__)


class SkincareTrackerError(Exception):
    """
    Root of every error the tracker raises on purpose

    Each instance carries a request id, the user and operation involved,
    free-form context, the underlying cause and a message safe to show the
    user. It logs itself once, at construction, so call sites only need to
    raise.

    Example:
        raise SkincareTrackerError(
            message="Failed to save progress",
            user_id="uid-123",
            operation="mark_complete",
            context={"date": "2025-06-02"}
        )
    """

    def __init__(
        self,
        message: str,
        user_id: Optional[str] = None,
        request_id: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        user_message: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.user_id = user_id
        self.request_id = request_id or str(uuid4())
        self.operation = operation
        self.context = context or {}
        self.cause = cause
        self.user_message = user_message or "An error occurred. Please try again."
        self.timestamp = datetime.now(timezone.utc)

        self._log_error()

    def _log_error(self) -> None:
        # 'message' is reserved on LogRecord, hence the error_ prefixes
        extra = {
            "error_type": type(self).__name__,
            "error_message": self.message,
            "error_context": self.context,
            "request_id": self.request_id,
            "user_id": self.user_id,
            "operation": self.operation,
        }
        if self.cause is not None:
            extra["cause"] = repr(self.cause)

        logger.error(
            f"{type(self).__name__} in {self.operation or 'unknown operation'}: {self.message}",
            extra=extra,
            exc_info=self.cause
        )

    def to_dict(self) -> Dict[str, Any]:
        """Summary safe to hand to a client (no context, no cause)"""
        return {
            "error": type(self).__name__,
            "message": self.message,
            "user_message": self.user_message,
            "request_id": self.request_id,
            "timestamp": self.timestamp.isoformat()
        }


# ==========================================
# Validation Errors (User Input)
# ==========================================

class ValidationError(SkincareTrackerError):
    """
    Raised when input to a mutation fails validation

    Always raised before any state is touched, so the persisted
    documents are left exactly as they were.

    Example:
        raise ValidationError(
            message="Date must be YYYY-MM-DD",
            field="date",
            value="02/06/2025"
        )
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs
    ):
        self.field = field
        self.value = value
        super().__init__(
            message=message,
            user_message=f"Invalid {field}: {message}" if field else message,
            context={"field": field, "value": value},
            **kwargs
        )


# ==========================================
# Authentication
# ==========================================

class NotAuthenticatedError(SkincareTrackerError):
    """No signed-in user for an operation that requires one"""

    def __init__(
        self,
        message: str = "No authenticated user",
        **kwargs
    ):
        super().__init__(
            message=message,
            user_message="You need to sign in to do that.",
            **kwargs
        )


# ==========================================
# Persistence Errors
# ==========================================

class PersistenceError(SkincareTrackerError):
    """
    Base class for storage read/write failures

    Mutations propagate this to the caller; there is no retry here.
    """

    def __init__(self, message: str, user_message: Optional[str] = None, **kwargs):
        super().__init__(
            message=message,
            user_message=user_message or "We couldn't save your data. Please try again.",
            **kwargs
        )


class StorageConnectionError(PersistenceError):
    """Storage backend unreachable"""

    def __init__(self, message: str = "Storage connection failed", **kwargs):
        super().__init__(
            message=message,
            user_message="We're having trouble reaching storage. Please try again in a moment.",
            **kwargs
        )


class DocumentWriteError(PersistenceError):
    """A document write was rejected or did not complete"""

    def __init__(
        self,
        message: str,
        collection: Optional[str] = None,
        key: Optional[str] = None,
        **kwargs
    ):
        self.collection = collection
        self.key = key
        super().__init__(
            message=message,
            context={"collection": collection, "key": key},
            **kwargs
        )


# ==========================================
# Lookup Errors
# ==========================================

class ReminderNotFoundError(SkincareTrackerError):
    """Requested reminder does not exist"""

    def __init__(
        self,
        message: str,
        reminder_id: Optional[str] = None,
        **kwargs
    ):
        self.reminder_id = reminder_id
        super().__init__(
            message=message,
            user_message="Reminder not found.",
            context={"reminder_id": reminder_id},
            **kwargs
        )


class RoutineConflictError(SkincareTrackerError):
    """Default routines cannot be imported over existing ones"""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message=message,
            user_message="You already have saved routines. Delete them first to import the defaults.",
            **kwargs
        )


# ==========================================
# Configuration Errors
# ==========================================

class ConfigurationError(SkincareTrackerError):
    """System configuration is invalid or missing"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs
    ):
        self.config_key = config_key
        super().__init__(
            message=message,
            user_message="The system is not properly configured. Please contact support.",
            context={"config_key": config_key},
            **kwargs
        )


# ==========================================
# Notification Errors
# ==========================================

class NotificationError(SkincareTrackerError):
    """Every notification channel failed"""

    def __init__(self, message: str, channel: Optional[str] = None, **kwargs):
        self.channel = channel
        super().__init__(
            message=message,
            user_message="We couldn't deliver your reminder.",
            context={"channel": channel},
            **kwargs
        )


# ==========================================
# Helper Functions
# ==========================================

def wrap_external_exception(
    error: Exception,
    operation: str,
    user_id: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None
) -> SkincareTrackerError:
    """
    Wrap external exceptions (psycopg, filesystem, json) into our exception hierarchy

    Args:
        error: Original exception
        operation: What operation was being performed
        user_id: User ID if applicable
        context: Additional context

    Returns:
        Appropriate SkincareTrackerError subclass

    Example:
        try:
            await cur.execute(query)
        except psycopg.Error as e:
            raise wrap_external_exception(
                e,
                operation="write_document",
                user_id="uid-123",
            )
    """
    if isinstance(error, SkincareTrackerError):
        return error

    # Database errors
    if isinstance(error, psycopg.OperationalError):
        return StorageConnectionError(
            message=f"Database connection failed: {str(error)}",
            user_id=user_id,
            operation=operation,
            context=context,
            cause=error
        )
    elif isinstance(error, psycopg.Error):
        return PersistenceError(
            message=f"Database query failed: {str(error)}",
            user_id=user_id,
            operation=operation,
            context=context,
            cause=error
        )

    # Local storage errors
    elif isinstance(error, OSError):
        return PersistenceError(
            message=f"Local storage failed: {str(error)}",
            user_id=user_id,
            operation=operation,
            context=context,
            cause=error
        )
    elif isinstance(error, (json.JSONDecodeError, TypeError)):
        return PersistenceError(
            message=f"Stored data could not be (de)serialized: {str(error)}",
            user_id=user_id,
            operation=operation,
            context=context,
            cause=error
        )

    # Generic fallback
    else:
        return SkincareTrackerError(
            message=f"{operation} failed: {str(error)}",
            user_id=user_id,
            operation=operation,
            context=context,
            cause=error
        )
