"""Current-user context"""
import logging
from typing import Optional

from skincare_tracker.exceptions import NotAuthenticatedError

logger = logging.getLogger(__name__)


class UserSession:
    """
    Holds the identity of the signed-in user for this process.

    Starts empty. The identity provider calls sign_in() once it has
    resolved a user and sign_out() on logout; the ledger and routine
    service receive the session explicitly instead of reading a global.
    """

    def __init__(self, user_id: Optional[str] = None):
        self._user_id: Optional[str] = None
        if user_id:
            self.sign_in(user_id)

    def sign_in(self, user_id: str) -> None:
        """Attach a user identity to the session"""
        if not user_id or not str(user_id).strip():
            raise NotAuthenticatedError("Cannot sign in with an empty user id")
        self._user_id = str(user_id).strip()
        logger.info(f"Session signed in: {self._user_id}")

    def sign_out(self) -> None:
        """Clear the user identity"""
        if self._user_id:
            logger.info(f"Session signed out: {self._user_id}")
        self._user_id = None

    def current_user(self) -> Optional[str]:
        return self._user_id

    @property
    def is_authenticated(self) -> bool:
        return self._user_id is not None

    def require_user(self, operation: str) -> str:
        """
        Return the current user id or fail

        Raises:
            NotAuthenticatedError: if nobody is signed in
        """
        if self._user_id is None:
            raise NotAuthenticatedError(
                f"{operation} requires a signed-in user",
                operation=operation
            )
        return self._user_id
