"""User directory: account loading and failed-login lockout."""
import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from backoffice.exceptions import (
    AccountLockedError,
    DisabledUserError,
    EmailNotVerifiedError,
    UserNotFoundError,
)
from backoffice.models.user import User
from backoffice.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


class UserDirectoryService:
    """
    Loads users for authentication and tracks failed logins.

    After ``max_failed_attempts`` consecutive failures the account is
    locked for ``lock_duration``. Failures recorded while the account is
    already locked are counted but never move the lock expiry.
    """

    MAX_FAILED_ATTEMPTS = 5
    LOCK_DURATION = timedelta(minutes=30)

    def __init__(
        self,
        user_repository: UserRepository,
        max_failed_attempts: Optional[int] = None,
        lock_minutes: Optional[int] = None,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        """
        Initialize the directory.

        Args:
            user_repository: Repository for user data access.
            max_failed_attempts: Failures before locking (default 5).
            lock_minutes: Lock duration in minutes (default 30).
            clock: Returns the current naive UTC datetime.
        """
        self._user_repo = user_repository
        self._max_failed_attempts = max_failed_attempts or self.MAX_FAILED_ATTEMPTS
        self._lock_duration = (
            timedelta(minutes=lock_minutes) if lock_minutes else self.LOCK_DURATION
        )
        self._clock = clock

    def load_user_by_username(self, identifier: str) -> User:
        """
        Load an account by username or email and check it may sign in.

        An expired lock is cleared on the way through.

        Raises:
            UserNotFoundError: No account matches the identifier.
            DisabledUserError: The account is deactivated.
            EmailNotVerifiedError: The email address is not verified.
            AccountLockedError: The account is locked.
        """
        user = self._find(identifier)
        if user is None:
            logger.debug(f"User not found: {identifier}")
            raise UserNotFoundError(identifier)

        self._validate_account(user)
        return user

    def load_user_by_id(self, user_id) -> User:
        user = self._user_repo.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)

        self._validate_account(user)
        return user

    def update_last_login(self, identifier: str) -> None:
        """Record a successful sign-in: reset the counter and the lock."""
        user = self._find(identifier)
        if user is None:
            return

        user.failed_login_attempts = 0
        user.account_locked_until = None
        user.last_login = self._clock()
        self._user_repo.save(user)
        logger.debug(f"Last login updated for {user.username}")

    def increment_failed_attempts(self, identifier: str) -> Optional[User]:
        """
        Record a failed sign-in.

        Returns:
            The updated user, or None when the identifier is unknown.
        """
        user = self._find(identifier)
        if user is None:
            return None

        now = self._clock()
        already_locked = user.is_locked(now)
        user.failed_login_attempts = (user.failed_login_attempts or 0) + 1

        if not already_locked and user.failed_login_attempts >= self._max_failed_attempts:
            user.account_locked_until = now + self._lock_duration
            logger.warning(
                f"Account {user.username} locked until {user.account_locked_until} "
                f"after {user.failed_login_attempts} failed attempts"
            )

        self._user_repo.save(user)
        logger.debug(
            f"Failed login attempts for {user.username}: {user.failed_login_attempts}"
        )
        return user

    def is_locked(self, user: User) -> bool:
        """Whether the user's lock is still running on the directory clock."""
        return user.is_locked(self._clock())

    def is_account_valid(self, identifier: str) -> bool:
        user = self._find(identifier)
        if user is None:
            return False
        return bool(
            user.is_active and user.email_verified and not user.is_locked(self._clock())
        )

    def _find(self, identifier: str) -> Optional[User]:
        if not identifier:
            return None
        return self._user_repo.find_by_username_or_email(identifier)

    def _validate_account(self, user: User) -> None:
        if not user.is_active:
            logger.warning(f"Sign-in attempt on disabled account: {user.username}")
            raise DisabledUserError(f"User account '{user.username}' is disabled")

        if not user.email_verified:
            logger.warning(f"Sign-in attempt with unverified email: {user.username}")
            raise EmailNotVerifiedError(
                f"Email of user '{user.username}' is not verified"
            )

        now = self._clock()
        if user.is_locked(now):
            logger.warning(
                f"Sign-in attempt on locked account: {user.username} "
                f"(locked until {user.account_locked_until})"
            )
            raise AccountLockedError(
                f"User account '{user.username}' is locked until "
                f"{user.account_locked_until.isoformat()}"
            )

        if user.account_locked_until is not None:
            logger.info(f"Lock expired, unlocking account: {user.username}")
            user.failed_login_attempts = 0
            user.account_locked_until = None
            self._user_repo.save(user)
