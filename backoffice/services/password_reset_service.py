"""Single-use password reset tokens."""
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from backoffice.models.password_reset_token import PasswordResetToken
from backoffice.repositories.password_reset_repository import PasswordResetRepository
from backoffice.repositories.user_repository import UserRepository
from backoffice.services.password_hasher import hash_password

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32

FAILURE_MESSAGES = {
    "invalid": "Invalid token",
    "already_used": "Token already used",
    "expired": "Token expired",
}


@dataclass
class ResetRequestResult:
    """Outcome of a reset request; token fields are empty for unknown emails."""
    success: bool
    user_id: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None
    token: Optional[str] = None
    expires_at: Optional[datetime] = None


@dataclass
class ResetResult:
    success: bool
    user_id: Optional[str] = None
    email: Optional[str] = None
    error: Optional[str] = None
    failure_reason: Optional[str] = None  # key of FAILURE_MESSAGES

    @classmethod
    def failed(cls, reason: str) -> "ResetResult":
        return cls(success=False, error=FAILURE_MESSAGES[reason], failure_reason=reason)


class PasswordResetService:
    """
    Issues and redeems reset tokens.

    Sending the link is left to the caller, which receives the token in
    the request result.
    """

    TOKEN_EXPIRY_HOURS = 1

    def __init__(
        self,
        user_repository: UserRepository,
        reset_repository: PasswordResetRepository,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self._user_repo = user_repository
        self._reset_repo = reset_repository
        self._clock = clock

    def create_reset_token(self, email: str) -> ResetRequestResult:
        """
        Issue a fresh token, voiding the user's earlier ones.

        An unknown email still reports success so the caller cannot tell
        which addresses are registered.
        """
        user = self._user_repo.find_by_email(email)
        if user is None:
            logger.info("Password reset requested for an unknown email")
            return ResetRequestResult(success=True)

        voided = self._reset_repo.invalidate_tokens_for_user(user.id)
        if voided:
            logger.debug(f"Voided {voided} earlier reset token(s) for {user.username}")

        expires_at = self._clock() + timedelta(hours=self.TOKEN_EXPIRY_HOURS)
        token = self._reset_repo.create_token(
            user_id=user.id,
            token=secrets.token_urlsafe(TOKEN_BYTES),
            expires_at=expires_at,
        )

        return ResetRequestResult(
            success=True,
            user_id=str(user.id),
            email=user.email,
            name=user.full_name,
            token=token.token,
            expires_at=expires_at,
        )

    def _rejection(self, reset_token: Optional[PasswordResetToken]) -> Optional[str]:
        if reset_token is None:
            return "invalid"
        if reset_token.used_at is not None:
            return "already_used"
        if reset_token.expires_at < self._clock():
            return "expired"
        return None

    def reset_password(self, token: str, new_password: str) -> ResetResult:
        """
        Redeem a token and set the new password.

        The new password also clears failed login attempts and any
        account lock.
        """
        reset_token = self._reset_repo.find_by_token(token)
        reason = self._rejection(reset_token)
        if reason is None:
            user = self._user_repo.find_by_id(reset_token.user_id)
            if user is None:
                reason = "invalid"

        if reason is not None:
            logger.warning(f"Password reset rejected: {reason}")
            return ResetResult.failed(reason)

        user.password_hash = hash_password(new_password)
        user.failed_login_attempts = 0
        user.account_locked_until = None
        self._user_repo.save(user)
        self._reset_repo.mark_used(reset_token)

        logger.info(f"Password reset completed for {user.username}")
        return ResetResult(success=True, user_id=str(user.id), email=user.email)

    def cleanup_expired(self) -> int:
        return self._reset_repo.cleanup_expired()
