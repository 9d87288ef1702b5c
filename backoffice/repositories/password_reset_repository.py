"""Password reset token repository."""
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from backoffice.models.password_reset_token import PasswordResetToken
from backoffice.repositories.base import BaseRepository


class PasswordResetRepository(BaseRepository[PasswordResetToken]):

    def __init__(self, session):
        super().__init__(session, PasswordResetToken)

    def _query(self):
        return self._session.query(PasswordResetToken)

    def find_by_token(self, token: str) -> Optional[PasswordResetToken]:
        return self._query().filter(PasswordResetToken.token == token).first()

    def create_token(
        self, user_id: UUID, token: str, expires_at: datetime
    ) -> PasswordResetToken:
        return self.save(
            PasswordResetToken(user_id=user_id, token=token, expires_at=expires_at)
        )

    def invalidate_tokens_for_user(self, user_id: UUID) -> int:
        """Stamp every pending token of the user as used; returns how many."""
        count = (
            self._query()
            .filter(
                PasswordResetToken.user_id == user_id,
                PasswordResetToken.used_at.is_(None),
            )
            .update({"used_at": datetime.utcnow()}, synchronize_session=False)
        )
        self._session.commit()
        return count

    def mark_used(self, token: PasswordResetToken) -> None:
        token.used_at = datetime.utcnow()
        self._session.commit()

    def cleanup_expired(self, grace: timedelta = timedelta(0)) -> int:
        """Delete tokens whose expiry is older than ``grace``; returns how many."""
        count = (
            self._query()
            .filter(PasswordResetToken.expires_at < datetime.utcnow() - grace)
            .delete(synchronize_session=False)
        )
        self._session.commit()
        return count
