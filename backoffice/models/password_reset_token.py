"""Password reset token model."""
from datetime import datetime
from backoffice.extensions import db
from backoffice.models.base import BaseModel


class PasswordResetToken(BaseModel):
    """
    Password reset token.

    Single-use, expires one hour after issue.
    """

    __tablename__ = "password_reset_token"

    user_id = db.Column(
        db.UUID(as_uuid=True),
        db.ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    token = db.Column(db.String(64), unique=True, nullable=False, index=True)
    expires_at = db.Column(db.DateTime, nullable=False)
    used_at = db.Column(db.DateTime, nullable=True)

    user = db.relationship("User", backref=db.backref("reset_tokens", lazy="dynamic"))

    @property
    def is_expired(self) -> bool:
        return self.expires_at < datetime.utcnow()

    @property
    def is_used(self) -> bool:
        return self.used_at is not None

    def __repr__(self) -> str:
        return f"<PasswordResetToken(id={self.id}, user_id={self.user_id})>"
