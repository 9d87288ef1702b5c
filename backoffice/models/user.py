"""User domain model."""
from datetime import datetime
from typing import List, Optional
from backoffice.extensions import db
from backoffice.models.base import BaseModel
from backoffice.models.role import user_roles


class User(BaseModel):
    """
    Back-office user account.

    Carries credentials, activation flags and the failed-login
    bookkeeping used by the lockout tracker.
    """

    __tablename__ = "user"

    username = db.Column(db.String(50), unique=True, nullable=False, index=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    first_name = db.Column(db.String(100))
    last_name = db.Column(db.String(100))
    phone = db.Column(db.String(30))
    department = db.Column(db.String(100))
    position = db.Column(db.String(100))

    is_active = db.Column(db.Boolean, nullable=False, default=True)
    email_verified = db.Column(db.Boolean, nullable=False, default=False)
    email_verification_token = db.Column(db.String(64), unique=True, index=True)

    failed_login_attempts = db.Column(db.Integer, nullable=False, default=0)
    account_locked_until = db.Column(db.DateTime, nullable=True)
    last_login = db.Column(db.DateTime, nullable=True)

    created_by = db.Column(db.String(50))
    updated_by = db.Column(db.String(50))

    roles = db.relationship(
        "Role",
        secondary=user_roles,
        backref=db.backref("users", lazy="dynamic"),
        lazy="joined",
    )

    @property
    def full_name(self) -> str:
        """First and last name, falling back to the username."""
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) if parts else self.username

    @property
    def role_names(self) -> List[str]:
        return [role.name.value for role in self.roles]

    def has_role(self, role_name: str) -> bool:
        return role_name in self.role_names

    @property
    def has_system_role(self) -> bool:
        return any(role.is_system for role in self.roles)

    def is_locked(self, now: Optional[datetime] = None) -> bool:
        """Check if the account is locked at the given instant."""
        if self.account_locked_until is None:
            return False
        return self.account_locked_until > (now or datetime.utcnow())

    def to_dict(self) -> dict:
        """
        Convert to dictionary, excluding sensitive data.

        Returns:
            Dictionary representation without password or tokens.
        """
        return {
            "id": str(self.id),
            "username": self.username,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "full_name": self.full_name,
            "phone": self.phone,
            "department": self.department,
            "position": self.position,
            "is_active": self.is_active,
            "email_verified": self.email_verified,
            "roles": self.role_names,
            "last_login": self.last_login.isoformat() if self.last_login else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return f"<User(username='{self.username}')>"
