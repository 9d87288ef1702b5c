"""User repository implementation."""
from datetime import datetime
from typing import Optional, List, Tuple
from sqlalchemy import func, or_
from backoffice.repositories.base import BaseRepository
from backoffice.models import Role, RoleName, User


class UserRepository(BaseRepository[User]):
    """Repository for User entity operations."""

    def __init__(self, session):
        super().__init__(session=session, model=User)

    def find_by_email(self, email: str) -> Optional[User]:
        """Find user by email address (case-insensitive)."""
        return (
            self._session.query(User)
            .filter(func.lower(User.email) == email.lower())
            .first()
        )

    def find_by_username_or_email(self, identifier: str) -> Optional[User]:
        """Find user whose username or email matches the identifier."""
        value = identifier.lower()
        return (
            self._session.query(User)
            .filter(
                or_(
                    func.lower(User.username) == value,
                    func.lower(User.email) == value,
                )
            )
            .first()
        )

    def find_by_verification_token(self, token: str) -> Optional[User]:
        return (
            self._session.query(User)
            .filter(User.email_verification_token == token)
            .first()
        )

    def username_exists(self, username: str) -> bool:
        return (
            self._session.query(User)
            .filter(func.lower(User.username) == username.lower())
            .count()
            > 0
        )

    def email_exists(self, email: str) -> bool:
        """Check if email is already registered."""
        return (
            self._session.query(User)
            .filter(func.lower(User.email) == email.lower())
            .count()
            > 0
        )

    def find_unverified_created_before(self, cutoff: datetime) -> List[User]:
        """Unverified users still holding a verification token issued before cutoff."""
        return (
            self._session.query(User)
            .filter(
                User.email_verified.is_(False),
                User.email_verification_token.isnot(None),
                User.created_at < cutoff,
            )
            .all()
        )

    def find_all_paginated(
        self,
        limit: int = 20,
        offset: int = 0,
        search: Optional[str] = None,
        is_active: Optional[bool] = None,
        email_verified: Optional[bool] = None,
        role: Optional[str] = None,
    ) -> Tuple[List[User], int]:
        """
        Find users with pagination and filters.

        Args:
            search: Matches username, email, first or last name.
            role: Role name the user must hold.

        Returns:
            Tuple of (users list, total count).
        """
        query = self._session.query(User)

        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(
                    User.username.ilike(pattern),
                    User.email.ilike(pattern),
                    User.first_name.ilike(pattern),
                    User.last_name.ilike(pattern),
                )
            )

        if is_active is not None:
            query = query.filter(User.is_active.is_(is_active))
        if email_verified is not None:
            query = query.filter(User.email_verified.is_(email_verified))

        if role:
            query = query.filter(User.roles.any(Role.name == RoleName(role)))

        total = query.count()
        users = query.order_by(User.username.asc()).offset(offset).limit(limit).all()
        return users, total
