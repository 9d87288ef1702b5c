"""Administrative account management."""
import logging
from typing import Any, Dict, List, Optional, Tuple

from backoffice.exceptions import (
    BusinessError,
    DuplicateResourceError,
    ResourceNotFoundError,
    ValidationError,
)
from backoffice.models.enums import RoleName
from backoffice.models.role import Role
from backoffice.models.user import User
from backoffice.repositories.role_repository import RoleRepository
from backoffice.repositories.user_repository import UserRepository
from backoffice.services.activity_logger import ActivityLogger
from backoffice.services.password_hasher import hash_password

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("first_name", "last_name", "phone", "department", "position")


class UserService:
    """Account listing, creation, status, unlock and deletion for administrators."""

    def __init__(
        self,
        user_repository: UserRepository,
        role_repository: Optional[RoleRepository] = None,
        activity_logger: Optional[ActivityLogger] = None,
    ):
        self._user_repo = user_repository
        self._role_repo = role_repository
        self._activity = activity_logger or ActivityLogger()

    def _get(self, user_id: str) -> User:
        user = self._user_repo.find_by_id(user_id)
        if user is None:
            raise ResourceNotFoundError("User", "id", user_id)
        return user

    def get_user(self, user_id: str) -> User:
        return self._get(user_id)

    def list_users(
        self,
        filters: Optional[Dict[str, Any]] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[User], int]:
        filters = filters or {}
        return self._user_repo.find_all_paginated(
            limit=limit,
            offset=offset,
            search=filters.get("search"),
            is_active=filters.get("is_active"),
            email_verified=filters.get("email_verified"),
            role=filters.get("role"),
        )

    def create_user(self, data: Dict[str, Any], actor: Optional[str] = None) -> User:
        """
        Create an account on behalf of an administrator.

        Raises:
            DuplicateResourceError: Username or email already taken.
            ValidationError: A requested role does not exist.
        """
        username = data["username"].strip()
        email = data["email"].strip().lower()

        if self._user_repo.username_exists(username):
            raise DuplicateResourceError("User", "username", username)
        if self._user_repo.email_exists(email):
            raise DuplicateResourceError("User", "email", email)

        user = User(
            username=username,
            email=email,
            password_hash=hash_password(data["password"]),
            is_active=data.get("is_active", True),
            email_verified=data.get("email_verified", True),
            failed_login_attempts=0,
            created_by=actor,
        )
        for name in PROFILE_FIELDS:
            setattr(user, name, data.get(name))
        user.roles = self._resolve_roles(data["roles"])

        saved = self._user_repo.save(user)
        self._activity.user_created(str(saved.id), actor)
        logger.info(f"User {saved.username} created by {actor}")
        return saved

    def update_user(
        self, user_id: str, data: Dict[str, Any], actor: Optional[str] = None
    ) -> User:
        """
        Update profile, flags and roles; omitted fields are unchanged.

        Raises:
            ResourceNotFoundError: Unknown user.
            DuplicateResourceError: New username or email already taken.
            ValidationError: A requested role does not exist.
        """
        user = self._get(user_id)

        username = data.get("username")
        if username and username.strip() != user.username:
            username = username.strip()
            renamed = username.lower() != user.username.lower()
            if renamed and self._user_repo.username_exists(username):
                raise DuplicateResourceError("User", "username", username)
            user.username = username

        email = data.get("email")
        if email and email.strip().lower() != user.email.lower():
            email = email.strip().lower()
            if self._user_repo.email_exists(email):
                raise DuplicateResourceError("User", "email", email)
            user.email = email

        for name in PROFILE_FIELDS:
            if name in data:
                setattr(user, name, data[name])

        if "is_active" in data:
            user.is_active = data["is_active"]
        if "email_verified" in data:
            user.email_verified = data["email_verified"]
            if data["email_verified"]:
                user.email_verification_token = None

        if data.get("roles"):
            user.roles = self._resolve_roles(data["roles"])

        user.updated_by = actor
        saved = self._user_repo.save(user)
        self._activity.user_updated(str(saved.id), actor)
        return saved

    def can_delete(self, user_id: str) -> bool:
        """Accounts holding a system role are protected from deletion."""
        return not self._get(user_id).has_system_role

    def _resolve_roles(self, names: List[str]) -> List[Role]:
        roles = []
        unknown = []
        for name in dict.fromkeys(names):
            role = self._role_repo.find_by_name(RoleName(name))
            if role is None:
                unknown.append(name)
            else:
                roles.append(role)

        if unknown:
            raise ValidationError(
                "One or more roles do not exist", details={"roles": unknown}
            )
        return roles

    def get_account_status(self, user_id: str) -> Dict[str, Any]:
        user = self._get(user_id)
        return {
            "user_id": str(user.id),
            "username": user.username,
            "is_active": user.is_active,
            "email_verified": user.email_verified,
            "is_locked": user.is_locked(),
            "locked_until": (
                user.account_locked_until.isoformat()
                if user.account_locked_until else None
            ),
            "failed_login_attempts": user.failed_login_attempts or 0,
            "last_login": user.last_login.isoformat() if user.last_login else None,
        }

    def toggle_user_status(self, user_id: str, actor: Optional[str] = None) -> User:
        """Flip the active flag of an account."""
        user = self._get(user_id)
        user.is_active = not user.is_active
        user.updated_by = actor
        self._user_repo.save(user)

        self._activity.user_status_toggled(str(user.id), user.is_active, actor)
        return user

    def unlock_user_account(self, user_id: str, actor: Optional[str] = None) -> User:
        user = self._get(user_id)
        user.failed_login_attempts = 0
        user.account_locked_until = None
        user.updated_by = actor
        self._user_repo.save(user)

        self._activity.account_unlocked(str(user.id), actor)
        return user

    def delete_user(self, user_id: str, actor: Optional[str] = None) -> None:
        """
        Hard-delete an account.

        Raises:
            BusinessError: The user holds a protected system role.
        """
        user = self._get(user_id)
        if user.has_system_role:
            raise BusinessError(
                f"User '{user.username}' holds a system role and cannot be deleted",
                code="PROTECTED_USER",
            )

        self._user_repo.delete(user)
        self._activity.user_deleted(user_id, actor)
        logger.info(f"User {user.username} deleted by {actor}")
