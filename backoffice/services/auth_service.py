"""Authentication service: login, tokens, registration and password flows."""
import logging
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from backoffice.exceptions import (
    AuthenticationError,
    BusinessError,
    DuplicateResourceError,
    InvalidCredentialsError,
    ResourceNotFoundError,
    UserNotFoundError,
    ValidationError,
)
from backoffice.models.enums import RoleName
from backoffice.models.user import User
from backoffice.repositories.role_repository import RoleRepository
from backoffice.repositories.user_repository import UserRepository
from backoffice.services.activity_logger import ActivityLogger, LoginFailure
from backoffice.services.email_service import EmailService
from backoffice.services.jwt_service import JwtService
from backoffice.services.password_hasher import hash_password, verify_password
from backoffice.services.password_reset_service import PasswordResetService
from backoffice.services.user_directory_service import UserDirectoryService

logger = logging.getLogger(__name__)


@dataclass
class AuthResult:
    """Token pair issued by login or refresh."""
    success: bool
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    token_type: str = "Bearer"
    expires_in: Optional[int] = None  # minutes
    user: Optional[User] = None
    error: Optional[str] = None


@dataclass
class OperationResult:
    """Outcome of an account operation that issues no tokens."""
    success: bool
    message: str = ""
    data: Dict[str, Any] = field(default_factory=dict)


class AuthService:
    """
    Authentication business logic.

    Credentials are checked against bcrypt hashes; the user directory
    enforces account state and the failed-login lockout.
    """

    VERIFICATION_TOKEN_TTL = timedelta(hours=24)

    def __init__(
        self,
        user_repository: UserRepository,
        role_repository: RoleRepository,
        user_directory: UserDirectoryService,
        jwt_service: JwtService,
        password_reset_service: PasswordResetService,
        email_service: EmailService,
        activity_logger: Optional[ActivityLogger] = None,
    ):
        self._user_repo = user_repository
        self._role_repo = role_repository
        self._directory = user_directory
        self._jwt = jwt_service
        self._reset_service = password_reset_service
        self._email = email_service
        self._activity = activity_logger or ActivityLogger()

    # ------------------------------------------------------------------
    # Login / tokens
    # ------------------------------------------------------------------

    def login(
        self, identifier: str, password: str, ip_address: Optional[str] = None
    ) -> AuthResult:
        """
        Authenticate with username or email and issue a token pair.

        Unknown users and wrong passwords get the same error so the
        response does not reveal which accounts exist.

        Raises:
            InvalidCredentialsError: Unknown user or wrong password.
            AccountLockedError: The account is locked.
            DisabledUserError: The account is disabled.
            EmailNotVerifiedError: The email is not verified yet.
        """
        try:
            user = self._directory.load_user_by_username(identifier)
        except UserNotFoundError:
            self._activity.login_failed(
                LoginFailure.UNKNOWN_USER, ip_address=ip_address, identifier=identifier
            )
            raise InvalidCredentialsError()

        if not verify_password(password, user.password_hash):
            updated = self._directory.increment_failed_attempts(identifier)
            self._activity.login_failed(
                LoginFailure.BAD_PASSWORD, user_id=str(user.id), ip_address=ip_address
            )
            if updated is not None and self._directory.is_locked(updated):
                self._activity.account_locked(
                    str(user.id), updated.account_locked_until, ip_address=ip_address
                )
            raise InvalidCredentialsError()

        self._directory.update_last_login(user.username)
        self._activity.login_succeeded(str(user.id), ip_address=ip_address)
        logger.info(f"User {user.username} signed in")

        return self._issue_tokens(user)

    def refresh_token(self, refresh_token: str) -> AuthResult:
        """
        Exchange a refresh token for a new token pair.

        The user is reloaded so a disabled or locked account cannot refresh.

        Raises:
            AuthenticationError: The token is invalid or not a refresh token.
        """
        if not self._jwt.validate_token(refresh_token):
            raise AuthenticationError("Invalid or expired refresh token")

        if not self._jwt.is_refresh_token(refresh_token):
            logger.warning("Access token presented to the refresh endpoint")
            raise AuthenticationError("Token is not a refresh token")

        username = self._jwt.get_username(refresh_token)
        user = self._directory.load_user_by_username(username)

        logger.info(f"Tokens refreshed for {user.username}")
        return self._issue_tokens(user)

    def _issue_tokens(self, user: User) -> AuthResult:
        access_token = self._jwt.generate_access_token(user)
        refresh_token = self._jwt.generate_refresh_token(user)
        return AuthResult(
            success=True,
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=self._jwt.get_remaining_seconds(access_token) // 60,
            user=user,
        )

    def describe_token(self, token: str) -> Dict[str, Any]:
        """Token details for the validate-token endpoint."""
        if not self._jwt.validate_token(token):
            return {"valid": False}

        return {
            "valid": True,
            "username": self._jwt.get_username(token),
            "user_id": self._jwt.get_user_id(token),
            "roles": self._jwt.get_roles(token),
            "token_type": self._jwt.get_token_type(token),
            "expires_at": self._jwt.get_expiration(token).isoformat(),
            "remaining_seconds": self._jwt.get_remaining_seconds(token),
        }

    # ------------------------------------------------------------------
    # Registration / email verification
    # ------------------------------------------------------------------

    def register(self, data: Dict[str, Any]) -> User:
        """
        Create an inactive USER account and send the verification email.

        Raises:
            DuplicateResourceError: Username or email already taken.
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
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
            phone=data.get("phone"),
            department=data.get("department"),
            position=data.get("position"),
            is_active=False,
            email_verified=False,
            email_verification_token=secrets.token_urlsafe(32),
            failed_login_attempts=0,
            created_by="self-registration",
        )

        default_role = self._role_repo.find_by_name(RoleName.USER)
        if default_role is not None:
            user.roles.append(default_role)
        else:
            logger.warning("Default USER role missing, account created without roles")

        user = self._user_repo.save(user)
        self._email.send_verification_email(
            user.email, user.full_name, user.email_verification_token
        )
        self._activity.user_registered(str(user.id))
        logger.info(f"User registered: {user.username}")
        return user

    def verify_email(self, token: str) -> User:
        """
        Activate the account owning a verification token.

        Raises:
            ValidationError: Unknown token.
        """
        if not token:
            raise ValidationError("Verification token is required")

        user = self._user_repo.find_by_verification_token(token)
        if user is None:
            raise ValidationError("Invalid verification token")

        user.email_verified = True
        user.is_active = True
        user.email_verification_token = None
        self._user_repo.save(user)

        self._activity.email_verified(str(user.id))
        return user

    def resend_verification_email(self, email: str) -> OperationResult:
        user = self._user_repo.find_by_email(email)
        if user is None:
            raise ResourceNotFoundError("User", "email", email)

        if user.email_verified:
            raise BusinessError("Email is already verified", code="EMAIL_ALREADY_VERIFIED")

        user.email_verification_token = secrets.token_urlsafe(32)
        self._user_repo.save(user)
        self._email.send_verification_email(
            user.email, user.full_name, user.email_verification_token
        )
        return OperationResult(success=True, message="Verification email sent")

    # ------------------------------------------------------------------
    # Passwords
    # ------------------------------------------------------------------

    def initiate_password_reset(
        self, email: str, ip_address: Optional[str] = None
    ) -> OperationResult:
        """Always reports success, whether or not the email is registered."""
        result = self._reset_service.create_reset_token(email)

        if result.token:
            self._email.send_password_reset_email(result.email, result.name, result.token)
            self._activity.password_reset_requested(result.user_id, ip_address=ip_address)

        return OperationResult(
            success=True,
            message="If the email is registered, a reset link has been sent",
        )

    def reset_password(self, token: str, new_password: str) -> OperationResult:
        """
        Set a new password with a reset token.

        Raises:
            ValidationError: The token is invalid, expired or already used.
        """
        result = self._reset_service.reset_password(token, new_password)
        if not result.success:
            raise ValidationError(
                result.error, details={"reason": result.failure_reason}
            )

        self._activity.password_reset_completed(result.user_id)
        return OperationResult(success=True, message="Password has been reset")

    def change_password(
        self, user_id: str, current_password: str, new_password: str
    ) -> OperationResult:
        """
        Change password after checking the current one.

        Raises:
            ResourceNotFoundError: Unknown user.
            ValidationError: Wrong current password or unchanged password.
        """
        user = self._user_repo.find_by_id(user_id)
        if user is None:
            raise ResourceNotFoundError("User", "id", user_id)

        if not verify_password(current_password, user.password_hash):
            raise ValidationError("Current password is incorrect")

        if current_password == new_password:
            raise ValidationError("New password must differ from the current password")

        user.password_hash = hash_password(new_password)
        user.updated_by = user.username
        self._user_repo.save(user)

        self._email.send_password_changed_email(user.email, user.full_name)
        self._activity.password_changed(str(user.id))
        return OperationResult(success=True, message="Password changed")

    # ------------------------------------------------------------------
    # Availability / maintenance
    # ------------------------------------------------------------------

    def is_username_available(self, username: str) -> bool:
        return not self._user_repo.username_exists(username)

    def is_email_available(self, email: str) -> bool:
        return not self._user_repo.email_exists(email)

    def cleanup_expired_tokens(self) -> Dict[str, int]:
        """
        Drop stale verification tokens and expired reset tokens.

        Returns:
            Counts per token kind.
        """
        cutoff = datetime.utcnow() - self.VERIFICATION_TOKEN_TTL
        stale_users: List[User] = self._user_repo.find_unverified_created_before(cutoff)
        for user in stale_users:
            user.email_verification_token = None
            self._user_repo.save(user)

        reset_tokens = self._reset_service.cleanup_expired()
        logger.info(
            f"Token cleanup: {len(stale_users)} verification, {reset_tokens} reset"
        )
        return {"verification_tokens": len(stale_users), "reset_tokens": reset_tokens}
