"""Audit trail for sign-in security and invoicing events."""
import enum
import logging
from datetime import datetime
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


class SecurityEvent(str, enum.Enum):
    """Security events recorded under the ``security.`` prefix."""

    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"
    ACCOUNT_LOCKED = "account_locked"
    ACCOUNT_UNLOCKED = "account_unlocked"
    PASSWORD_RESET_REQUESTED = "password_reset_requested"
    PASSWORD_RESET_COMPLETED = "password_reset_completed"
    PASSWORD_CHANGED = "password_changed"


class LoginFailure(str, enum.Enum):
    UNKNOWN_USER = "unknown_user"
    BAD_PASSWORD = "bad_password"


class AuditAction(str, enum.Enum):
    """Account and invoice actions."""

    USER_REGISTERED = "user.registered"
    USER_EMAIL_VERIFIED = "user.email_verified"
    USER_CREATED = "user.created"
    USER_UPDATED = "user.updated"
    USER_STATUS_TOGGLED = "user.status_toggled"
    USER_DELETED = "user.deleted"
    INVOICE_CREATED = "invoice.created"
    INVOICE_STATUS_CHANGED = "invoice.status_changed"
    INVOICE_DELETED = "invoice.deleted"
    INVOICE_REACTIVATED = "invoice.reactivated"


class ActivityLogger:
    """
    Structured audit log for security and billing events.

    Entries go to the standard logger with the payload in ``extra`` so a
    JSON formatter can ship them unchanged. Services call the named
    event methods; ``log`` and ``log_security_event`` are the emitters
    underneath.
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.utcnow):
        self._clock = clock

    def log(
        self,
        action: str,
        user_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Log an activity.

        Args:
            action: Action identifier (e.g., "invoice.status_changed")
            user_id: Optional user ID associated with the action
            metadata: Optional additional data to log
        """
        action = action.value if isinstance(action, enum.Enum) else action
        log_entry = {
            "timestamp": self._clock().isoformat(),
            "action": action,
            "user_id": user_id,
            "metadata": metadata or {},
        }
        logger.info(f"Activity: {action}", extra=log_entry)

    def log_security_event(
        self,
        event_type: str,
        user_id: Optional[str] = None,
        ip_address: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        event_type = event_type.value if isinstance(event_type, enum.Enum) else event_type
        metadata = {
            "ip": ip_address,
            "event_type": event_type,
            **(details or {}),
        }
        self.log(action=f"security.{event_type}", user_id=user_id, metadata=metadata)

    # ------------------------------------------------------------------
    # Sign-in security
    # ------------------------------------------------------------------

    def login_succeeded(self, user_id: str, ip_address: Optional[str] = None) -> None:
        self.log_security_event(
            SecurityEvent.LOGIN_SUCCEEDED, user_id=user_id, ip_address=ip_address
        )

    def login_failed(
        self,
        reason: LoginFailure,
        user_id: Optional[str] = None,
        ip_address: Optional[str] = None,
        identifier: Optional[str] = None,
    ) -> None:
        """An unknown identifier is recorded as typed; a known one by user id."""
        details = {"reason": reason.value}
        if identifier is not None:
            details["identifier"] = identifier
        self.log_security_event(
            SecurityEvent.LOGIN_FAILED, user_id=user_id,
            ip_address=ip_address, details=details,
        )

    def account_locked(
        self, user_id: str, locked_until: datetime, ip_address: Optional[str] = None
    ) -> None:
        self.log_security_event(
            SecurityEvent.ACCOUNT_LOCKED, user_id=user_id, ip_address=ip_address,
            details={"locked_until": locked_until.isoformat()},
        )

    def account_unlocked(self, user_id: str, actor: Optional[str] = None) -> None:
        self.log_security_event(
            SecurityEvent.ACCOUNT_UNLOCKED, user_id=user_id, details={"by": actor}
        )

    def password_reset_requested(
        self, user_id: Optional[str], ip_address: Optional[str] = None
    ) -> None:
        self.log_security_event(
            SecurityEvent.PASSWORD_RESET_REQUESTED, user_id=user_id, ip_address=ip_address
        )

    def password_reset_completed(self, user_id: Optional[str]) -> None:
        self.log_security_event(SecurityEvent.PASSWORD_RESET_COMPLETED, user_id=user_id)

    def password_changed(self, user_id: str) -> None:
        self.log_security_event(SecurityEvent.PASSWORD_CHANGED, user_id=user_id)

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    def user_registered(self, user_id: str) -> None:
        self.log(AuditAction.USER_REGISTERED, user_id=user_id)

    def email_verified(self, user_id: str) -> None:
        self.log(AuditAction.USER_EMAIL_VERIFIED, user_id=user_id)

    def user_created(self, user_id: str, actor: Optional[str] = None) -> None:
        self.log(AuditAction.USER_CREATED, user_id=user_id, metadata={"by": actor})

    def user_updated(self, user_id: str, actor: Optional[str] = None) -> None:
        self.log(AuditAction.USER_UPDATED, user_id=user_id, metadata={"by": actor})

    def user_status_toggled(
        self, user_id: str, is_active: bool, actor: Optional[str] = None
    ) -> None:
        self.log(
            AuditAction.USER_STATUS_TOGGLED, user_id=user_id,
            metadata={"is_active": is_active, "by": actor},
        )

    def user_deleted(self, user_id: str, actor: Optional[str] = None) -> None:
        self.log(AuditAction.USER_DELETED, user_id=user_id, metadata={"by": actor})

    # ------------------------------------------------------------------
    # Invoices
    # ------------------------------------------------------------------

    def _invoice(self, action: AuditAction, invoice, actor_id, **extra) -> None:
        metadata = {"invoice_id": str(invoice.id), "numero": invoice.numero, **extra}
        self.log(action, user_id=actor_id, metadata=metadata)

    def invoice_created(self, invoice, actor_id: Optional[str] = None) -> None:
        self._invoice(AuditAction.INVOICE_CREATED, invoice, actor_id)

    def invoice_status_changed(
        self, invoice, previous, new_status, actor_id: Optional[str] = None
    ) -> None:
        self._invoice(
            AuditAction.INVOICE_STATUS_CHANGED, invoice, actor_id,
            **{"from": previous.value, "to": new_status.value},
        )

    def invoice_deleted(self, invoice, actor_id: Optional[str] = None) -> None:
        self._invoice(AuditAction.INVOICE_DELETED, invoice, actor_id)

    def invoice_reactivated(self, invoice, actor_id: Optional[str] = None) -> None:
        self._invoice(AuditAction.INVOICE_REACTIVATED, invoice, actor_id)
