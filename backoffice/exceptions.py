"""Application error taxonomy.

Every error carries a stable ``code`` and an HTTP ``status_code`` so the
error handlers registered in :func:`backoffice.app.create_app` can turn it
into a JSON response without inspecting the message.
"""
from typing import Any, Dict, Optional


class BackofficeError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 400
    code = "BAD_REQUEST"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> dict:
        payload = {"success": False, "error": self.message, "code": self.code}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(BackofficeError):
    """Missing or malformed input."""

    status_code = 400
    code = "VALIDATION_ERROR"


class BusinessError(BackofficeError):
    """A business rule rejected the operation."""

    status_code = 400
    code = "BUSINESS_RULE_VIOLATION"


class DuplicateResourceError(BackofficeError):
    """A unique field already holds the submitted value."""

    status_code = 409
    code = "DUPLICATE_RESOURCE"

    def __init__(self, resource: str, field: str, value: Any):
        super().__init__(
            f"{resource} with {field} '{value}' already exists",
            details={"resource": resource, "field": field},
        )


class ResourceNotFoundError(BackofficeError):
    """A referenced entity does not exist."""

    status_code = 404
    code = "RESOURCE_NOT_FOUND"

    def __init__(self, resource: str, field: str = "id", value: Any = None):
        super().__init__(
            f"{resource} not found with {field}: {value}",
            details={"resource": resource, "field": field},
        )


class UserNotFoundError(ResourceNotFoundError):
    def __init__(self, identifier: Any):
        super().__init__("User", "username", identifier)


class AuthenticationError(BackofficeError):
    status_code = 401
    code = "AUTHENTICATION_FAILED"


class InvalidCredentialsError(AuthenticationError):
    code = "INVALID_CREDENTIALS"

    def __init__(self, message: str = "Invalid username or password"):
        super().__init__(message)


class AccountLockedError(AuthenticationError):
    status_code = 423
    code = "ACCOUNT_LOCKED"


class DisabledUserError(AuthenticationError):
    status_code = 403
    code = "ACCOUNT_DISABLED"


class EmailNotVerifiedError(AuthenticationError):
    status_code = 403
    code = "EMAIL_NOT_VERIFIED"
