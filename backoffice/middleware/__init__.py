"""Request middleware."""
from backoffice.middleware.auth import (
    init_auth,
    require_auth,
    require_role,
    get_auth_context,
)
from backoffice.middleware.context import AuthContext

__all__ = [
    "init_auth",
    "require_auth",
    "require_role",
    "get_auth_context",
    "AuthContext",
]
