"""Admin routes package."""
from backoffice.routes.admin.users import admin_users_bp

__all__ = [
    "admin_users_bp",
]
