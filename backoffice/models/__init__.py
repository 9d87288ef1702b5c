"""Domain models package."""
from backoffice.models.role import Role, user_roles
from backoffice.models.user import User
from backoffice.models.password_reset_token import PasswordResetToken
from backoffice.models.company import Company
from backoffice.models.ship import Ship
from backoffice.models.operation import Operation
from backoffice.models.invoice import Invoice
from backoffice.models.invoice_line_item import InvoiceLineItem
from backoffice.models.enums import RoleName, TokenType, InvoiceStatus

__all__ = [
    # Models
    "Role",
    "User",
    "PasswordResetToken",
    "Company",
    "Ship",
    "Operation",
    "Invoice",
    "InvoiceLineItem",
    # Tables
    "user_roles",
    # Enums
    "RoleName",
    "TokenType",
    "InvoiceStatus",
]
