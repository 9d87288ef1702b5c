"""Repository layer."""
from backoffice.repositories.base import BaseRepository
from backoffice.repositories.user_repository import UserRepository
from backoffice.repositories.role_repository import RoleRepository
from backoffice.repositories.password_reset_repository import PasswordResetRepository
from backoffice.repositories.company_repository import CompanyRepository
from backoffice.repositories.ship_repository import ShipRepository
from backoffice.repositories.operation_repository import OperationRepository
from backoffice.repositories.invoice_repository import InvoiceRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "RoleRepository",
    "PasswordResetRepository",
    "CompanyRepository",
    "ShipRepository",
    "OperationRepository",
    "InvoiceRepository",
]
