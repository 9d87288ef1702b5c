"""Enumeration types for models."""
import enum


class RoleName(enum.Enum):
    """Built-in role names."""

    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    OPERATOR = "OPERATOR"
    VIEWER = "VIEWER"
    USER = "USER"


class TokenType(enum.Enum):
    """JWT token kind carried in the tokenType claim."""

    ACCESS = "ACCESS"
    REFRESH = "REFRESH"


class InvoiceStatus(enum.Enum):
    """Invoice lifecycle status."""

    BROUILLON = "BROUILLON"
    EMISE = "EMISE"
    PAYEE = "PAYEE"
    EN_RETARD = "EN_RETARD"
    ANNULEE = "ANNULEE"

    @property
    def label(self) -> str:
        return INVOICE_STATUS_LABELS[self]


INVOICE_STATUS_LABELS = {
    InvoiceStatus.BROUILLON: "Brouillon",
    InvoiceStatus.EMISE: "Émise",
    InvoiceStatus.PAYEE: "Payée",
    InvoiceStatus.EN_RETARD: "En retard",
    InvoiceStatus.ANNULEE: "Annulée",
}
