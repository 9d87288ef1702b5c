"""Invoice status state machine."""
from datetime import date
from typing import Dict, FrozenSet, Optional

from backoffice.exceptions import BusinessError
from backoffice.models.enums import InvoiceStatus

S = InvoiceStatus

ALLOWED_TRANSITIONS: Dict[InvoiceStatus, FrozenSet[InvoiceStatus]] = {
    S.BROUILLON: frozenset({S.EMISE, S.ANNULEE}),
    S.EMISE: frozenset({S.PAYEE, S.BROUILLON, S.EN_RETARD, S.ANNULEE}),
    S.EN_RETARD: frozenset({S.PAYEE, S.ANNULEE}),
    S.PAYEE: frozenset({S.BROUILLON}),
    S.ANNULEE: frozenset({S.BROUILLON}),
}

EDITABLE_STATUSES = frozenset({S.BROUILLON})
DELETABLE_STATUSES = frozenset({S.BROUILLON, S.ANNULEE})
PENDING_STATUSES = frozenset({S.EMISE, S.EN_RETARD})
STATUSES_REQUIRING_COMMENT = frozenset({S.ANNULEE})


def can_transition(current: InvoiceStatus, target: InvoiceStatus) -> bool:
    """Staying in the same status is always allowed."""
    if current == target:
        return True
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def validate_transition(
    current: InvoiceStatus, target: InvoiceStatus, comment: Optional[str] = None
) -> None:
    """
    Raises:
        BusinessError: A required comment is missing or the transition
            is not allowed.
    """
    if target in STATUSES_REQUIRING_COMMENT and not (comment and comment.strip()):
        raise BusinessError(
            f"A comment is required to set status '{target.label}'",
            code="COMMENT_REQUIRED",
        )

    if not can_transition(current, target):
        raise BusinessError(
            f"Cannot change invoice status from '{current.label}' to '{target.label}'",
            code="INVALID_STATUS_TRANSITION",
            details={"from": current.value, "to": target.value},
        )


def append_status_note(
    notes: Optional[str], status: InvoiceStatus, comment: str, today: date
) -> str:
    """Append a dated, status-labelled line to the notes log."""
    entry = f"\n[{today.strftime('%d/%m/%Y')}] {status.label}: {comment}"
    return (notes or "") + entry


def is_editable(invoice) -> bool:
    return invoice.statut in EDITABLE_STATUSES


def is_deletable(invoice) -> bool:
    return invoice.statut in DELETABLE_STATUSES


def is_overdue(invoice, today: date) -> bool:
    return (
        invoice.statut == S.EMISE
        and invoice.date_echeance is not None
        and invoice.date_echeance < today
    )
