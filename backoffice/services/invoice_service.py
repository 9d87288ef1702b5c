"""Invoice service: numbering, amounts and lifecycle."""
import logging
import time
from datetime import date, timedelta
from typing import Any, Callable, Dict, List, Optional, Tuple

from backoffice.exceptions import (
    BackofficeError,
    BusinessError,
    DuplicateResourceError,
    ResourceNotFoundError,
    ValidationError,
)
from backoffice.middleware.context import AuthContext
from backoffice.models.enums import InvoiceStatus
from backoffice.models.invoice import Invoice
from backoffice.models.invoice_line_item import InvoiceLineItem
from backoffice.repositories.base import to_uuid
from backoffice.repositories.company_repository import CompanyRepository
from backoffice.repositories.invoice_repository import InvoiceRepository
from backoffice.repositories.operation_repository import OperationRepository
from backoffice.repositories.ship_repository import ShipRepository
from backoffice.services import invoice_status
from backoffice.services.activity_logger import ActivityLogger
from backoffice.services.invoice_amounts import (
    LineAmounts,
    calculate_totals,
    line_total_eur,
    line_total_xof,
    to_decimal,
)

logger = logging.getLogger(__name__)

NUMBER_PREFIX = "FAC"
SEQUENCE_WIDTH = 6

DEFAULT_COMMENTS = {
    InvoiceStatus.EMISE: "Facture émise",
    InvoiceStatus.PAYEE: "Paiement reçu",
    InvoiceStatus.BROUILLON: "Remise en brouillon",
}
OVERDUE_COMMENT = "Échéance dépassée"

REQUIRED_FIELDS = ("company_id", "ship_id", "date_facture", "date_echeance", "taux_tva")


class InvoiceService:
    """
    Invoice business logic.

    Validates input, generates numbers, computes amounts and guards
    status transitions. Soft-deleted invoices are invisible to every
    read operation.
    """

    def __init__(
        self,
        invoice_repository: InvoiceRepository,
        company_repository: CompanyRepository,
        ship_repository: ShipRepository,
        operation_repository: OperationRepository,
        activity_logger: Optional[ActivityLogger] = None,
        today: Callable[[], date] = date.today,
    ):
        """
        Initialize invoice service.

        Args:
            invoice_repository: Repository for invoice persistence.
            company_repository: Lookup for billed companies.
            ship_repository: Lookup for ships.
            operation_repository: Lookup for invoiced operations.
            activity_logger: Audit logger.
            today: Returns the current date.
        """
        self._repo = invoice_repository
        self._company_repo = company_repository
        self._ship_repo = ship_repository
        self._operation_repo = operation_repository
        self._activity = activity_logger or ActivityLogger()
        self._today = today

    # ------------------------------------------------------------------
    # Numbering
    # ------------------------------------------------------------------

    def generate_invoice_number(self) -> str:
        """
        Next ``FAC-<year>-<sequence>`` number.

        Continues the sequence of the last created invoice when it belongs
        to the current year, then skips numbers already in use. Any error
        falls back to a timestamp-derived suffix.
        """
        year = self._today().year
        prefix = f"{NUMBER_PREFIX}-{year}-"

        try:
            sequence = 1
            last = self._repo.find_last_created()
            if last is not None and last.numero and last.numero.startswith(prefix):
                sequence = int(last.numero[len(prefix):]) + 1

            numero = self._format_number(prefix, sequence)
            while self._repo.exists_by_numero(numero):
                sequence += 1
                numero = self._format_number(prefix, sequence)

            logger.debug(f"Generated invoice number {numero}")
            return numero
        except Exception as e:
            logger.error(f"Invoice number generation failed, using fallback: {e}")
            return f"{prefix}{int(time.time() * 1000) % 1000000}"

    @staticmethod
    def _format_number(prefix: str, sequence: int) -> str:
        return f"{prefix}{sequence:0{SEQUENCE_WIDTH}d}"

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_invoice(self, invoice_id) -> Invoice:
        """
        Raises:
            ResourceNotFoundError: No active invoice with this id.
        """
        invoice = self._repo.find_active_by_id(invoice_id)
        if invoice is None:
            raise ResourceNotFoundError("Invoice", "id", invoice_id)
        return invoice

    def get_invoice_by_numero(self, numero: str) -> Invoice:
        invoice = self._repo.find_by_numero(numero)
        if invoice is None:
            raise ResourceNotFoundError("Invoice", "numero", numero)
        return invoice

    def list_invoices(
        self,
        filters: Optional[Dict[str, Any]] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[Invoice], int]:
        filters = filters or {}
        return self._repo.find_all_paginated(
            limit=limit,
            offset=offset,
            statut=filters.get("statut"),
            company_id=filters.get("company_id"),
            ship_id=filters.get("ship_id"),
            search=filters.get("search"),
            date_debut=filters.get("date_debut"),
            date_fin=filters.get("date_fin"),
            mois=filters.get("mois"),
            annee=filters.get("annee"),
            min_amount=filters.get("min_amount"),
            max_amount=filters.get("max_amount"),
        )

    def get_recent_invoices(self, limit: int = 10) -> List[Invoice]:
        return self._repo.find_recent(limit)

    def get_overdue_invoices(self) -> List[Invoice]:
        """Issued invoices past due, plus those already flagged overdue."""
        flagged = self._repo.find_by_status([InvoiceStatus.EN_RETARD])
        return flagged + self._repo.find_overdue(self._today())

    def get_pending_invoices(self) -> List[Invoice]:
        """Invoices awaiting payment."""
        return self._repo.find_by_status(list(invoice_status.PENDING_STATUSES))

    def is_editable(self, invoice_id) -> bool:
        return invoice_status.is_editable(self.get_invoice(invoice_id))

    def is_deletable(self, invoice_id) -> bool:
        return invoice_status.is_deletable(self.get_invoice(invoice_id))

    # ------------------------------------------------------------------
    # Create / update / delete
    # ------------------------------------------------------------------

    def create_invoice(
        self, data: Dict[str, Any], actor: Optional[AuthContext] = None
    ) -> Invoice:
        """
        Create a draft invoice.

        Args:
            data: Invoice fields and ``lignes``.
            actor: Authenticated caller, recorded as creator.

        Returns:
            The persisted invoice.

        Raises:
            ValidationError: Missing or inconsistent input.
            ResourceNotFoundError: Unknown company, ship or operation.
            DuplicateResourceError: The given number is taken.
        """
        self._validate_create(data)
        self._validate_dates(data["date_facture"], data["date_echeance"])
        self._validate_relations(data["company_id"], data["ship_id"], data["lignes"])

        numero = data.get("numero")
        if numero:
            if self._repo.exists_by_numero(numero):
                raise DuplicateResourceError("Invoice", "numero", numero)
        else:
            numero = self.generate_invoice_number()

        invoice = Invoice(
            numero=numero,
            company_id=to_uuid(data["company_id"]),
            ship_id=to_uuid(data["ship_id"]),
            date_facture=data["date_facture"],
            date_echeance=data["date_echeance"],
            taux_tva=to_decimal(data["taux_tva"]),
            notes=data.get("notes"),
            statut=InvoiceStatus.BROUILLON,
            active=True,
            created_by=self._actor_name(actor),
        )
        invoice.lignes = [self._build_line(line) for line in data["lignes"]]
        self._apply_totals(invoice)

        saved = self._repo.save(invoice)
        self._activity.invoice_created(saved, actor.user_id if actor else None)
        logger.info(f"Invoice {saved.numero} created")
        return saved

    def update_invoice(
        self, invoice_id, data: Dict[str, Any], actor: Optional[AuthContext] = None
    ) -> Invoice:
        """
        Update a draft invoice.

        Amounts are recomputed when the lines or the VAT rate change.

        Raises:
            BusinessError: The invoice is no longer a draft.
        """
        invoice = self.get_invoice(invoice_id)
        if not invoice_status.is_editable(invoice):
            raise BusinessError(
                f"Invoice {invoice.numero} cannot be modified in status "
                f"'{invoice.statut.label}'",
                code="INVOICE_NOT_EDITABLE",
            )

        numero = data.get("numero")
        if numero and numero != invoice.numero:
            if self._repo.exists_by_numero(numero):
                raise DuplicateResourceError("Invoice", "numero", numero)
            invoice.numero = numero

        date_facture = data.get("date_facture", invoice.date_facture)
        date_echeance = data.get("date_echeance", invoice.date_echeance)
        if "date_facture" in data or "date_echeance" in data:
            self._validate_dates(date_facture, date_echeance)
        invoice.date_facture = date_facture
        invoice.date_echeance = date_echeance

        company_id = data.get("company_id", invoice.company_id)
        ship_id = data.get("ship_id", invoice.ship_id)
        if "company_id" in data or "ship_id" in data:
            self._validate_relations(company_id, ship_id, [])
            invoice.company_id = to_uuid(company_id)
            invoice.ship_id = to_uuid(ship_id)

        if "notes" in data:
            invoice.notes = data["notes"]

        recalculate = False
        if "taux_tva" in data and to_decimal(data["taux_tva"]) != to_decimal(invoice.taux_tva):
            self._validate_rate(data["taux_tva"])
            invoice.taux_tva = to_decimal(data["taux_tva"])
            recalculate = True

        if "lignes" in data:
            self._validate_lines(data["lignes"])
            self._validate_relations(invoice.company_id, invoice.ship_id, data["lignes"])
            invoice.lignes = [self._build_line(line) for line in data["lignes"]]
            recalculate = True

        if recalculate:
            self._apply_totals(invoice)

        invoice.updated_by = self._actor_name(actor)
        saved = self._repo.save(invoice)
        logger.info(f"Invoice {saved.numero} updated")
        return saved

    def delete_invoice(self, invoice_id, actor: Optional[AuthContext] = None) -> None:
        """
        Soft-delete an invoice.

        Raises:
            BusinessError: Issued, paid and overdue invoices are kept.
        """
        invoice = self.get_invoice(invoice_id)
        if not invoice_status.is_deletable(invoice):
            raise BusinessError(
                f"Invoice {invoice.numero} cannot be deleted in status "
                f"'{invoice.statut.label}'",
                code="INVOICE_NOT_DELETABLE",
            )

        invoice.active = False
        invoice.updated_by = self._actor_name(actor)
        self._repo.save(invoice)
        self._activity.invoice_deleted(invoice, actor.user_id if actor else None)

    def set_active(
        self, invoice_id, active: Optional[bool] = None, actor: Optional[AuthContext] = None
    ) -> Invoice:
        """
        Soft-delete or restore an invoice.

        ``active`` of None flips the current flag. Deactivating follows the
        same status rule as deletion; restoring is always allowed since
        numbers stay reserved while an invoice is soft-deleted.

        Raises:
            ResourceNotFoundError: No invoice with this id, active or not.
            BusinessError: Deactivating an issued, paid or overdue invoice.
        """
        invoice = self._repo.find_by_id(invoice_id)
        if invoice is None:
            raise ResourceNotFoundError("Invoice", "id", invoice_id)

        target = (not invoice.active) if active is None else active
        if target == invoice.active:
            return invoice

        if not target:
            self.delete_invoice(invoice_id, actor=actor)
            return invoice

        invoice.active = True
        invoice.updated_by = self._actor_name(actor)
        saved = self._repo.save(invoice)
        self._activity.invoice_reactivated(saved, actor.user_id if actor else None)
        logger.info(f"Invoice {saved.numero} restored")
        return saved

    def recalculate_amounts(self, invoice_id) -> Invoice:
        invoice = self.get_invoice(invoice_id)
        for line in invoice.lignes:
            amounts = self._line_amounts(line)
            line.montant_ht_xof = line_total_xof(amounts)
            line.montant_ht_eur = line_total_eur(amounts)
        self._apply_totals(invoice)
        return self._repo.save(invoice)

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def change_status(
        self,
        invoice_id,
        new_status: InvoiceStatus,
        comment: Optional[str] = None,
        actor: Optional[AuthContext] = None,
    ) -> Invoice:
        """
        Move an invoice to another status.

        A comment, when given, is appended to the notes log.

        Raises:
            BusinessError: Illegal transition or missing mandatory comment.
        """
        invoice = self.get_invoice(invoice_id)
        previous = invoice.statut
        invoice_status.validate_transition(previous, new_status, comment)

        invoice.statut = new_status
        if comment and comment.strip():
            invoice.notes = invoice_status.append_status_note(
                invoice.notes, new_status, comment.strip(), self._today()
            )
        invoice.updated_by = self._actor_name(actor)

        saved = self._repo.save(invoice)
        self._activity.invoice_status_changed(
            saved, previous, new_status, actor.user_id if actor else None
        )
        logger.info(
            f"Invoice {saved.numero} status {previous.value} -> {new_status.value}"
        )
        return saved

    def emit_invoice(self, invoice_id, comment=None, actor=None) -> Invoice:
        return self._change_with_default(invoice_id, InvoiceStatus.EMISE, comment, actor)

    def mark_as_paid(self, invoice_id, comment=None, actor=None) -> Invoice:
        return self._change_with_default(invoice_id, InvoiceStatus.PAYEE, comment, actor)

    def return_to_draft(self, invoice_id, comment=None, actor=None) -> Invoice:
        return self._change_with_default(
            invoice_id, InvoiceStatus.BROUILLON, comment, actor
        )

    def cancel_invoice(self, invoice_id, comment: str, actor=None) -> Invoice:
        return self.change_status(invoice_id, InvoiceStatus.ANNULEE, comment, actor)

    def _change_with_default(self, invoice_id, status, comment, actor) -> Invoice:
        if not (comment and comment.strip()):
            comment = DEFAULT_COMMENTS[status]
        return self.change_status(invoice_id, status, comment, actor)

    def mark_overdue_invoices(self) -> int:
        """
        Flag issued invoices past their due date as overdue.

        Returns:
            Number of invoices updated.
        """
        today = self._today()
        count = 0
        for invoice in self._repo.find_overdue(today):
            invoice.statut = InvoiceStatus.EN_RETARD
            invoice.notes = invoice_status.append_status_note(
                invoice.notes, InvoiceStatus.EN_RETARD, OVERDUE_COMMENT, today
            )
            invoice.updated_by = "system"
            self._repo.save(invoice)
            count += 1

        if count:
            logger.info(f"{count} invoice(s) marked overdue")
        return count

    # ------------------------------------------------------------------
    # Batch
    # ------------------------------------------------------------------

    def batch_change_status(
        self,
        invoice_ids: List[str],
        new_status: InvoiceStatus,
        comment: Optional[str] = None,
        actor: Optional[AuthContext] = None,
    ) -> Dict[str, list]:
        """Apply a status change to each invoice, collecting per-invoice errors."""
        return self._batch(
            invoice_ids, lambda i: self.change_status(i, new_status, comment, actor)
        )

    def batch_delete(
        self, invoice_ids: List[str], actor: Optional[AuthContext] = None
    ) -> Dict[str, list]:
        return self._batch(invoice_ids, lambda i: self.delete_invoice(i, actor))

    @staticmethod
    def _batch(invoice_ids: List[str], operation) -> Dict[str, list]:
        succeeded, failed = [], []
        for invoice_id in invoice_ids:
            try:
                operation(invoice_id)
                succeeded.append(str(invoice_id))
            except BackofficeError as e:
                failed.append({"id": str(invoice_id), "error": e.message, "code": e.code})
        return {"succeeded": succeeded, "failed": failed}

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _actor_name(actor: Optional[AuthContext]) -> Optional[str]:
        return actor.username if actor else None

    def _validate_create(self, data: Dict[str, Any]) -> None:
        missing = [name for name in REQUIRED_FIELDS if data.get(name) is None]
        if missing:
            raise ValidationError(
                f"Missing required fields: {', '.join(missing)}",
                details={"fields": missing},
            )
        self._validate_rate(data["taux_tva"])
        self._validate_lines(data.get("lignes"))

    @staticmethod
    def _validate_rate(rate) -> None:
        if to_decimal(rate) < 0:
            raise ValidationError("VAT rate cannot be negative")

    @staticmethod
    def _validate_lines(lines) -> None:
        if not lines:
            raise ValidationError("An invoice requires at least one line")

        for index, line in enumerate(lines, start=1):
            if not line.get("operation_id"):
                raise ValidationError(f"Line {index}: operation is required")
            if line.get("quantite") is None or to_decimal(line["quantite"]) <= 0:
                raise ValidationError(f"Line {index}: quantity must be positive")
            if (
                line.get("prix_unitaire_xof") is None
                or to_decimal(line["prix_unitaire_xof"]) <= 0
            ):
                raise ValidationError(f"Line {index}: XOF unit price must be positive")

    def _validate_dates(self, date_facture: date, date_echeance: date) -> None:
        if date_echeance < date_facture:
            raise ValidationError("Due date cannot be before the invoice date")
        if date_facture > self._today() + timedelta(days=1):
            raise ValidationError("Invoice date cannot be in the future")

    def _validate_relations(self, company_id, ship_id, lines) -> None:
        if not self._company_repo.exists(company_id):
            raise ResourceNotFoundError("Company", "id", company_id)
        if not self._ship_repo.exists(ship_id):
            raise ResourceNotFoundError("Ship", "id", ship_id)
        for line in lines:
            if not self._operation_repo.exists(line["operation_id"]):
                raise ResourceNotFoundError("Operation", "id", line["operation_id"])

    def _build_line(self, data: Dict[str, Any]) -> InvoiceLineItem:
        eur = data.get("prix_unitaire_eur")
        amounts = LineAmounts(
            quantite=to_decimal(data["quantite"]),
            prix_unitaire_xof=to_decimal(data["prix_unitaire_xof"]),
            prix_unitaire_eur=to_decimal(eur) if eur is not None else None,
        )
        return InvoiceLineItem(
            operation_id=to_uuid(data["operation_id"]),
            description=data.get("description"),
            quantite=amounts.quantite,
            prix_unitaire_xof=amounts.prix_unitaire_xof,
            prix_unitaire_eur=amounts.prix_unitaire_eur,
            montant_ht_xof=line_total_xof(amounts),
            montant_ht_eur=line_total_eur(amounts),
        )

    @staticmethod
    def _line_amounts(line: InvoiceLineItem) -> LineAmounts:
        return LineAmounts(
            quantite=to_decimal(line.quantite),
            prix_unitaire_xof=to_decimal(line.prix_unitaire_xof),
            prix_unitaire_eur=(
                to_decimal(line.prix_unitaire_eur)
                if line.prix_unitaire_eur is not None else None
            ),
        )

    def _apply_totals(self, invoice: Invoice) -> None:
        totals = calculate_totals(
            [self._line_amounts(line) for line in invoice.lignes], invoice.taux_tva
        )
        invoice.montant_ht = totals.subtotal
        invoice.tva = totals.vat
        invoice.montant_total = totals.total
        invoice.montant_total_eur = totals.total_eur
