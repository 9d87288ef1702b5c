"""Invoice repository implementation."""
from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple, Union
from uuid import UUID
from sqlalchemy import extract, or_
from backoffice.repositories.base import BaseRepository, to_uuid
from backoffice.models.invoice import Invoice
from backoffice.models.enums import InvoiceStatus


class InvoiceRepository(BaseRepository[Invoice]):
    """Repository for invoice persistence; listing queries skip soft-deleted rows."""

    def __init__(self, session):
        super().__init__(session=session, model=Invoice)

    def find_active_by_id(self, invoice_id: Union[str, UUID]) -> Optional[Invoice]:
        invoice = self.find_by_id(invoice_id)
        if invoice is None or not invoice.active:
            return None
        return invoice

    def find_by_numero(self, numero: str) -> Optional[Invoice]:
        return (
            self._session.query(Invoice)
            .filter(Invoice.numero == numero, Invoice.active.is_(True))
            .first()
        )

    def exists_by_numero(self, numero: str) -> bool:
        """Check number usage across all invoices, soft-deleted included."""
        return (
            self._session.query(Invoice).filter(Invoice.numero == numero).count() > 0
        )

    def find_last_created(self) -> Optional[Invoice]:
        """Most recently created active invoice."""
        return (
            self._session.query(Invoice)
            .filter(Invoice.active.is_(True))
            .order_by(Invoice.created_at.desc(), Invoice.numero.desc())
            .first()
        )

    def find_recent(self, limit: int = 10) -> List[Invoice]:
        """Latest active invoices, newest first."""
        return (
            self._session.query(Invoice)
            .filter(Invoice.active.is_(True))
            .order_by(Invoice.created_at.desc(), Invoice.numero.desc())
            .limit(limit)
            .all()
        )

    def find_by_status(self, statuses: List[InvoiceStatus]) -> List[Invoice]:
        return (
            self._session.query(Invoice)
            .filter(Invoice.active.is_(True), Invoice.statut.in_(statuses))
            .order_by(Invoice.date_echeance.asc())
            .all()
        )

    def find_overdue(self, today: date) -> List[Invoice]:
        """Issued invoices whose due date has passed."""
        return (
            self._session.query(Invoice)
            .filter(
                Invoice.active.is_(True),
                Invoice.statut == InvoiceStatus.EMISE,
                Invoice.date_echeance < today,
            )
            .all()
        )

    def find_all_paginated(
        self,
        limit: int = 20,
        offset: int = 0,
        statut: Optional[str] = None,
        company_id: Optional[str] = None,
        ship_id: Optional[str] = None,
        search: Optional[str] = None,
        date_debut: Optional[date] = None,
        date_fin: Optional[date] = None,
        mois: Optional[int] = None,
        annee: Optional[int] = None,
        min_amount: Optional[Decimal] = None,
        max_amount: Optional[Decimal] = None,
    ) -> Tuple[List[Invoice], int]:
        """
        Find active invoices with pagination and filters.

        Args:
            limit: Maximum number of results.
            offset: Number of results to skip.
            statut: Optional status filter.
            company_id: Optional company filter.
            ship_id: Optional ship filter.
            search: Optional search on number and notes.
            date_debut: Invoice date on or after this day.
            date_fin: Invoice date on or before this day.
            mois: Invoice date month (1-12).
            annee: Invoice date year.
            min_amount: Total (XOF) at least this amount.
            max_amount: Total (XOF) at most this amount.

        Returns:
            Tuple of (invoices list, total count).
        """
        query = self._session.query(Invoice).filter(Invoice.active.is_(True))

        if statut:
            try:
                query = query.filter(Invoice.statut == InvoiceStatus(statut))
            except ValueError:
                pass

        company_uuid = to_uuid(company_id)
        if company_uuid:
            query = query.filter(Invoice.company_id == company_uuid)

        ship_uuid = to_uuid(ship_id)
        if ship_uuid:
            query = query.filter(Invoice.ship_id == ship_uuid)

        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(Invoice.numero.ilike(pattern), Invoice.notes.ilike(pattern))
            )

        if date_debut:
            query = query.filter(Invoice.date_facture >= date_debut)
        if date_fin:
            query = query.filter(Invoice.date_facture <= date_fin)
        if mois:
            query = query.filter(extract("month", Invoice.date_facture) == mois)
        if annee:
            query = query.filter(extract("year", Invoice.date_facture) == annee)

        if min_amount is not None:
            query = query.filter(Invoice.montant_total >= min_amount)
        if max_amount is not None:
            query = query.filter(Invoice.montant_total <= max_amount)

        total = query.count()

        invoices = (
            query.order_by(Invoice.created_at.desc()).offset(offset).limit(limit).all()
        )

        return invoices, total
