"""InvoiceLineItem domain model."""
from backoffice.extensions import db
from backoffice.models.base import BaseModel


class InvoiceLineItem(BaseModel):
    """
    Invoice line for a single operation.

    Line totals are quantity times unit price in each currency; the EUR
    total stays NULL when the line has no EUR price.
    """

    __tablename__ = "invoice_line_item"

    invoice_id = db.Column(
        db.UUID(as_uuid=True),
        db.ForeignKey("invoice.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    operation_id = db.Column(
        db.UUID(as_uuid=True),
        db.ForeignKey("operation.id"),
        nullable=False,
        index=True,
    )
    description = db.Column(db.String(500))
    quantite = db.Column(db.Numeric(10, 2), nullable=False, default=1)
    prix_unitaire_xof = db.Column(db.Numeric(15, 2), nullable=False)
    prix_unitaire_eur = db.Column(db.Numeric(15, 2), nullable=True)
    montant_ht_xof = db.Column(db.Numeric(15, 2), nullable=False, default=0)
    montant_ht_eur = db.Column(db.Numeric(15, 2), nullable=True)

    operation = db.relationship("Operation", lazy="joined")

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": str(self.id),
            "operation_id": str(self.operation_id),
            "operation_nom": self.operation.nom if self.operation else None,
            "description": self.description,
            "quantite": str(self.quantite),
            "prix_unitaire_xof": str(self.prix_unitaire_xof),
            "prix_unitaire_eur": (
                str(self.prix_unitaire_eur) if self.prix_unitaire_eur is not None else None
            ),
            "montant_ht_xof": str(self.montant_ht_xof),
            "montant_ht_eur": (
                str(self.montant_ht_eur) if self.montant_ht_eur is not None else None
            ),
        }

    def __repr__(self) -> str:
        return f"<InvoiceLineItem(operation_id={self.operation_id}, montant={self.montant_ht_xof})>"
