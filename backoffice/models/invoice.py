"""Invoice domain model."""
from backoffice.extensions import db
from backoffice.models.base import BaseModel
from backoffice.models.enums import InvoiceStatus


class Invoice(BaseModel):
    """
    Invoice issued to a shipping company for a ship's port operations.

    Amounts are stored in XOF with an independent EUR total. ``notes``
    is an append-only log of status-change comments.
    """

    __tablename__ = "invoice"

    numero = db.Column(db.String(50), unique=True, nullable=False, index=True)
    company_id = db.Column(
        db.UUID(as_uuid=True),
        db.ForeignKey("company.id"),
        nullable=False,
        index=True,
    )
    ship_id = db.Column(
        db.UUID(as_uuid=True),
        db.ForeignKey("ship.id"),
        nullable=False,
        index=True,
    )
    date_facture = db.Column(db.Date, nullable=False)
    date_echeance = db.Column(db.Date, nullable=False, index=True)
    taux_tva = db.Column(db.Numeric(5, 2), nullable=False, default=0)
    montant_ht = db.Column(db.Numeric(15, 2), nullable=False, default=0)
    tva = db.Column(db.Numeric(15, 2), nullable=False, default=0)
    montant_total = db.Column(db.Numeric(15, 2), nullable=False, default=0)
    montant_total_eur = db.Column(db.Numeric(15, 2), nullable=False, default=0)
    statut = db.Column(
        db.Enum(InvoiceStatus),
        nullable=False,
        default=InvoiceStatus.BROUILLON,
        index=True,
    )
    notes = db.Column(db.Text)
    active = db.Column(db.Boolean, nullable=False, default=True, index=True)
    created_by = db.Column(db.String(50))
    updated_by = db.Column(db.String(50))

    company = db.relationship("Company", lazy="joined")
    ship = db.relationship("Ship", lazy="joined")
    lignes = db.relationship(
        "InvoiceLineItem",
        backref="invoice",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="InvoiceLineItem.created_at",
    )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": str(self.id),
            "numero": self.numero,
            "company_id": str(self.company_id),
            "company_nom": self.company.nom if self.company else None,
            "ship_id": str(self.ship_id),
            "ship_nom": self.ship.nom if self.ship else None,
            "date_facture": self.date_facture.isoformat() if self.date_facture else None,
            "date_echeance": self.date_echeance.isoformat() if self.date_echeance else None,
            "taux_tva": str(self.taux_tva),
            "montant_ht": str(self.montant_ht),
            "tva": str(self.tva),
            "montant_total": str(self.montant_total),
            "montant_total_eur": str(self.montant_total_eur),
            "statut": self.statut.value,
            "statut_label": self.statut.label,
            "active": self.active,
            "notes": self.notes,
            "lignes": [ligne.to_dict() for ligne in self.lignes],
            "created_by": self.created_by,
            "updated_by": self.updated_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self) -> str:
        return f"<Invoice(numero='{self.numero}', statut={self.statut.value})>"
