"""Ship reference model."""
from backoffice.extensions import db
from backoffice.models.base import BaseModel


class Ship(BaseModel):
    """Vessel operated by a company."""

    __tablename__ = "ship"

    nom = db.Column(db.String(200), nullable=False)
    numero_imo = db.Column(db.String(20), unique=True, nullable=False, index=True)
    pavillon = db.Column(db.String(100))
    company_id = db.Column(
        db.UUID(as_uuid=True),
        db.ForeignKey("company.id"),
        nullable=True,
        index=True,
    )
    active = db.Column(db.Boolean, nullable=False, default=True)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "nom": self.nom,
            "numero_imo": self.numero_imo,
            "pavillon": self.pavillon,
            "company_id": str(self.company_id) if self.company_id else None,
            "active": self.active,
        }

    def __repr__(self) -> str:
        return f"<Ship(numero_imo='{self.numero_imo}')>"
