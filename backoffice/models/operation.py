"""Port operation reference model."""
from backoffice.extensions import db
from backoffice.models.base import BaseModel


class Operation(BaseModel):
    """Billable port operation with catalogue prices."""

    __tablename__ = "operation"

    nom = db.Column(db.String(200), nullable=False)
    code = db.Column(db.String(20), unique=True, nullable=False, index=True)
    description = db.Column(db.Text)
    prix_xof = db.Column(db.Numeric(15, 2))
    prix_eur = db.Column(db.Numeric(15, 2))
    active = db.Column(db.Boolean, nullable=False, default=True)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "nom": self.nom,
            "code": self.code,
            "description": self.description,
            "prix_xof": str(self.prix_xof) if self.prix_xof is not None else None,
            "prix_eur": str(self.prix_eur) if self.prix_eur is not None else None,
            "active": self.active,
        }

    def __repr__(self) -> str:
        return f"<Operation(code='{self.code}')>"
