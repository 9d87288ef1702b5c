"""Shipping company reference model."""
from backoffice.extensions import db
from backoffice.models.base import BaseModel


class Company(BaseModel):
    """Shipping company billed by invoices."""

    __tablename__ = "company"

    nom = db.Column(db.String(200), nullable=False)
    code = db.Column(db.String(20), unique=True, nullable=False, index=True)
    email = db.Column(db.String(255))
    telephone = db.Column(db.String(30))
    adresse = db.Column(db.String(500))
    active = db.Column(db.Boolean, nullable=False, default=True)

    ships = db.relationship("Ship", backref="company", lazy="dynamic")

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "nom": self.nom,
            "code": self.code,
            "email": self.email,
            "telephone": self.telephone,
            "adresse": self.adresse,
            "active": self.active,
        }

    def __repr__(self) -> str:
        return f"<Company(code='{self.code}')>"
