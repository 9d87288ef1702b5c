"""Role model for RBAC."""
from backoffice.extensions import db
from backoffice.models.base import BaseModel
from backoffice.models.enums import RoleName


# Association table for user-role many-to-many
user_roles = db.Table(
    "user_roles",
    db.Column(
        "user_id",
        db.UUID(as_uuid=True),
        db.ForeignKey("user.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    db.Column(
        "role_id", db.UUID(as_uuid=True), db.ForeignKey("role.id"), primary_key=True
    ),
)


class Role(BaseModel):
    """
    Role assigned to users.

    System roles (is_system=True) cannot be deleted, and users
    holding one cannot be hard-deleted.
    """

    __tablename__ = "role"

    name = db.Column(db.Enum(RoleName), unique=True, nullable=False, index=True)
    description = db.Column(db.String(255))
    is_system = db.Column(db.Boolean, nullable=False, default=False)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": str(self.id),
            "name": self.name.value,
            "description": self.description,
            "is_system": self.is_system,
        }

    def __repr__(self) -> str:
        return f"<Role(name='{self.name.value}')>"
