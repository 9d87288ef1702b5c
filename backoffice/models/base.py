"""Declarative base for all persisted models."""
import uuid
from datetime import datetime
from backoffice.extensions import db


class BaseModel(db.Model):
    """
    Abstract base model.

    Provides a UUID primary key and audit timestamps.
    """

    __abstract__ = True

    id = db.Column(db.UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(id={self.id})>"
