"""Invoice request schemas."""
from marshmallow import Schema, ValidationError, fields, validate, validates_schema

from backoffice.models.enums import InvoiceStatus

STATUS_VALUES = [status.value for status in InvoiceStatus]


class InvoiceLineSchema(Schema):
    """One invoice line."""

    operation_id = fields.UUID(required=True)
    description = fields.Str(load_default=None, validate=validate.Length(max=500))
    quantite = fields.Decimal(required=True, validate=validate.Range(min=0, min_inclusive=False))
    prix_unitaire_xof = fields.Decimal(
        required=True, validate=validate.Range(min=0, min_inclusive=False)
    )
    prix_unitaire_eur = fields.Decimal(
        load_default=None,
        allow_none=True,
        validate=validate.Range(min=0),
    )


class InvoiceCreateSchema(Schema):
    """Payload for a new invoice."""

    numero = fields.Str(load_default=None, validate=validate.Length(max=50))
    company_id = fields.UUID(required=True)
    ship_id = fields.UUID(required=True)
    date_facture = fields.Date(required=True)
    date_echeance = fields.Date(required=True)
    taux_tva = fields.Decimal(required=True, validate=validate.Range(min=0, max=100))
    notes = fields.Str(load_default=None)
    lignes = fields.List(
        fields.Nested(InvoiceLineSchema),
        required=True,
        validate=validate.Length(min=1, error="An invoice requires at least one line"),
    )


class InvoiceUpdateSchema(Schema):
    """Partial update of a draft invoice; omitted fields are unchanged."""

    numero = fields.Str(validate=validate.Length(max=50))
    company_id = fields.UUID()
    ship_id = fields.UUID()
    date_facture = fields.Date()
    date_echeance = fields.Date()
    taux_tva = fields.Decimal(validate=validate.Range(min=0, max=100))
    notes = fields.Str(allow_none=True)
    lignes = fields.List(
        fields.Nested(InvoiceLineSchema),
        validate=validate.Length(min=1, error="An invoice requires at least one line"),
    )


class StatusChangeSchema(Schema):
    statut = fields.Str(required=True, validate=validate.OneOf(STATUS_VALUES))
    commentaire = fields.Str(load_default=None, allow_none=True)


class CommentSchema(Schema):
    commentaire = fields.Str(load_default=None, allow_none=True)


class BatchStatusSchema(Schema):
    ids = fields.List(fields.UUID(), required=True, validate=validate.Length(min=1))
    statut = fields.Str(required=True, validate=validate.OneOf(STATUS_VALUES))
    commentaire = fields.Str(load_default=None, allow_none=True)


class BatchDeleteSchema(Schema):
    ids = fields.List(fields.UUID(), required=True, validate=validate.Length(min=1))


class InvoiceListQuerySchema(Schema):
    statut = fields.Str(load_default=None, validate=validate.OneOf(STATUS_VALUES))
    company_id = fields.UUID(load_default=None)
    ship_id = fields.UUID(load_default=None)
    search = fields.Str(load_default=None)
    date_debut = fields.Date(load_default=None)
    date_fin = fields.Date(load_default=None)
    mois = fields.Int(load_default=None, validate=validate.Range(min=1, max=12))
    annee = fields.Int(load_default=None, validate=validate.Range(min=2000, max=9999))
    min_amount = fields.Decimal(load_default=None, validate=validate.Range(min=0))
    max_amount = fields.Decimal(load_default=None, validate=validate.Range(min=0))
    limit = fields.Int(load_default=20, validate=validate.Range(min=1, max=100))
    offset = fields.Int(load_default=0, validate=validate.Range(min=0))

    @validates_schema
    def ranges_ordered(self, data, **kwargs):
        start, end = data.get("date_debut"), data.get("date_fin")
        if start and end and start > end:
            raise ValidationError("date_debut must not be after date_fin", "date_fin")

        low, high = data.get("min_amount"), data.get("max_amount")
        if low is not None and high is not None and low > high:
            raise ValidationError("min_amount must not exceed max_amount", "max_amount")


class RecentQuerySchema(Schema):
    limit = fields.Int(load_default=10, validate=validate.Range(min=1, max=100))


class ToggleActiveQuerySchema(Schema):
    """Explicit target state; omitted means flip the current one."""

    active = fields.Bool(load_default=None)
