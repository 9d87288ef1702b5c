"""Create company, ship, operation, invoice and invoice line tables.

Revision ID: 20261001_invoicing
Revises: 20261001_auth
Create Date: 2026-10-01 09:30:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

# revision identifiers, used by Alembic.
revision: str = "20261001_invoicing"
down_revision: Union[str, None] = "20261001_auth"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

INVOICE_STATUSES = ("BROUILLON", "EMISE", "PAYEE", "EN_RETARD", "ANNULEE")


def upgrade() -> None:
    """Create invoicing tables."""
    op.create_table(
        "company",
        sa.Column("id", UUID(as_uuid=True), nullable=False),
        sa.Column("nom", sa.String(length=200), nullable=False),
        sa.Column("code", sa.String(length=20), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("telephone", sa.String(length=30), nullable=True),
        sa.Column("adresse", sa.String(length=500), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_company_code", "company", ["code"], unique=True)

    op.create_table(
        "ship",
        sa.Column("id", UUID(as_uuid=True), nullable=False),
        sa.Column("nom", sa.String(length=200), nullable=False),
        sa.Column("numero_imo", sa.String(length=20), nullable=False),
        sa.Column("pavillon", sa.String(length=100), nullable=True),
        sa.Column("company_id", UUID(as_uuid=True), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["company_id"], ["company.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_ship_numero_imo", "ship", ["numero_imo"], unique=True)
    op.create_index("ix_ship_company_id", "ship", ["company_id"], unique=False)

    op.create_table(
        "operation",
        sa.Column("id", UUID(as_uuid=True), nullable=False),
        sa.Column("nom", sa.String(length=200), nullable=False),
        sa.Column("code", sa.String(length=20), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("prix_xof", sa.Numeric(15, 2), nullable=True),
        sa.Column("prix_eur", sa.Numeric(15, 2), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_operation_code", "operation", ["code"], unique=True)

    op.create_table(
        "invoice",
        sa.Column("id", UUID(as_uuid=True), nullable=False),
        sa.Column("numero", sa.String(length=50), nullable=False),
        sa.Column("company_id", UUID(as_uuid=True), nullable=False),
        sa.Column("ship_id", UUID(as_uuid=True), nullable=False),
        sa.Column("date_facture", sa.Date(), nullable=False),
        sa.Column("date_echeance", sa.Date(), nullable=False),
        sa.Column("taux_tva", sa.Numeric(5, 2), nullable=False, server_default="0"),
        sa.Column("montant_ht", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("tva", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("montant_total", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("montant_total_eur", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column(
            "statut",
            sa.Enum(*INVOICE_STATUSES, name="invoicestatus"),
            nullable=False,
            server_default="BROUILLON",
        ),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_by", sa.String(length=50), nullable=True),
        sa.Column("updated_by", sa.String(length=50), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["company_id"], ["company.id"]),
        sa.ForeignKeyConstraint(["ship_id"], ["ship.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_invoice_numero", "invoice", ["numero"], unique=True)
    op.create_index("ix_invoice_company_id", "invoice", ["company_id"], unique=False)
    op.create_index("ix_invoice_ship_id", "invoice", ["ship_id"], unique=False)
    op.create_index("ix_invoice_date_echeance", "invoice", ["date_echeance"], unique=False)
    op.create_index("ix_invoice_statut", "invoice", ["statut"], unique=False)
    op.create_index("ix_invoice_active", "invoice", ["active"], unique=False)

    op.create_table(
        "invoice_line_item",
        sa.Column("id", UUID(as_uuid=True), nullable=False),
        sa.Column("invoice_id", UUID(as_uuid=True), nullable=False),
        sa.Column("operation_id", UUID(as_uuid=True), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=True),
        sa.Column("quantite", sa.Numeric(10, 2), nullable=False, server_default="1"),
        sa.Column("prix_unitaire_xof", sa.Numeric(15, 2), nullable=False),
        sa.Column("prix_unitaire_eur", sa.Numeric(15, 2), nullable=True),
        sa.Column("montant_ht_xof", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("montant_ht_eur", sa.Numeric(15, 2), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["invoice_id"], ["invoice.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["operation_id"], ["operation.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_invoice_line_item_invoice_id", "invoice_line_item", ["invoice_id"], unique=False)
    op.create_index("ix_invoice_line_item_operation_id", "invoice_line_item", ["operation_id"], unique=False)


def downgrade() -> None:
    """Drop invoicing tables."""
    op.drop_index("ix_invoice_line_item_operation_id", table_name="invoice_line_item")
    op.drop_index("ix_invoice_line_item_invoice_id", table_name="invoice_line_item")
    op.drop_table("invoice_line_item")
    for index in ("active", "statut", "date_echeance", "ship_id", "company_id", "numero"):
        op.drop_index(f"ix_invoice_{index}", table_name="invoice")
    op.drop_table("invoice")
    sa.Enum(name="invoicestatus").drop(op.get_bind(), checkfirst=True)
    op.drop_index("ix_operation_code", table_name="operation")
    op.drop_table("operation")
    op.drop_index("ix_ship_company_id", table_name="ship")
    op.drop_index("ix_ship_numero_imo", table_name="ship")
    op.drop_table("ship")
    op.drop_index("ix_company_code", table_name="company")
    op.drop_table("company")
