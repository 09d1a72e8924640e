"""Create schools, invoices, collections and the invoice number counter

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-19

Invoice numbers are INV<n>; invoice_sequences holds the last issued n.
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "a1b2c3d4e5f6"
down_revision = None
branch_labels = None
depends_on = None

school_type = postgresql.ENUM("primary", "secondary", "tertiary", "mixed", name="school_type", create_type=False)
product_tier = postgresql.ENUM("Analytics", "Finance", "Timetable", name="product_tier", create_type=False)
invoice_status = postgresql.ENUM("Pending", "Completed", name="invoice_status", create_type=False)


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    bind = op.get_bind()
    school_type.create(bind, checkfirst=True)
    product_tier.create(bind, checkfirst=True)
    invoice_status.create(bind, checkfirst=True)

    op.create_table(
        "schools",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("type", school_type, nullable=False),
        sa.Column("product", product_tier, nullable=False),
        sa.Column("county", sa.String(length=100), nullable=True),
        sa.Column("registration_date", sa.Date(), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("contact_email", sa.String(length=255), nullable=True),
        sa.Column("contact_phone", sa.String(length=50), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_schools_id", "schools", ["id"])
    op.create_index("ix_schools_product", "schools", ["product"])
    op.create_index("ix_schools_is_active", "schools", ["is_active"])
    op.create_index("ix_schools_created_at", "schools", ["created_at"])

    op.create_table(
        "invoices",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "school_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("schools.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("invoice_number", sa.String(length=32), nullable=False),
        sa.Column("items", postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("paid_amount", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("opening_paid_amount", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("balance", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", invoice_status, nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_invoices_id", "invoices", ["id"])
    op.create_index("ix_invoices_school_id", "invoices", ["school_id"])
    op.create_index("ix_invoices_invoice_number", "invoices", ["invoice_number"], unique=True)
    op.create_index("ix_invoices_status", "invoices", ["status"])
    op.create_index("ix_invoices_created_at", "invoices", ["created_at"])

    op.create_table(
        "collections",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "school_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("schools.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "invoice_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("invoices.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("collection_number", sa.String(length=64), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", sa.String(length=50), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_collections_id", "collections", ["id"])
    op.create_index("ix_collections_school_id", "collections", ["school_id"])
    op.create_index("ix_collections_invoice_id", "collections", ["invoice_id"])
    op.create_index("ix_collections_collection_number", "collections", ["collection_number"], unique=True)
    op.create_index("ix_collections_status", "collections", ["status"])
    op.create_index("ix_collections_created_at", "collections", ["created_at"])

    op.create_table(
        "invoice_sequences",
        sa.Column("name", sa.String(length=32), primary_key=True),
        sa.Column("last_value", sa.Integer(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("invoice_sequences")
    op.drop_table("collections")
    op.drop_table("invoices")
    op.drop_table("schools")
    bind = op.get_bind()
    invoice_status.drop(bind, checkfirst=True)
    product_tier.drop(bind, checkfirst=True)
    school_type.drop(bind, checkfirst=True)
