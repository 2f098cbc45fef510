"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-17
"""
from alembic import op
import sqlalchemy as sa


revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "businesses",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("business_name", sa.Text(), nullable=False),
        sa.Column("slug", sa.Text(), nullable=False, unique=True),
        sa.Column("address", sa.Text()),
        sa.Column("whatsapp", sa.Text()),
        sa.Column("box_capacity", sa.Integer(), nullable=False, server_default=sa.text("5")),
        sa.Column("patio_capacity", sa.Integer(), nullable=False, server_default=sa.text("15")),
        sa.Column("slot_interval_minutes", sa.Integer(), nullable=False, server_default=sa.text("30")),
        sa.Column("operating_days", sa.Text(), nullable=False, server_default=sa.text("'[]'")),
        sa.Column("blocked_dates", sa.Text(), nullable=False, server_default=sa.text("'[]'")),
        sa.Column("timezone", sa.Text()),
        sa.Column("online_booking_enabled", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("loyalty_program_enabled", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.Text(), server_default=sa.text("CURRENT_TIMESTAMP")),
    )

    op.create_table(
        "service_bays",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("business_id", sa.Text(), sa.ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("is_active", sa.Integer(), nullable=False, server_default=sa.text("1")),
    )

    op.create_table(
        "services",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("business_id", sa.Text(), sa.ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("is_active", sa.Integer(), nullable=False, server_default=sa.text("1")),
    )

    op.create_table(
        "customers",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("business_id", sa.Text(), sa.ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("phone", sa.Text(), nullable=False),
        sa.Column("email", sa.Text()),
        sa.Column("created_at", sa.Text(), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.UniqueConstraint("business_id", "phone", name="uq_customers_business_phone"),
    )
    op.create_index("ix_customers_phone", "customers", ["phone"])

    op.create_table(
        "vehicles",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("customer_id", sa.Text(), sa.ForeignKey("customers.id", ondelete="CASCADE"), nullable=False),
        sa.Column("brand", sa.Text(), nullable=False),
        sa.Column("model", sa.Text(), nullable=False),
        sa.Column("plate", sa.Text(), nullable=False),
        sa.Column("color", sa.Text()),
        sa.Column("type", sa.Text(), nullable=False, server_default=sa.text("'CARRO'")),
    )

    op.create_table(
        "appointments",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("business_id", sa.Text(), sa.ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False),
        sa.Column("customer_id", sa.Text(), sa.ForeignKey("customers.id", ondelete="SET NULL")),
        sa.Column("vehicle_id", sa.Text(), sa.ForeignKey("vehicles.id", ondelete="SET NULL")),
        sa.Column("service_id", sa.Text(), sa.ForeignKey("services.id")),
        sa.Column("box_id", sa.Text(), sa.ForeignKey("service_bays.id", ondelete="SET NULL")),
        sa.Column("service_type", sa.Text(), nullable=False),
        sa.Column("date", sa.Text(), nullable=False),
        sa.Column("time", sa.Text(), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("status", sa.Text(), nullable=False, server_default=sa.text("'NOVO'")),
        sa.Column("slot_ordinal", sa.Integer()),
        sa.Column("observation", sa.Text()),
        sa.Column("cancellation_reason", sa.Text()),
        sa.Column("created_at", sa.Text(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.Text(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.UniqueConstraint("business_id", "date", "time", "slot_ordinal"),
    )

    op.create_table(
        "expenses",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("business_id", sa.Text(), sa.ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("date", sa.Text(), nullable=False),
        sa.Column("category", sa.Text(), nullable=False, server_default=sa.text("'FIXO'")),
        sa.Column("type", sa.Text(), nullable=False, server_default=sa.text("'DESPESA'")),
        sa.Column("payment_method", sa.Text()),
    )


def downgrade():
    op.drop_table("expenses")
    op.drop_table("appointments")
    op.drop_table("vehicles")
    op.drop_index("ix_customers_phone", table_name="customers")
    op.drop_table("customers")
    op.drop_table("services")
    op.drop_table("service_bays")
    op.drop_table("businesses")
