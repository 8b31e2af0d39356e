"""create finance tables

Revision ID: 3a9d4c1e7b20
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3a9d4c1e7b20"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "users",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("preferred_currency", sa.String(), nullable=False, server_default="VND"),
        sa.Column("auto_convert", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_id", "users", ["id"], unique=False)
    op.create_index("ix_users_email", "users", ["email"], unique=False)

    op.create_table(
        "properties",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("address", sa.String(), nullable=True),
        sa.Column("type", sa.String(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_properties_id", "properties", ["id"], unique=False)
    op.create_index("ix_properties_user_id", "properties", ["user_id"], unique=False)
    op.create_index("ix_properties_type", "properties", ["type"], unique=False)

    op.create_table(
        "units",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("property_id", sa.String(), sa.ForeignKey("properties.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("rent_amount", sa.Numeric(14, 2), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_units_id", "units", ["id"], unique=False)
    op.create_index("ix_units_property_id", "units", ["property_id"], unique=False)

    op.create_table(
        "tenants",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_tenants_id", "tenants", ["id"], unique=False)
    op.create_index("ix_tenants_user_id", "tenants", ["user_id"], unique=False)

    op.create_table(
        "tenant_units",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("tenant_id", sa.String(), sa.ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False),
        sa.Column("unit_id", sa.String(), sa.ForeignKey("units.id", ondelete="CASCADE"), nullable=False),
        sa.Column("contract_start_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("contract_end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("contract_status", sa.String(), nullable=False, server_default="ACTIVE"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_tenant_units_id", "tenant_units", ["id"], unique=False)
    op.create_index("ix_tenant_units_tenant_id", "tenant_units", ["tenant_id"], unique=False)
    op.create_index("ix_tenant_units_unit_id", "tenant_units", ["unit_id"], unique=False)
    op.create_index("ix_tenant_units_contract_end_date", "tenant_units", ["contract_end_date"], unique=False)

    op.create_table(
        "bills",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("property_id", sa.String(), sa.ForeignKey("properties.id", ondelete="CASCADE"), nullable=False),
        sa.Column("unit_id", sa.String(), sa.ForeignKey("units.id", ondelete="SET NULL"), nullable=True),
        sa.Column("rent_amount", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("electricity_previous_reading", sa.Numeric(12, 2), nullable=True),
        sa.Column("electricity_current_reading", sa.Numeric(12, 2), nullable=True),
        sa.Column("electricity_consumption", sa.Numeric(12, 2), nullable=True),
        sa.Column("electricity_rate", sa.Numeric(12, 2), nullable=True),
        sa.Column("uses_tiered_pricing", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("electricity_tier_details", sa.JSON(), nullable=True),
        sa.Column("electricity_amount", sa.Numeric(14, 2), nullable=True),
        sa.Column("water_previous_reading", sa.Numeric(12, 2), nullable=True),
        sa.Column("water_current_reading", sa.Numeric(12, 2), nullable=True),
        sa.Column("water_consumption", sa.Numeric(12, 2), nullable=True),
        sa.Column("water_rate", sa.Numeric(12, 2), nullable=True),
        sa.Column("water_amount", sa.Numeric(14, 2), nullable=True),
        sa.Column("additional_fees", sa.JSON(), nullable=True),
        sa.Column("total_amount", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("priority", sa.String(), nullable=False, server_default="medium"),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_paid", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_bills_id", "bills", ["id"], unique=False)
    op.create_index("ix_bills_property_id", "bills", ["property_id"], unique=False)
    op.create_index("ix_bills_unit_id", "bills", ["unit_id"], unique=False)
    op.create_index("ix_bills_due_date", "bills", ["due_date"], unique=False)
    op.create_index("ix_bills_is_paid", "bills", ["is_paid"], unique=False)

    op.create_table(
        "payments",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("bill_id", sa.String(), sa.ForeignKey("bills.id", ondelete="CASCADE"), nullable=False),
        sa.Column("tenant_id", sa.String(), sa.ForeignKey("tenants.id", ondelete="SET NULL"), nullable=True),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("payment_method", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="completed"),
        sa.Column("payment_date", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_payments_id", "payments", ["id"], unique=False)
    op.create_index("ix_payments_bill_id", "payments", ["bill_id"], unique=False)
    op.create_index("ix_payments_tenant_id", "payments", ["tenant_id"], unique=False)
    op.create_index("ix_payments_payment_date", "payments", ["payment_date"], unique=False)

    op.create_table(
        "maintenance_requests",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("property_id", sa.String(), sa.ForeignKey("properties.id", ondelete="CASCADE"), nullable=False),
        sa.Column("unit_id", sa.String(), sa.ForeignKey("units.id", ondelete="SET NULL"), nullable=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("priority", sa.String(), nullable=False, server_default="MEDIUM"),
        sa.Column("status", sa.String(), nullable=False, server_default="PENDING"),
        sa.Column("scheduled_date", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_maintenance_requests_id", "maintenance_requests", ["id"], unique=False)
    op.create_index("ix_maintenance_requests_property_id", "maintenance_requests", ["property_id"], unique=False)
    op.create_index("ix_maintenance_requests_unit_id", "maintenance_requests", ["unit_id"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("maintenance_requests")
    op.drop_table("payments")
    op.drop_table("bills")
    op.drop_table("tenant_units")
    op.drop_table("tenants")
    op.drop_table("units")
    op.drop_table("properties")
    op.drop_table("users")
