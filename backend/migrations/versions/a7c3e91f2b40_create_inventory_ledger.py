"""create_inventory_ledger

Revision ID: a7c3e91f2b40
Revises:
Create Date: 2025-10-24 20:04:23.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "a7c3e91f2b40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


SIGNED_QUANTITY = """
    CASE
      WHEN transaction_type IN ('intake', 'adjustment') THEN quantity
      WHEN transaction_type IN ('supply', 'waste') THEN -quantity
      ELSE 0
    END
"""


def upgrade() -> None:
    # ── Suppliers ──────────────────────────────────────────────────────────
    op.create_table(
        "suppliers",
        sa.Column("id", sa.Uuid(), nullable=False, server_default=sa.text("gen_random_uuid()")),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("business_name", sa.String(255), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_suppliers_name", "suppliers", ["name"])

    # ── Pickup logs (milk intake from farmers) ─────────────────────────────
    op.create_table(
        "pickup_logs",
        sa.Column("id", sa.Uuid(), nullable=False, server_default=sa.text("gen_random_uuid()")),
        sa.Column("supplier_id", sa.Uuid(), nullable=False),
        sa.Column("farmer_id", sa.Uuid(), nullable=True),
        sa.Column("quantity", sa.Numeric(20, 4), nullable=False),
        sa.Column("unit", sa.String(20), nullable=False, server_default="liters"),
        sa.Column("pickup_date", sa.Date(), nullable=False, server_default=sa.text("CURRENT_DATE")),
        sa.Column("pickup_time", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["supplier_id"], ["suppliers.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("quantity >= 0", name="ck_pickup_quantity_non_negative"),
    )
    op.create_index("ix_pickup_logs_supplier", "pickup_logs", ["supplier_id"])
    op.create_index("ix_pickup_logs_farmer", "pickup_logs", ["farmer_id"])
    op.create_index("ix_pickup_logs_date", "pickup_logs", ["pickup_date"])

    # ── Deliveries (milk supplied to customers) ────────────────────────────
    op.create_table(
        "deliveries",
        sa.Column("id", sa.Uuid(), nullable=False, server_default=sa.text("gen_random_uuid()")),
        sa.Column("supplier_id", sa.Uuid(), nullable=False),
        sa.Column("customer_id", sa.Uuid(), nullable=True),
        sa.Column("delivery_partner_id", sa.Uuid(), nullable=True),
        sa.Column("quantity", sa.Numeric(20, 4), nullable=False),
        sa.Column("unit", sa.String(20), nullable=False, server_default="liters"),
        sa.Column("delivery_date", sa.Date(), nullable=False, server_default=sa.text("CURRENT_DATE")),
        sa.Column(
            "status",
            sa.Enum("pending", "in_transit", "completed", "cancelled", name="delivery_status"),
            nullable=False,
            server_default="pending",
        ),
        sa.Column("completed_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["supplier_id"], ["suppliers.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("quantity >= 0", name="ck_delivery_quantity_non_negative"),
    )
    op.create_index("ix_deliveries_supplier", "deliveries", ["supplier_id"])
    op.create_index("ix_deliveries_customer", "deliveries", ["customer_id"])
    op.create_index("ix_deliveries_partner", "deliveries", ["delivery_partner_id"])
    op.create_index("ix_deliveries_date", "deliveries", ["delivery_date"])
    op.create_index("ix_deliveries_status", "deliveries", ["status"])

    # ── Inventory ledger ───────────────────────────────────────────────────
    op.create_table(
        "inventory",
        sa.Column("id", sa.Uuid(), nullable=False, server_default=sa.text("gen_random_uuid()")),
        sa.Column("supplier_id", sa.Uuid(), nullable=False),
        sa.Column(
            "transaction_type",
            sa.Enum("intake", "supply", "adjustment", "waste", name="inventory_transaction_type"),
            nullable=False,
        ),
        sa.Column("reference_id", sa.Uuid(), nullable=True),
        sa.Column(
            "reference_type",
            sa.Enum("pickup_log", "delivery", "manual", name="inventory_reference_type"),
            nullable=True,
        ),
        sa.Column("quantity", sa.Numeric(20, 4), nullable=False),
        sa.Column("unit", sa.String(20), nullable=False, server_default="liters"),
        sa.Column("transaction_date", sa.Date(), nullable=False, server_default=sa.text("CURRENT_DATE")),
        sa.Column("transaction_time", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["supplier_id"], ["suppliers.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("quantity >= 0", name="ck_inventory_quantity_non_negative"),
        sa.CheckConstraint(
            "reference_type IS NULL"
            " OR (reference_type = 'pickup_log' AND transaction_type = 'intake')"
            " OR (reference_type = 'delivery' AND transaction_type = 'supply')"
            " OR reference_type = 'manual'",
            name="ck_inventory_reference_pairing",
        ),
    )
    op.create_index("ix_inventory_supplier", "inventory", ["supplier_id"])
    op.create_index("ix_inventory_date", "inventory", ["transaction_date"])
    op.create_index("ix_inventory_type", "inventory", ["transaction_type"])
    op.create_index("ix_inventory_reference", "inventory", ["reference_type", "reference_id"])
    op.execute(
        "COMMENT ON TABLE inventory IS "
        "'Append-only milk movements: intake from farmers, supply to customers, "
        "manual adjustments and waste'"
    )

    # ── Audit log ──────────────────────────────────────────────────────────
    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Uuid(), nullable=False, server_default=sa.text("gen_random_uuid()")),
        sa.Column("table_name", sa.String(100), nullable=False),
        sa.Column("record_id", sa.String(255), nullable=False),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("changed_by", sa.String(255), nullable=True),
        sa.Column("new_values", postgresql.JSONB(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_table_record", "audit_logs", ["table_name", "record_id"])
    op.create_index("ix_audit_created_at", "audit_logs", ["created_at"])
    op.create_index("ix_audit_action", "audit_logs", ["action"])

    # ── Reporting views (same aggregation the service runs) ────────────────
    op.execute(
        f"""
        CREATE OR REPLACE VIEW inventory_summary AS
        SELECT
          supplier_id,
          SUM(CASE WHEN transaction_type = 'intake' THEN quantity ELSE 0 END) AS total_intake,
          SUM(CASE WHEN transaction_type = 'supply' THEN quantity ELSE 0 END) AS total_supply,
          SUM(CASE WHEN transaction_type = 'adjustment' THEN quantity ELSE 0 END) AS total_adjustments,
          SUM(CASE WHEN transaction_type = 'waste' THEN quantity ELSE 0 END) AS total_waste,
          SUM({SIGNED_QUANTITY}) AS current_stock
        FROM inventory
        GROUP BY supplier_id
        """
    )
    op.execute(
        f"""
        CREATE OR REPLACE VIEW daily_inventory AS
        SELECT
          supplier_id,
          transaction_date,
          SUM(CASE WHEN transaction_type = 'intake' THEN quantity ELSE 0 END) AS daily_intake,
          SUM(CASE WHEN transaction_type = 'supply' THEN quantity ELSE 0 END) AS daily_supply,
          SUM({SIGNED_QUANTITY}) AS net_change
        FROM inventory
        GROUP BY supplier_id, transaction_date
        """
    )


def downgrade() -> None:
    op.execute("DROP VIEW IF EXISTS daily_inventory")
    op.execute("DROP VIEW IF EXISTS inventory_summary")

    op.drop_index("ix_audit_action", table_name="audit_logs")
    op.drop_index("ix_audit_created_at", table_name="audit_logs")
    op.drop_index("ix_audit_table_record", table_name="audit_logs")
    op.drop_table("audit_logs")

    op.drop_index("ix_inventory_reference", table_name="inventory")
    op.drop_index("ix_inventory_type", table_name="inventory")
    op.drop_index("ix_inventory_date", table_name="inventory")
    op.drop_index("ix_inventory_supplier", table_name="inventory")
    op.drop_table("inventory")

    op.drop_index("ix_deliveries_status", table_name="deliveries")
    op.drop_index("ix_deliveries_date", table_name="deliveries")
    op.drop_index("ix_deliveries_partner", table_name="deliveries")
    op.drop_index("ix_deliveries_customer", table_name="deliveries")
    op.drop_index("ix_deliveries_supplier", table_name="deliveries")
    op.drop_table("deliveries")

    op.drop_index("ix_pickup_logs_date", table_name="pickup_logs")
    op.drop_index("ix_pickup_logs_farmer", table_name="pickup_logs")
    op.drop_index("ix_pickup_logs_supplier", table_name="pickup_logs")
    op.drop_table("pickup_logs")

    op.drop_index("ix_suppliers_name", table_name="suppliers")
    op.drop_table("suppliers")

    op.execute("DROP TYPE IF EXISTS inventory_reference_type")
    op.execute("DROP TYPE IF EXISTS inventory_transaction_type")
    op.execute("DROP TYPE IF EXISTS delivery_status")
