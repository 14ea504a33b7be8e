"""Initial database schema - product types, products, inventory transactions, sales, orders, pre-orders

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

TRANSACTION_TYPES = ("restock", "adjustment", "sale", "pre_order_deduction")
PAYMENT_METHODS = ("cash", "card", "mobile", "other")
ORDER_STATUSES = ("pending", "paid", "ready_for_pickup", "completed", "cancelled")
PRE_ORDER_STATUSES = ("pending", "approved", "ready_for_pickup", "completed", "cancelled")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


# Decrements stock and inserts sale + audit rows for every line in one
# statement; raises (rolling everything back) when any line is short.
PROCESS_BULK_SALES = """
CREATE OR REPLACE FUNCTION process_bulk_sales(p_sales jsonb, p_payment_method text)
RETURNS jsonb
LANGUAGE plpgsql
AS $$
DECLARE
    item jsonb;
    v_qty integer;
    v_price numeric(12, 2);
    v_product products%ROWTYPE;
    v_sale sales%ROWTYPE;
    v_result jsonb := '[]'::jsonb;
BEGIN
    FOR item IN SELECT * FROM jsonb_array_elements(p_sales) LOOP
        v_qty := (item->>'qty')::integer;
        v_price := (item->>'unit_price')::numeric;

        UPDATE products
           SET stock = stock - v_qty, updated_at = now()
         WHERE id = (item->>'product_id')::uuid
           AND NOT is_deleted
           AND stock >= v_qty
        RETURNING * INTO v_product;

        IF NOT FOUND THEN
            RAISE EXCEPTION 'Insufficient stock for product %', item->>'product_id';
        END IF;

        INSERT INTO sales (id, product_id, qty, unit_price, subtotal, payment_method, sale_date)
        VALUES (gen_random_uuid(), v_product.id, v_qty, v_price, v_qty * v_price,
                p_payment_method::payment_method, now())
        RETURNING * INTO v_sale;

        INSERT INTO inventory_transactions
            (id, product_id, transaction_type, quantity_change, reference_id, reference_type, notes)
        VALUES (gen_random_uuid(), v_product.id, 'sale', -v_qty, v_sale.id::text, 'sale',
                'Sale: -' || v_qty || ' units');

        v_result := v_result || jsonb_build_array(jsonb_build_object(
            'id', v_sale.id,
            'product_id', v_sale.product_id,
            'qty', v_sale.qty,
            'unit_price', v_sale.unit_price,
            'subtotal', v_sale.subtotal,
            'payment_method', v_sale.payment_method,
            'sale_date', v_sale.sale_date,
            'product_name', v_product.name
        ));
    END LOOP;
    RETURN v_result;
END;
$$;
"""


def upgrade() -> None:
    # --- Product types ---
    op.create_table(
        "product_types",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        *_timestamps(),
    )
    op.create_index("ix_product_types_name", "product_types", ["name"])

    # --- Products ---
    op.create_table(
        "products",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text),
        sa.Column("cost", sa.Numeric(12, 2), nullable=False),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("stock", sa.Integer, nullable=False, server_default="0"),
        sa.Column("is_deleted", sa.Boolean, nullable=False, server_default=sa.text("false")),
        sa.Column("deleted_at", sa.DateTime(timezone=True)),
        sa.Column("type_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("product_types.id", ondelete="SET NULL")),
        *_timestamps(),
        sa.CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
        sa.CheckConstraint("cost >= 0", name="ck_products_cost_non_negative"),
        sa.CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
    )
    op.create_index("ix_products_name", "products", ["name"])
    op.create_index("ix_products_is_deleted", "products", ["is_deleted"])

    # --- Inventory transactions ---
    op.create_table(
        "inventory_transactions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("product_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("products.id"), nullable=False),
        sa.Column("transaction_type", sa.Enum(*TRANSACTION_TYPES, name="transaction_type"), nullable=False),
        sa.Column("quantity_change", sa.Integer, nullable=False),
        sa.Column("reference_id", sa.String(100)),
        sa.Column("reference_type", sa.String(50)),
        sa.Column("notes", sa.Text),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index(
        "ix_inventory_transactions_product_created", "inventory_transactions", ["product_id", "created_at"]
    )

    # --- Sales ---
    op.create_table(
        "sales",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("product_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("products.id"), nullable=False),
        sa.Column("qty", sa.Integer, nullable=False),
        sa.Column("unit_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("subtotal", sa.Numeric(12, 2), nullable=False),
        sa.Column("payment_method", sa.Enum(*PAYMENT_METHODS, name="payment_method"), nullable=False),
        sa.Column("sale_date", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("qty > 0", name="ck_sales_qty_positive"),
        sa.CheckConstraint("unit_price >= 0", name="ck_sales_unit_price_non_negative"),
    )
    op.create_index("ix_sales_product_id", "sales", ["product_id"])
    op.create_index("ix_sales_sale_date", "sales", ["sale_date"])

    # --- Orders ---
    op.create_table(
        "orders",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True)),
        sa.Column("status", sa.Enum(*ORDER_STATUSES, name="order_status"), nullable=False, server_default="pending"),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="USD"),
        sa.Column("paid_at", sa.DateTime(timezone=True)),
        *_timestamps(),
    )
    op.create_index("ix_orders_user_id", "orders", ["user_id"])
    op.create_index("ix_orders_status", "orders", ["status"])

    op.create_table(
        "order_items",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("order_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False),
        sa.Column("product_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("products.id"), nullable=False),
        sa.Column("qty", sa.Integer, nullable=False),
        sa.Column("unit_price", sa.Numeric(12, 2), nullable=False),
    )
    op.create_index("ix_order_items_order_id", "order_items", ["order_id"])

    # --- Pre-orders ---
    op.create_table(
        "pre_orders",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True)),
        sa.Column(
            "status", sa.Enum(*PRE_ORDER_STATUSES, name="pre_order_status"), nullable=False, server_default="pending"
        ),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="USD"),
        sa.Column("pickup_time", sa.DateTime(timezone=True)),
        sa.Column("paid_at", sa.DateTime(timezone=True)),
        *_timestamps(),
    )
    op.create_index("ix_pre_orders_user_id", "pre_orders", ["user_id"])
    op.create_index("ix_pre_orders_status", "pre_orders", ["status"])

    op.create_table(
        "pre_order_items",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "pre_order_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("pre_orders.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("product_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("products.id"), nullable=False),
        sa.Column("qty", sa.Integer, nullable=False),
        sa.Column("unit_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("subtotal", sa.Numeric(12, 2), nullable=False),
    )
    op.create_index("ix_pre_order_items_pre_order_id", "pre_order_items", ["pre_order_id"])

    # --- Bulk sale fast path ---
    op.execute(PROCESS_BULK_SALES)


def downgrade() -> None:
    op.execute("DROP FUNCTION IF EXISTS process_bulk_sales(jsonb, text)")
    op.drop_table("pre_order_items")
    op.drop_table("pre_orders")
    op.drop_table("order_items")
    op.drop_table("orders")
    op.drop_table("sales")
    op.drop_table("inventory_transactions")
    op.drop_table("products")
    op.drop_table("product_types")
    for enum_name in ("pre_order_status", "order_status", "payment_method", "transaction_type"):
        op.execute(f"DROP TYPE IF EXISTS {enum_name}")
