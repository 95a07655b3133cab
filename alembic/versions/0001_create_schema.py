from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


revision = "0001_create_schema"
down_revision = None
branch_labels = None
depends_on = None

ORDER_STATUS = sa.Enum("pending", "in_progress", "completed", name="order_status")
PAYMENT_METHOD = sa.Enum("delivery", "advance", "full", name="payment_method")


def _has_index(inspector, table_name: str, index_name: str) -> bool:
    return any(idx["name"] == index_name for idx in inspector.get_indexes(table_name))


def upgrade() -> None:
    bind = op.get_bind()
    inspector = inspect(bind)

    if "customers" not in inspector.get_table_names():
        op.create_table(
            "customers",
            sa.Column("id", sa.String(length=36), primary_key=True),
            sa.Column("name", sa.String(length=120), nullable=False),
            sa.Column("phone", sa.String(length=30), nullable=False),
            sa.Column("email", sa.String(length=200), nullable=True),
            sa.Column("address", sa.Text(), nullable=True),
            sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        )
        op.create_index("ix_customers_phone", "customers", ["phone"], unique=False)

    inspector = inspect(bind)
    if "orders" not in inspector.get_table_names():
        op.create_table(
            "orders",
            sa.Column("id", sa.String(length=36), primary_key=True),
            sa.Column("customer_id", sa.String(length=36), sa.ForeignKey("customers.id"), nullable=False),
            sa.Column("product", sa.Text(), nullable=False),
            sa.Column("theme", sa.Text(), nullable=True),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("price", sa.Numeric(10, 2), nullable=False),
            sa.Column("status", ORDER_STATUS, nullable=False, server_default="pending"),
            sa.Column("payment_method", PAYMENT_METHOD, nullable=False),
            sa.Column("advance_amount", sa.Numeric(10, 2), nullable=False, server_default="0"),
            sa.Column("paid_amount", sa.Numeric(10, 2), nullable=False, server_default="0"),
            sa.Column("delivery_date", sa.DateTime(), nullable=True),
            sa.Column("delivery_address", sa.Text(), nullable=True),
            sa.Column("product_image", sa.Text(), nullable=True),
            sa.Column("notes", sa.Text(), nullable=True),
            sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
            sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        )
        op.create_index("ix_orders_customer_id", "orders", ["customer_id"], unique=False)
        op.create_index("ix_orders_status", "orders", ["status"], unique=False)
        op.create_index("ix_orders_created_at", "orders", ["created_at"], unique=False)


def downgrade() -> None:
    bind = op.get_bind()
    inspector = inspect(bind)

    if "orders" in inspector.get_table_names():
        for index_name in ["ix_orders_created_at", "ix_orders_status", "ix_orders_customer_id"]:
            if _has_index(inspector, "orders", index_name):
                op.drop_index(index_name, table_name="orders")
        op.drop_table("orders")

    inspector = inspect(bind)
    if "customers" in inspector.get_table_names():
        if _has_index(inspector, "customers", "ix_customers_phone"):
            op.drop_index("ix_customers_phone", table_name="customers")
        op.drop_table("customers")

    ORDER_STATUS.drop(bind, checkfirst=True)
    PAYMENT_METHOD.drop(bind, checkfirst=True)
