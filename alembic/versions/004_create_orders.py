"""004: create orders, order_items and payments tables

Revision ID: 004
Revises: 003
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE orders (
            order_id            VARCHAR(32)     PRIMARY KEY,
            buyer_id            VARCHAR(64)     NOT NULL,
            status              VARCHAR(20)     NOT NULL DEFAULT 'Pending',
            cancel_reason       VARCHAR(30),
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_orders_status CHECK (status IN ('Pending', 'Paid', 'Cancelled')),
            CONSTRAINT ck_orders_cancel_reason CHECK (
                cancel_reason IS NULL OR cancel_reason IN ('BUYER_CANCELLED', 'PAYMENT_TIMEOUT')
            ),
            CONSTRAINT ck_orders_cancel_consistency CHECK (
                (status = 'Cancelled') = (cancel_reason IS NOT NULL)
            )
        );
    """)
    op.execute("CREATE INDEX idx_orders_buyer ON orders (buyer_id, created_at DESC);")
    # Sweeper candidate scan
    op.execute("""
        CREATE INDEX idx_orders_pending_created
        ON orders (created_at, order_id)
        WHERE status = 'Pending';
    """)
    op.execute("""
        CREATE TRIGGER trg_orders_updated_at
            BEFORE UPDATE ON orders
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)

    op.execute("""
        CREATE TABLE order_items (
            order_id            VARCHAR(32)     NOT NULL
                                REFERENCES orders (order_id) ON DELETE CASCADE,
            item_id             VARCHAR(32)     NOT NULL REFERENCES listing_items (item_id),
            unit_price_cents    BIGINT          NOT NULL,
            PRIMARY KEY (order_id, item_id),
            CONSTRAINT ck_order_items_price CHECK (unit_price_cents >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_order_items_item ON order_items (item_id);")

    op.execute("""
        CREATE TABLE payments (
            payment_id          VARCHAR(32)     PRIMARY KEY,
            order_id            VARCHAR(32)     NOT NULL
                                REFERENCES orders (order_id) ON DELETE CASCADE,
            amount_cents        BIGINT          NOT NULL,
            status              VARCHAR(20)     NOT NULL DEFAULT 'Pending',
            paid_at             TIMESTAMPTZ,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_payments_order    UNIQUE (order_id),
            CONSTRAINT ck_payments_amount   CHECK (amount_cents >= 0),
            CONSTRAINT ck_payments_status   CHECK (status IN ('Pending', 'Completed', 'Failed')),
            CONSTRAINT ck_payments_paid_at  CHECK ((status = 'Completed') = (paid_at IS NOT NULL))
        );
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS payments;")
    op.execute("DROP TABLE IF EXISTS order_items;")
    op.execute("DROP TABLE IF EXISTS orders;")
