"""002: create listings and listing_items tables

Revision ID: 002
Revises: 001
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE listings (
            listing_id          VARCHAR(32)     PRIMARY KEY,
            seller_id           VARCHAR(64)     NOT NULL,
            expires_at          TIMESTAMPTZ     NOT NULL,
            status              VARCHAR(20)     NOT NULL DEFAULT 'Pending',
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_listings_status CHECK (
                status IN ('Pending', 'Active', 'Sold', 'Expired', 'Cancelled', 'Rejected')
            )
        );
    """)
    op.execute("CREATE INDEX idx_listings_seller ON listings (seller_id, created_at DESC);")
    op.execute("""
        CREATE INDEX idx_listings_active_expiry
        ON listings (expires_at)
        WHERE status = 'Active';
    """)
    op.execute("""
        CREATE INDEX idx_listings_pending
        ON listings (listing_id)
        WHERE status = 'Pending';
    """)
    op.execute("""
        CREATE TRIGGER trg_listings_updated_at
            BEFORE UPDATE ON listings
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)

    op.execute("""
        CREATE TABLE listing_items (
            item_id             VARCHAR(32)     PRIMARY KEY,
            listing_id          VARCHAR(32)     NOT NULL
                                REFERENCES listings (listing_id) ON DELETE CASCADE,
            ticket_id           VARCHAR(64)     NOT NULL,
            price_cents         BIGINT          NOT NULL,
            face_value_cents    BIGINT          NOT NULL,
            status              VARCHAR(20)     NOT NULL DEFAULT 'Pending',
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_listing_items_ticket  UNIQUE (listing_id, ticket_id),
            CONSTRAINT ck_listing_items_price   CHECK (price_cents >= 0),
            CONSTRAINT ck_listing_items_face    CHECK (face_value_cents >= 0),
            CONSTRAINT ck_listing_items_status  CHECK (
                status IN ('Pending', 'Active', 'Sold', 'Expired', 'Cancelled')
            )
        );
    """)
    op.execute("CREATE INDEX idx_listing_items_listing ON listing_items (listing_id, status);")
    op.execute("""
        CREATE TRIGGER trg_listing_items_updated_at
            BEFORE UPDATE ON listing_items
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS listing_items;")
    op.execute("DROP TABLE IF EXISTS listings;")
