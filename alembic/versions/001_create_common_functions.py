"""001: create common functions and seller context tables

Revision ID: 001
Revises: 
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_update_timestamp()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)
    # Owned by the user service; this service only reads them.
    op.execute("""
        CREATE TABLE sellers (
            seller_id           VARCHAR(64)     PRIMARY KEY,
            verification_tier   SMALLINT        NOT NULL DEFAULT 0,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_sellers_tier CHECK (verification_tier >= 0)
        );
    """)
    op.execute("""
        CREATE TABLE seller_blacklist (
            seller_id           VARCHAR(64)     PRIMARY KEY,
            reason              TEXT,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW()
        );
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS seller_blacklist;")
    op.execute("DROP TABLE IF EXISTS sellers;")
    op.execute("DROP FUNCTION IF EXISTS fn_update_timestamp();")
