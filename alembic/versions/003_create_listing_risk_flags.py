"""003: create listing_risk_flags table

Revision ID: 003
Revises: 002
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE listing_risk_flags (
            flag_id             VARCHAR(32)     PRIMARY KEY,
            listing_id          VARCHAR(32)     NOT NULL
                                REFERENCES listings (listing_id) ON DELETE CASCADE,
            flag_type           VARCHAR(30)     NOT NULL,
            reason              TEXT            NOT NULL,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_listing_risk_flags_type UNIQUE (listing_id, flag_type),
            CONSTRAINT ck_listing_risk_flags_type CHECK (
                flag_type IN (
                    'HighPrice', 'LowPrice', 'NewSeller', 'HighQuantity', 'BlacklistedSeller'
                )
            )
        );
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS listing_risk_flags;")
