"""004: create bids table

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
        CREATE TABLE bids (
            id                  VARCHAR(64)       PRIMARY KEY,
            listing_id          VARCHAR(64)       NOT NULL,
            bidder              VARCHAR(128)      NOT NULL,
            amount              DOUBLE PRECISION  NOT NULL,
            rail                VARCHAR(20)       NOT NULL,
            status              VARCHAR(10)       NOT NULL DEFAULT 'PENDING',
            correlation_token   VARCHAR(256),
            created_at          TIMESTAMPTZ       NOT NULL DEFAULT NOW(),
            funded_at           TIMESTAMPTZ,
            CONSTRAINT ck_bids_amount CHECK (amount > 0),
            CONSTRAINT ck_bids_rail   CHECK (rail IN ('ON_CHAIN', 'PUSH_INVOICE')),
            CONSTRAINT ck_bids_status CHECK (status IN ('PENDING', 'FUNDED')),
            CONSTRAINT ck_bids_funded CHECK (status <> 'FUNDED' OR funded_at IS NOT NULL)
        );
    """)
    op.execute("CREATE INDEX idx_bids_listing_status ON bids (listing_id, status, amount DESC);")
    op.execute("COMMENT ON TABLE bids IS 'Auction bids; PENDING until escrow is paid, then FUNDED for good';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS bids CASCADE;")
