"""003: create listings table

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
        CREATE TABLE listings (
            id                  VARCHAR(64)       PRIMARY KEY,
            collectible_id      VARCHAR(64)       NOT NULL,
            seller              VARCHAR(128)      NOT NULL,
            currency            VARCHAR(10)       NOT NULL,
            kind                VARCHAR(10)       NOT NULL,
            active              BOOLEAN           NOT NULL DEFAULT TRUE,
            price               DOUBLE PRECISION,
            ends_at             TIMESTAMPTZ,
            min_bid             DOUBLE PRECISION,
            buy_now_price       DOUBLE PRECISION,
            increment_percent   DOUBLE PRECISION,
            highest_bid_amount  DOUBLE PRECISION,
            highest_bidder      VARCHAR(128),
            created_at          TIMESTAMPTZ       NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ       NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_listings_currency CHECK (currency IN ('TON', 'STARS')),
            CONSTRAINT ck_listings_kind     CHECK (kind IN ('FIXED', 'AUCTION')),
            CONSTRAINT ck_listings_fixed    CHECK (kind <> 'FIXED' OR price > 0),
            CONSTRAINT ck_listings_auction  CHECK (
                kind <> 'AUCTION' OR (
                    ends_at IS NOT NULL
                    AND min_bid > 0
                    AND increment_percent >= 0
                    AND (buy_now_price IS NULL OR buy_now_price > min_bid)
                )
            )
        );
    """)
    op.execute("""
        CREATE UNIQUE INDEX uq_listings_active_collectible
        ON listings (collectible_id)
        WHERE active;
    """)
    op.execute("""
        CREATE INDEX idx_listings_active_currency
        ON listings (currency, created_at DESC)
        WHERE active;
    """)
    op.execute("""
        CREATE TRIGGER trg_listings_updated_at
            BEFORE UPDATE ON listings
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)
    op.execute("COMMENT ON TABLE listings IS 'Fixed-price and auction offers; at most one active per collectible';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS listings CASCADE;")
