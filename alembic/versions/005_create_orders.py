"""005: create orders table

Revision ID: 005
Revises: 004
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE orders (
            id                  VARCHAR(64)       PRIMARY KEY,
            listing_id          VARCHAR(64)       NOT NULL,
            buyer               VARCHAR(128)      NOT NULL,
            kind                VARCHAR(20)       NOT NULL,
            rail                VARCHAR(20)       NOT NULL,
            amount              DOUBLE PRECISION  NOT NULL,
            listing_amount      DOUBLE PRECISION  NOT NULL,
            listing_currency    VARCHAR(10)       NOT NULL,
            rate                DOUBLE PRECISION  NOT NULL,
            config_version      INT               NOT NULL,
            correlation_token   VARCHAR(256)      NOT NULL,
            status              VARCHAR(20)       NOT NULL DEFAULT 'PENDING',
            linked_bid_id       VARCHAR(64),
            payment_uri         TEXT,
            destination         VARCHAR(128),
            tx_hash             VARCHAR(128),
            telegram_charge_id  VARCHAR(256),
            provider_charge_id  VARCHAR(256),
            created_at          TIMESTAMPTZ       NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ       NOT NULL DEFAULT NOW(),
            paid_at             TIMESTAMPTZ,
            CONSTRAINT uq_orders_correlation_token UNIQUE (correlation_token),
            CONSTRAINT ck_orders_kind     CHECK (kind IN ('BUY', 'BID_ESCROW')),
            CONSTRAINT ck_orders_rail     CHECK (rail IN ('ON_CHAIN', 'PUSH_INVOICE')),
            CONSTRAINT ck_orders_amount   CHECK (amount > 0),
            CONSTRAINT ck_orders_currency CHECK (listing_currency IN ('TON', 'STARS')),
            CONSTRAINT ck_orders_status   CHECK (
                status IN ('PENDING', 'PAID', 'FAILED', 'CANCELLED')
            ),
            CONSTRAINT ck_orders_escrow_bid CHECK (
                (kind = 'BID_ESCROW') = (linked_bid_id IS NOT NULL)
            ),
            CONSTRAINT ck_orders_paid_at CHECK (status <> 'PAID' OR paid_at IS NOT NULL)
        );
    """)
    op.execute("CREATE INDEX idx_orders_buyer ON orders (buyer, id DESC);")
    op.execute("""
        CREATE INDEX idx_orders_pending_created
        ON orders (created_at)
        WHERE status = 'PENDING';
    """)
    op.execute("""
        CREATE TRIGGER trg_orders_updated_at
            BEFORE UPDATE ON orders
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)
    op.execute("COMMENT ON TABLE orders IS 'Payment attempts; leave PENDING exactly once, immutable afterwards';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS orders CASCADE;")
