"""007: create settlement_events table

Revision ID: 007
Revises: 006
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE settlement_events (
            id              BIGSERIAL       PRIMARY KEY,
            event_type      VARCHAR(30)     NOT NULL,
            listing_id      VARCHAR(64)     NOT NULL,
            order_id        VARCHAR(64),
            payload         JSONB           NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_settlement_event_type CHECK (
                event_type IN (
                    'ORDER_PAID',
                    'ORDER_CANCELLED',
                    'ORDER_FAILED',
                    'BID_FUNDED',
                    'BID_PROMOTED',
                    'OWNERSHIP_TRANSFERRED',
                    'LISTING_CLOSED',
                    'AUCTION_SETTLED'
                )
            )
        );
    """)
    op.execute("CREATE INDEX idx_settlement_listing_time ON settlement_events (listing_id, created_at);")
    op.execute("CREATE INDEX idx_settlement_order ON settlement_events (order_id) WHERE order_id IS NOT NULL;")
    op.execute("""
        CREATE TRIGGER trg_settlement_events_append_only
            BEFORE UPDATE OR DELETE ON settlement_events
            FOR EACH ROW EXECUTE FUNCTION fn_reject_mutation();
    """)
    op.execute("COMMENT ON TABLE settlement_events IS 'Settlement audit log — Append-Only, written in the same transaction as the effect';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS settlement_events CASCADE;")
