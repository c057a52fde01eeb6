"""002: create collectibles table

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
        CREATE TABLE collectibles (
            id                  VARCHAR(64)     PRIMARY KEY,
            owner               VARCHAR(128)    NOT NULL,
            source_asset_ref    VARCHAR(512)    NOT NULL,
            name                VARCHAR(200)    NOT NULL,
            description         TEXT            NOT NULL DEFAULT '',
            image_ref           VARCHAR(1024)   NOT NULL,
            chain               VARCHAR(10)     NOT NULL,
            token_ref           VARCHAR(256),
            metadata_url        VARCHAR(1024),
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_collectibles_chain CHECK (chain IN ('TON', 'STARS'))
        );
    """)
    op.execute("CREATE INDEX idx_collectibles_owner ON collectibles (owner, created_at DESC);")
    op.execute("""
        CREATE TRIGGER trg_collectibles_updated_at
            BEFORE UPDATE ON collectibles
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)
    op.execute("COMMENT ON TABLE collectibles IS 'Tokenized stickers; owner changes only through settlement';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS collectibles CASCADE;")
