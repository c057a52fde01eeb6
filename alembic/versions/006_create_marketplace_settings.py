"""006: create marketplace_settings table

Revision ID: 006
Revises: 005
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE marketplace_settings (
            version                 INT               PRIMARY KEY,
            ton_to_stars_rate       DOUBLE PRECISION  NOT NULL,
            ton_destination_wallet  VARCHAR(128)      NOT NULL DEFAULT '',
            telegram_bot_token      VARCHAR(256)      NOT NULL DEFAULT '',
            app_base_url            VARCHAR(1024),
            created_by              VARCHAR(128),
            created_at              TIMESTAMPTZ       NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_settings_rate CHECK (ton_to_stars_rate > 0)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_settings_append_only
            BEFORE UPDATE OR DELETE ON marketplace_settings
            FOR EACH ROW EXECUTE FUNCTION fn_reject_mutation();
    """)
    op.execute("COMMENT ON TABLE marketplace_settings IS 'Versioned runtime settings — Append-Only, highest version is current';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS marketplace_settings CASCADE;")
