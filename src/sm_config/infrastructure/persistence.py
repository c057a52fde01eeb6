"""MarketplaceConfigRepository — raw SQL persistence implementation."""
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sm_config.domain.models import MarketplaceConfig

_COLUMNS = """
    version, ton_to_stars_rate, ton_destination_wallet, telegram_bot_token,
    app_base_url, created_by, created_at
"""

_GET_LATEST_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM marketplace_settings
    ORDER BY version DESC
    LIMIT 1
""")

# version is assigned here so concurrent publishers collide on the PK
# instead of silently sharing a version number.
_INSERT_SQL = text(f"""
    INSERT INTO marketplace_settings
        (version, ton_to_stars_rate, ton_destination_wallet, telegram_bot_token,
         app_base_url, created_by)
    VALUES (
        (SELECT COALESCE(MAX(version), 0) + 1 FROM marketplace_settings),
        :ton_to_stars_rate, :ton_destination_wallet, :telegram_bot_token,
        :app_base_url, :created_by
    )
    RETURNING {_COLUMNS}
""")


def _row_to_config(row: Any) -> MarketplaceConfig:
    return MarketplaceConfig(
        version=row.version,
        ton_to_stars_rate=float(row.ton_to_stars_rate),
        ton_destination_wallet=row.ton_destination_wallet,
        telegram_bot_token=row.telegram_bot_token,
        app_base_url=row.app_base_url,
        created_by=row.created_by,
        created_at=row.created_at,
    )


class MarketplaceConfigRepository:
    """Concrete implementation of MarketplaceConfigRepositoryProtocol using raw SQL."""

    async def get_latest(self, db: AsyncSession) -> MarketplaceConfig | None:
        result = await db.execute(_GET_LATEST_SQL)
        row = result.fetchone()
        return _row_to_config(row) if row else None

    async def insert(self, config: MarketplaceConfig, db: AsyncSession) -> MarketplaceConfig:
        result = await db.execute(
            _INSERT_SQL,
            {
                "ton_to_stars_rate": config.ton_to_stars_rate,
                "ton_destination_wallet": config.ton_destination_wallet,
                "telegram_bot_token": config.telegram_bot_token,
                "app_base_url": config.app_base_url,
                "created_by": config.created_by,
            },
        )
        return _row_to_config(result.fetchone())
