"""MarketplaceConfigService — read and publish versioned settings snapshots."""

import logging
from typing import TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from src.sm_common.errors import PaymentConfigMissingError
from src.sm_config.application.schemas import (
    PublicSettingsResponse,
    PublishSettingsRequest,
    SettingsResponse,
)
from src.sm_config.domain.models import DEFAULT_TON_TO_STARS_RATE, MarketplaceConfig
from src.sm_config.domain.repository import MarketplaceConfigRepositoryProtocol
from src.sm_config.infrastructure.persistence import MarketplaceConfigRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")


class MarketplaceConfigService:
    def __init__(self, repo: MarketplaceConfigRepositoryProtocol | None = None) -> None:
        self._repo: MarketplaceConfigRepositoryProtocol = repo or MarketplaceConfigRepository()

    async def current(self, db: AsyncSession) -> MarketplaceConfig:
        """Latest snapshot; raises PaymentConfigMissingError when none was published."""
        config = await self._repo.get_latest(db)
        if config is None:
            raise PaymentConfigMissingError("no marketplace settings published")
        return config

    async def public_settings(self, db: AsyncSession) -> PublicSettingsResponse:
        config = await self._repo.get_latest(db)
        if config is None:
            return PublicSettingsResponse(
                ton_to_stars_rate=DEFAULT_TON_TO_STARS_RATE, version=None
            )
        return PublicSettingsResponse(
            ton_to_stars_rate=config.ton_to_stars_rate, version=config.version
        )

    async def get_settings(self, db: AsyncSession) -> SettingsResponse:
        return SettingsResponse.from_domain(await self.current(db))

    async def publish(
        self, db: AsyncSession, req: PublishSettingsRequest, admin: str
    ) -> SettingsResponse:
        """Append a new snapshot built from the current one plus the given overrides."""
        try:
            previous = await self._repo.get_latest(db)
            draft = MarketplaceConfig(
                version=0,
                ton_to_stars_rate=_pick(
                    req.ton_to_stars_rate,
                    previous.ton_to_stars_rate if previous else DEFAULT_TON_TO_STARS_RATE,
                ),
                ton_destination_wallet=_pick(
                    req.ton_destination_wallet,
                    previous.ton_destination_wallet if previous else "",
                ),
                telegram_bot_token=_pick(
                    req.telegram_bot_token,
                    previous.telegram_bot_token if previous else "",
                ),
                app_base_url=_pick(req.app_base_url, previous.app_base_url if previous else None),
                created_by=admin,
            )
            saved = await self._repo.insert(draft, db)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Marketplace settings v%d published by %s", saved.version, admin)
        return SettingsResponse.from_domain(saved)


def _pick(override: T | None, fallback: T) -> T:
    return fallback if override is None else override
