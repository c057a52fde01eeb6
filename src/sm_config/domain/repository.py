"""MarketplaceConfigRepository Protocol — interface contract for persistence layer."""
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.sm_config.domain.models import MarketplaceConfig


class MarketplaceConfigRepositoryProtocol(Protocol):
    async def get_latest(self, db: AsyncSession) -> MarketplaceConfig | None: ...

    async def insert(self, config: MarketplaceConfig, db: AsyncSession) -> MarketplaceConfig: ...
