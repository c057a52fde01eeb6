# src/sm_asset/domain/repository.py
"""CollectibleRepository Protocol — interface contract for persistence layer."""
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.sm_asset.domain.models import Collectible


class CollectibleRepositoryProtocol(Protocol):
    async def save(self, collectible: Collectible, db: AsyncSession) -> None: ...

    async def get_by_id(self, collectible_id: str, db: AsyncSession) -> Collectible | None: ...

    async def get_for_update(
        self, collectible_id: str, db: AsyncSession
    ) -> Collectible | None: ...

    async def update_owner(self, collectible_id: str, owner: str, db: AsyncSession) -> None: ...

    async def delete(self, collectible_id: str, db: AsyncSession) -> None: ...

    async def list_by_owner(self, owner: str, db: AsyncSession) -> list[Collectible]: ...
