# src/sm_listing/domain/repository.py
"""Repository Protocol — dependency inversion for testability.

Unit tests inject an in-memory fake that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.sm_listing.domain.models import Listing


class ListingRepositoryProtocol(Protocol):
    async def save(self, listing: Listing, db: AsyncSession) -> None: ...

    async def get_by_id(self, listing_id: str, db: AsyncSession) -> Listing | None: ...

    async def get_for_update(self, listing_id: str, db: AsyncSession) -> Listing | None: ...

    async def get_active_by_collectible(
        self, collectible_id: str, db: AsyncSession
    ) -> Listing | None: ...

    async def set_active(self, listing_id: str, active: bool, db: AsyncSession) -> None: ...

    async def update_highest_bid(
        self, listing_id: str, amount: float, bidder: str, db: AsyncSession
    ) -> None: ...

    async def list_active(self, currency: str | None, db: AsyncSession) -> list[Listing]: ...
