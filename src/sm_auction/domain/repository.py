# src/sm_auction/domain/repository.py
"""BidRepository Protocol — interface contract for persistence layer."""
from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.sm_auction.domain.models import Bid


class BidRepositoryProtocol(Protocol):
    async def save(self, bid: Bid, db: AsyncSession) -> None: ...

    async def get_by_id(self, bid_id: str, db: AsyncSession) -> Bid | None: ...

    async def get_for_update(self, bid_id: str, db: AsyncSession) -> Bid | None: ...

    async def mark_funded(
        self, bid_id: str, correlation_token: str, funded_at: datetime, db: AsyncSession
    ) -> None: ...

    async def list_by_listing(
        self, listing_id: str, status: str | None, db: AsyncSession
    ) -> list[Bid]: ...
