"""ListingStore — create and deactivate fixed-price and auction listings."""

import logging
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from src.sm_asset.application.schemas import CollectibleResponse
from src.sm_asset.domain.repository import CollectibleRepositoryProtocol
from src.sm_asset.infrastructure.persistence import CollectibleRepository
from src.sm_common.datetime_utils import Clock, utc_now
from src.sm_common.enums import ListingKind
from src.sm_common.errors import (
    CollectibleNotFoundError,
    ListingAlreadyActiveError,
    ListingNotFoundError,
    NotOwnerError,
    ValidationError,
)
from src.sm_common.id_generator import generate_id
from src.sm_common.locks import KeyedLocks, get_listing_locks
from src.sm_listing.application.schemas import (
    CreateAuctionListingRequest,
    CreateFixedListingRequest,
    ListingResponse,
    MarketplaceItem,
    MarketplaceResponse,
)
from src.sm_listing.domain.models import (
    AUCTION_DURATION_HOURS,
    AUCTION_INCREMENT_PERCENT,
    Listing,
)
from src.sm_listing.domain.repository import ListingRepositoryProtocol
from src.sm_listing.infrastructure.persistence import ListingRepository

logger = logging.getLogger(__name__)


class ListingService:
    def __init__(
        self,
        repo: ListingRepositoryProtocol | None = None,
        collectibles: CollectibleRepositoryProtocol | None = None,
        locks: KeyedLocks | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._repo: ListingRepositoryProtocol = repo or ListingRepository()
        self._collectibles: CollectibleRepositoryProtocol = (
            collectibles or CollectibleRepository()
        )
        self._locks = locks or get_listing_locks()
        self._clock = clock

    async def create_fixed_listing(
        self, db: AsyncSession, seller: str, req: CreateFixedListingRequest
    ) -> ListingResponse:
        listing = Listing(
            id=generate_id("lst"),
            collectible_id=req.collectible_id,
            seller=seller,
            currency=req.currency,
            kind=ListingKind.FIXED.value,
            price=req.price,
            created_at=self._clock(),
        )
        return await self._create(db, listing)

    async def create_auction_listing(
        self, db: AsyncSession, seller: str, req: CreateAuctionListingRequest
    ) -> ListingResponse:
        now = self._clock()
        listing = Listing(
            id=generate_id("lst"),
            collectible_id=req.collectible_id,
            seller=seller,
            currency=req.currency,
            kind=ListingKind.AUCTION.value,
            ends_at=now + timedelta(hours=AUCTION_DURATION_HOURS),
            min_bid=req.min_bid,
            buy_now_price=req.buy_now_price,
            increment_percent=AUCTION_INCREMENT_PERCENT,
            created_at=now,
        )
        return await self._create(db, listing)

    async def deactivate(
        self, db: AsyncSession, listing_id: str, requester: str
    ) -> ListingResponse:
        """Cancel a listing. Allowed to the seller or the collectible's current owner.

        A payment already in flight for this listing still settles afterwards.
        """
        async with self._locks.for_key(listing_id):
            try:
                listing = await self._repo.get_for_update(listing_id, db)
                if listing is None:
                    raise ListingNotFoundError(listing_id)
                collectible = await self._collectibles.get_by_id(listing.collectible_id, db)
                owner = collectible.owner if collectible else None
                if requester not in (listing.seller, owner):
                    raise NotOwnerError(requester)
                if listing.active:
                    await self._repo.set_active(listing_id, False, db)
                    listing.active = False
                await db.commit()
            except Exception:
                await db.rollback()
                raise
        logger.info("Listing %s deactivated by %s", listing_id, requester)
        return ListingResponse.from_domain(listing)

    async def get_listing(self, db: AsyncSession, listing_id: str) -> ListingResponse:
        listing = await self._repo.get_by_id(listing_id, db)
        if listing is None:
            raise ListingNotFoundError(listing_id)
        return ListingResponse.from_domain(listing)

    async def list_active(self, db: AsyncSession, currency: str | None) -> MarketplaceResponse:
        items: list[MarketplaceItem] = []
        for listing in await self._repo.list_active(currency, db):
            collectible = await self._collectibles.get_by_id(listing.collectible_id, db)
            if collectible is None:
                logger.warning(
                    "Active listing %s points at missing collectible %s",
                    listing.id,
                    listing.collectible_id,
                )
                continue
            items.append(
                MarketplaceItem(
                    listing=ListingResponse.from_domain(listing),
                    collectible=CollectibleResponse.from_domain(collectible),
                )
            )
        return MarketplaceResponse(items=items)

    async def _create(self, db: AsyncSession, listing: Listing) -> ListingResponse:
        if listing.kind == ListingKind.FIXED.value and not (listing.price and listing.price > 0):
            raise ValidationError("price must be positive")
        try:
            collectible = await self._collectibles.get_for_update(listing.collectible_id, db)
            if collectible is None:
                raise CollectibleNotFoundError(listing.collectible_id)
            if collectible.owner != listing.seller:
                raise NotOwnerError(listing.seller)
            if await self._repo.get_active_by_collectible(listing.collectible_id, db):
                raise ListingAlreadyActiveError(listing.collectible_id)
            await self._repo.save(listing, db)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(
            "%s listing %s created for collectible %s by %s",
            listing.kind,
            listing.id,
            listing.collectible_id,
            listing.seller,
        )
        return ListingResponse.from_domain(listing)
