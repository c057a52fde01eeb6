"""AuctionEngine — bid admission and buy-now, serialized per listing."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.sm_auction.domain.models import Bid
from src.sm_auction.domain.repository import BidRepositoryProtocol
from src.sm_auction.domain.rules import check_auction_open, check_bid_amount
from src.sm_auction.infrastructure.persistence import BidRepository
from src.sm_common.datetime_utils import Clock, utc_now
from src.sm_common.enums import BidStatus, PaymentRail
from src.sm_common.errors import (
    BuyNowUnavailableError,
    ListingNotFoundError,
    ValidationError,
)
from src.sm_common.id_generator import generate_id
from src.sm_common.locks import KeyedLocks, get_listing_locks
from src.sm_listing.domain.models import Listing
from src.sm_listing.domain.repository import ListingRepositoryProtocol
from src.sm_listing.infrastructure.persistence import ListingRepository

logger = logging.getLogger(__name__)


class AuctionEngine:
    def __init__(
        self,
        listings: ListingRepositoryProtocol | None = None,
        bids: BidRepositoryProtocol | None = None,
        locks: KeyedLocks | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._listings: ListingRepositoryProtocol = listings or ListingRepository()
        self._bids: BidRepositoryProtocol = bids or BidRepository()
        self._locks = locks or get_listing_locks()
        self._clock = clock

    async def place_bid(
        self,
        listing_id: str,
        bidder: str,
        amount: float,
        rail: PaymentRail,
        db: AsyncSession,
    ) -> Bid:
        """Record a PENDING bid. Leadership changes only once the bid is funded."""
        async with self._locks.for_key(listing_id):
            try:
                listing = await self._load_for_update(listing_id, db)
                check_auction_open(listing, self._clock())
                if bidder == listing.seller:
                    raise ValidationError("seller cannot bid on own auction")
                check_bid_amount(listing, amount)
                bid = Bid(
                    id=generate_id("bid"),
                    listing_id=listing_id,
                    bidder=bidder,
                    amount=amount,
                    rail=rail.value,
                    status=BidStatus.PENDING.value,
                    created_at=self._clock(),
                )
                await self._bids.save(bid, db)
                await db.commit()
            except Exception:
                await db.rollback()
                raise
        logger.info("Bid %s: %s bids %s on %s", bid.id, bidder, amount, listing_id)
        return bid

    async def buy_now(self, listing_id: str, buyer: str, db: AsyncSession) -> Listing:
        """Make ``buyer`` the leader at buy_now_price; payment follows as a BUY order."""
        async with self._locks.for_key(listing_id):
            try:
                listing = await self._load_for_update(listing_id, db)
                check_auction_open(listing, self._clock())
                price = listing.buy_now_price
                if price is None:
                    raise BuyNowUnavailableError(listing_id)
                if buyer == listing.seller:
                    raise ValidationError("seller cannot buy own auction")
                await self._listings.update_highest_bid(listing_id, price, buyer, db)
                listing.highest_bid_amount = price
                listing.highest_bidder = buyer
                await db.commit()
            except Exception:
                await db.rollback()
                raise
        logger.info("Buy-now on %s claimed by %s", listing_id, buyer)
        return listing

    async def list_bids(self, listing_id: str, db: AsyncSession) -> list[Bid]:
        if await self._listings.get_by_id(listing_id, db) is None:
            raise ListingNotFoundError(listing_id)
        return await self._bids.list_by_listing(listing_id, None, db)

    async def _load_for_update(self, listing_id: str, db: AsyncSession) -> Listing:
        listing = await self._listings.get_for_update(listing_id, db)
        if listing is None:
            raise ListingNotFoundError(listing_id)
        return listing
