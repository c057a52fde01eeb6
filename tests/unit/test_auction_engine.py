# tests/unit/test_auction_engine.py
"""AuctionEngine: bid placement and buy-now with fake repositories."""
import asyncio

import pytest
from fakes import make_auction, make_fixed_listing

from src.sm_auction.engine.engine import AuctionEngine
from src.sm_common.enums import PaymentRail
from src.sm_common.errors import (
    AuctionClosedError,
    BidTooLowError,
    BuyNowUnavailableError,
    ListingNotFoundError,
    ValidationError,
)


@pytest.fixture
def engine(listings, bids, locks, clock) -> AuctionEngine:
    return AuctionEngine(listings=listings, bids=bids, locks=locks, clock=clock)


class TestPlaceBid:
    @pytest.mark.asyncio
    async def test_creates_pending_bid_without_touching_highest(self, engine, listings, bids, db):
        listings.add(make_auction())

        bid = await engine.place_bid("lst_auction", "alice", 1.2, PaymentRail.ON_CHAIN, db)

        assert bid.status == "PENDING"
        assert bid.rail == "ON_CHAIN"
        assert bid.id.startswith("bid_")
        assert bids.items[bid.id].amount == 1.2
        assert listings.items["lst_auction"].highest_bidder is None
        db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_too_low_rolls_back(self, engine, listings, bids, db):
        listings.add(make_auction())

        with pytest.raises(BidTooLowError):
            await engine.place_bid("lst_auction", "bob", 1.19, PaymentRail.ON_CHAIN, db)

        assert bids.items == {}
        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_expired_auction_is_closed(self, engine, listings, clock, db):
        listings.add(make_auction())
        clock.advance(hours=24, seconds=1)

        with pytest.raises(AuctionClosedError):
            await engine.place_bid("lst_auction", "alice", 5, PaymentRail.ON_CHAIN, db)

    @pytest.mark.asyncio
    async def test_fixed_listing_is_closed_for_bids(self, engine, listings, db):
        listings.add(make_fixed_listing())

        with pytest.raises(AuctionClosedError):
            await engine.place_bid("lst_fixed", "alice", 10, PaymentRail.ON_CHAIN, db)

    @pytest.mark.asyncio
    async def test_unknown_listing(self, engine, db):
        with pytest.raises(ListingNotFoundError):
            await engine.place_bid("nope", "alice", 10, PaymentRail.ON_CHAIN, db)

    @pytest.mark.asyncio
    async def test_seller_cannot_bid(self, engine, listings, db):
        listings.add(make_auction())

        with pytest.raises(ValidationError):
            await engine.place_bid("lst_auction", "seller", 1.2, PaymentRail.ON_CHAIN, db)

    @pytest.mark.asyncio
    async def test_concurrent_bids_all_recorded(self, engine, listings, bids, db):
        listings.add(make_auction())

        await asyncio.gather(
            *(
                engine.place_bid("lst_auction", f"u{i}", 1.2 + i / 10, PaymentRail.PUSH_INVOICE, db)
                for i in range(5)
            )
        )

        assert len(bids.items) == 5


class TestBuyNow:
    @pytest.mark.asyncio
    async def test_records_buyer_as_leader(self, engine, listings, collectibles, db):
        listings.add(make_auction())

        listing = await engine.buy_now("lst_auction", "bob", db)

        assert listing.highest_bidder == "bob"
        assert listing.highest_bid_amount == 2.0
        assert listings.items["lst_auction"].highest_bidder == "bob"
        assert listings.items["lst_auction"].active is True
        assert collectibles.owner_updates == []

    @pytest.mark.asyncio
    async def test_without_buy_now_price(self, engine, listings, db):
        listings.add(make_auction(buy_now_price=None))

        with pytest.raises(BuyNowUnavailableError):
            await engine.buy_now("lst_auction", "bob", db)

    @pytest.mark.asyncio
    async def test_after_end(self, engine, listings, clock, db):
        listings.add(make_auction())
        clock.advance(hours=25)

        with pytest.raises(AuctionClosedError):
            await engine.buy_now("lst_auction", "bob", db)


class TestListBids:
    @pytest.mark.asyncio
    async def test_highest_first(self, engine, listings, db):
        listings.add(make_auction())
        await engine.place_bid("lst_auction", "a", 1.2, PaymentRail.ON_CHAIN, db)
        await engine.place_bid("lst_auction", "c", 1.5, PaymentRail.ON_CHAIN, db)

        result = await engine.list_bids("lst_auction", db)

        assert [b.bidder for b in result] == ["c", "a"]

    @pytest.mark.asyncio
    async def test_unknown_listing(self, engine, db):
        with pytest.raises(ListingNotFoundError):
            await engine.list_bids("missing", db)
