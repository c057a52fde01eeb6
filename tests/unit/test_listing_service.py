# tests/unit/test_listing_service.py
"""ListingService: creation rules, deactivation rights, marketplace view."""
from datetime import timedelta

import pytest
from fakes import T0, make_auction, make_collectible, make_fixed_listing
from pydantic import ValidationError as PydanticValidationError

from src.sm_common.errors import (
    CollectibleNotFoundError,
    ListingAlreadyActiveError,
    ListingNotFoundError,
    NotOwnerError,
)
from src.sm_listing.application.schemas import (
    CreateAuctionListingRequest,
    CreateFixedListingRequest,
)
from src.sm_listing.application.service import ListingService


@pytest.fixture
def service(listings, collectibles, locks, clock) -> ListingService:
    collectibles.add(make_collectible())
    return ListingService(repo=listings, collectibles=collectibles, locks=locks, clock=clock)


class TestCreate:
    @pytest.mark.asyncio
    async def test_fixed_listing(self, service, listings, db):
        resp = await service.create_fixed_listing(
            db, "seller", CreateFixedListingRequest(collectible_id="col_1", price=5, currency="TON")
        )

        assert resp.id.startswith("lst_")
        assert resp.kind == "FIXED"
        assert resp.active is True
        assert listings.items[resp.id].price == 5
        db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_auction_runs_a_day_with_twenty_percent_steps(self, service, listings, db):
        resp = await service.create_auction_listing(
            db,
            "seller",
            CreateAuctionListingRequest(
                collectible_id="col_1", currency="STARS", min_bid=100, buy_now_price=500
            ),
        )

        listing = listings.items[resp.id]
        assert listing.ends_at == T0 + timedelta(hours=24)
        assert listing.increment_percent == 20.0
        assert listing.highest_bid_amount is None

    def test_buy_now_must_exceed_min_bid(self) -> None:
        with pytest.raises(PydanticValidationError):
            CreateAuctionListingRequest(
                collectible_id="col_1", currency="TON", min_bid=2, buy_now_price=2
            )

    @pytest.mark.asyncio
    async def test_only_owner_can_list(self, service, db):
        with pytest.raises(NotOwnerError):
            await service.create_fixed_listing(
                db, "mallory", CreateFixedListingRequest(collectible_id="col_1", price=5, currency="TON")
            )
        db.rollback.assert_awaited()

    @pytest.mark.asyncio
    async def test_unknown_collectible(self, service, db):
        with pytest.raises(CollectibleNotFoundError):
            await service.create_fixed_listing(
                db, "seller", CreateFixedListingRequest(collectible_id="col_x", price=5, currency="TON")
            )

    @pytest.mark.asyncio
    async def test_one_active_listing_per_collectible(self, service, listings, db):
        listings.add(make_fixed_listing())

        with pytest.raises(ListingAlreadyActiveError):
            await service.create_auction_listing(
                db,
                "seller",
                CreateAuctionListingRequest(collectible_id="col_1", currency="TON", min_bid=1),
            )


class TestDeactivate:
    @pytest.mark.asyncio
    async def test_seller_deactivates(self, service, listings, db):
        listings.add(make_fixed_listing())

        resp = await service.deactivate(db, "lst_fixed", "seller")

        assert resp.active is False
        assert listings.deactivations == ["lst_fixed"]

    @pytest.mark.asyncio
    async def test_current_owner_may_deactivate_stale_listing(
        self, service, listings, collectibles, db
    ):
        listings.add(make_fixed_listing())
        collectibles.items["col_1"].owner = "bob"

        resp = await service.deactivate(db, "lst_fixed", "bob")

        assert resp.active is False

    @pytest.mark.asyncio
    async def test_stranger_rejected(self, service, listings, db):
        listings.add(make_fixed_listing())

        with pytest.raises(NotOwnerError):
            await service.deactivate(db, "lst_fixed", "mallory")
        assert listings.items["lst_fixed"].active is True

    @pytest.mark.asyncio
    async def test_already_inactive_is_idempotent(self, service, listings, db):
        listings.add(make_fixed_listing(active=False))

        resp = await service.deactivate(db, "lst_fixed", "seller")

        assert resp.active is False
        assert listings.deactivations == []

    @pytest.mark.asyncio
    async def test_missing_listing(self, service, db):
        with pytest.raises(ListingNotFoundError):
            await service.deactivate(db, "lst_none", "seller")


class TestMarketplace:
    @pytest.mark.asyncio
    async def test_lists_active_with_collectible(self, service, listings, collectibles, db):
        collectibles.add(make_collectible(id="col_2", name="Sad Dog"))
        listings.add(make_fixed_listing())
        listings.add(make_auction(collectible_id="col_2", currency="STARS"))
        listings.add(make_fixed_listing(id="lst_old", active=False))

        everything = await service.list_active(db, None)
        stars = await service.list_active(db, "STARS")

        assert {i.listing.id for i in everything.items} == {"lst_fixed", "lst_auction"}
        assert [i.collectible.name for i in stars.items] == ["Sad Dog"]

    @pytest.mark.asyncio
    async def test_skips_listing_with_missing_collectible(self, service, listings, db):
        listings.add(make_fixed_listing(collectible_id="col_gone"))

        assert (await service.list_active(db, None)).items == []
