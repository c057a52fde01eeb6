# tests/unit/test_settlement.py
"""SettlementCoordinator: exactly-once effects of confirmed payments."""
import asyncio

import pytest
from fakes import (
    make_auction,
    make_bid,
    make_collectible,
    make_fixed_listing,
    make_order,
)

from src.sm_common.errors import (
    AuctionNotEndedError,
    ListingNotActiveError,
    NoValidEscrowError,
    OrderNotFoundError,
    SettlementInvariantError,
)
from src.sm_order.domain.models import PaymentProof
from src.sm_settlement.application.service import SettlementCoordinator


@pytest.fixture
def coordinator(orders, listings, bids, collectibles, locks, clock) -> SettlementCoordinator:
    return SettlementCoordinator(
        orders=orders,
        listings=listings,
        bids=bids,
        collectibles=collectibles,
        locks=locks,
        clock=clock,
    )


def _escrow_order(order_id: str, bid_id: str, buyer: str, amount: float):
    return make_order(
        id=order_id,
        listing_id="lst_auction",
        buyer=buyer,
        kind="BID_ESCROW",
        amount=amount,
        listing_amount=amount,
        linked_bid_id=bid_id,
        correlation_token=f"order:{order_id}:lst_auction:BID_ESCROW",
    )


class TestConfirmPurchase:
    @pytest.mark.asyncio
    async def test_transfers_ownership_and_closes_listing(
        self, coordinator, orders, listings, collectibles, db
    ):
        collectibles.add(make_collectible())
        listings.add(make_fixed_listing())
        orders.add(make_order())

        outcome = await coordinator.confirm_payment(db, "ord_1", PaymentProof(tx_hash="abc"))

        assert outcome.status == "APPLIED"
        assert outcome.order_status == "PAID"
        assert collectibles.items["col_1"].owner == "bob"
        assert listings.items["lst_fixed"].active is False
        assert orders.items["ord_1"].tx_hash == "abc"
        assert orders.items["ord_1"].paid_at is not None
        db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_second_confirmation_is_noop(
        self, coordinator, orders, listings, collectibles, db
    ):
        collectibles.add(make_collectible())
        listings.add(make_fixed_listing())
        orders.add(make_order())

        first = await coordinator.confirm_payment(db, "ord_1", PaymentProof(tx_hash="abc"))
        second = await coordinator.confirm_payment(db, "ord_1", PaymentProof(tx_hash="abc"))

        assert first.status == "APPLIED"
        assert second.status == "NOOP"
        assert second.order_status == "PAID"
        assert collectibles.owner_updates == [("col_1", "bob")]
        assert listings.deactivations == ["lst_fixed"]

    @pytest.mark.asyncio
    async def test_concurrent_confirmations_apply_once(
        self, coordinator, orders, listings, collectibles, db
    ):
        collectibles.add(make_collectible())
        listings.add(make_fixed_listing())
        orders.add(make_order())

        outcomes = await asyncio.gather(
            *(coordinator.confirm_payment(db, "ord_1", PaymentProof()) for _ in range(4))
        )

        assert sorted(o.status for o in outcomes) == ["APPLIED", "NOOP", "NOOP", "NOOP"]
        assert len(collectibles.owner_updates) == 1

    @pytest.mark.asyncio
    async def test_payment_wins_over_cancelled_listing(
        self, coordinator, orders, listings, collectibles, db
    ):
        collectibles.add(make_collectible())
        listings.add(make_fixed_listing(active=False))
        orders.add(make_order())

        outcome = await coordinator.confirm_payment(db, "ord_1", PaymentProof(tx_hash="abc"))

        assert outcome.status == "APPLIED"
        assert collectibles.items["col_1"].owner == "bob"

    @pytest.mark.asyncio
    async def test_relisted_collectible_is_closed_on_transfer(
        self, coordinator, orders, listings, collectibles, db
    ):
        collectibles.add(make_collectible())
        listings.add(make_fixed_listing(active=False))
        listings.add(make_fixed_listing(id="lst_again", price=9.0))
        orders.add(make_order())

        await coordinator.confirm_payment(db, "ord_1", PaymentProof(tx_hash="abc"))

        assert listings.items["lst_again"].active is False

    @pytest.mark.asyncio
    async def test_cancelled_order_is_not_settled(
        self, coordinator, orders, listings, collectibles, db
    ):
        collectibles.add(make_collectible())
        listings.add(make_fixed_listing())
        orders.add(make_order(status="CANCELLED"))

        outcome = await coordinator.confirm_payment(db, "ord_1", PaymentProof(tx_hash="abc"))

        assert outcome.status == "NOOP"
        assert outcome.order_status == "CANCELLED"
        assert collectibles.items["col_1"].owner == "seller"

    @pytest.mark.asyncio
    async def test_missing_collectible_rolls_back(self, coordinator, orders, listings, db):
        listings.add(make_fixed_listing())
        orders.add(make_order())

        with pytest.raises(SettlementInvariantError):
            await coordinator.confirm_payment(db, "ord_1", PaymentProof(tx_hash="abc"))
        db.rollback.assert_awaited()
        db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_order(self, coordinator, db):
        with pytest.raises(OrderNotFoundError):
            await coordinator.confirm_payment(db, "nope", PaymentProof())


class TestConfirmEscrow:
    @pytest.mark.asyncio
    async def test_funds_and_promotes_first_bid(self, coordinator, orders, listings, bids, db):
        listings.add(make_auction())
        bids.add(make_bid())
        orders.add(_escrow_order("ord_a", "bid_1", "alice", 1.2))

        await coordinator.confirm_payment(db, "ord_a", PaymentProof(tx_hash="h1"))

        assert bids.items["bid_1"].status == "FUNDED"
        assert bids.items["bid_1"].correlation_token == "order:ord_a:lst_auction:BID_ESCROW"
        listing = listings.items["lst_auction"]
        assert (listing.highest_bid_amount, listing.highest_bidder) == (1.2, "alice")

    @pytest.mark.asyncio
    async def test_duplicate_funding_promotes_at_most_once(
        self, coordinator, orders, listings, bids, db
    ):
        listings.add(make_auction())
        bids.add(make_bid())
        orders.add(_escrow_order("ord_a", "bid_1", "alice", 1.2))

        await coordinator.confirm_payment(db, "ord_a", PaymentProof())
        again = await coordinator.confirm_payment(db, "ord_a", PaymentProof())

        assert again.status == "NOOP"
        assert bids.items["bid_1"].status == "FUNDED"

    @pytest.mark.asyncio
    async def test_lower_funded_bid_does_not_take_lead(
        self, coordinator, orders, listings, bids, db
    ):
        listings.add(make_auction(highest_bid_amount=1.5, highest_bidder="carol"))
        bids.add(make_bid())
        orders.add(_escrow_order("ord_a", "bid_1", "alice", 1.2))

        await coordinator.confirm_payment(db, "ord_a", PaymentProof())

        assert bids.items["bid_1"].status == "FUNDED"
        assert listings.items["lst_auction"].highest_bidder == "carol"

    @pytest.mark.asyncio
    async def test_missing_bid_is_invariant_violation(self, coordinator, orders, listings, db):
        listings.add(make_auction())
        orders.add(_escrow_order("ord_a", "bid_missing", "alice", 1.2))

        with pytest.raises(SettlementInvariantError):
            await coordinator.confirm_payment(db, "ord_a", PaymentProof())


class TestFinalizeAuction:
    @pytest.mark.asyncio
    async def test_transfers_to_funded_winner(
        self, coordinator, listings, bids, collectibles, clock, db
    ):
        collectibles.add(make_collectible())
        listings.add(make_auction(highest_bid_amount=1.5, highest_bidder="carol"))
        bids.add(make_bid(id="bid_c", bidder="carol", amount=1.5, status="FUNDED"))
        clock.advance(hours=24)

        result = await coordinator.finalize_auction_settlement(db, "lst_auction")

        assert result.winner == "carol"
        assert result.amount == 1.5
        assert collectibles.items["col_1"].owner == "carol"
        assert listings.items["lst_auction"].active is False

    @pytest.mark.asyncio
    async def test_without_funded_escrow(self, coordinator, listings, bids, collectibles, clock, db):
        collectibles.add(make_collectible())
        listings.add(make_auction(highest_bid_amount=2.0, highest_bidder="bob"))
        bids.add(make_bid(id="bid_c", bidder="carol", amount=1.5, status="FUNDED"))
        clock.advance(hours=25)

        with pytest.raises(NoValidEscrowError):
            await coordinator.finalize_auction_settlement(db, "lst_auction")
        assert collectibles.items["col_1"].owner == "seller"
        assert listings.items["lst_auction"].active is True

    @pytest.mark.asyncio
    async def test_pending_bid_is_not_escrow(self, coordinator, listings, bids, collectibles, clock, db):
        collectibles.add(make_collectible())
        listings.add(make_auction(highest_bid_amount=1.5, highest_bidder="carol"))
        bids.add(make_bid(id="bid_c", bidder="carol", amount=1.5))
        clock.advance(hours=25)

        with pytest.raises(NoValidEscrowError):
            await coordinator.finalize_auction_settlement(db, "lst_auction")

    @pytest.mark.asyncio
    async def test_before_end(self, coordinator, listings, db):
        listings.add(make_auction(highest_bid_amount=1.5, highest_bidder="carol"))

        with pytest.raises(AuctionNotEndedError):
            await coordinator.finalize_auction_settlement(db, "lst_auction")

    @pytest.mark.asyncio
    async def test_already_closed(self, coordinator, listings, clock, db):
        listings.add(make_auction(active=False))
        clock.advance(hours=25)

        with pytest.raises(ListingNotActiveError):
            await coordinator.finalize_auction_settlement(db, "lst_auction")
