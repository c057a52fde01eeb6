# tests/unit/test_auction_scenario.py
"""End-to-end auction on fakes: bids, escrow funding, promotion, finalize."""
import pytest
from fakes import FakeConfigRepo, FakeTelegramClient, make_auction, make_collectible, make_config

from src.sm_auction.engine.engine import AuctionEngine
from src.sm_common.enums import PaymentRail
from src.sm_common.errors import BidTooLowError
from src.sm_config.application.service import MarketplaceConfigService
from src.sm_order.application.schemas import CreateOrderRequest
from src.sm_order.application.service import OrderLedger
from src.sm_order.domain.models import PaymentProof
from src.sm_payment.application.instructions import PaymentInstructionFactory
from src.sm_settlement.application.service import SettlementCoordinator


@pytest.fixture
def world(orders, listings, bids, collectibles, locks, clock):
    collectibles.add(make_collectible())
    listings.add(make_auction(min_bid=1.0, buy_now_price=2.0, increment_percent=20.0))
    telegram = FakeTelegramClient()
    return {
        "engine": AuctionEngine(listings=listings, bids=bids, locks=locks, clock=clock),
        "ledger": OrderLedger(
            repo=orders,
            listings=listings,
            bids=bids,
            collectibles=collectibles,
            config_service=MarketplaceConfigService(repo=FakeConfigRepo(make_config())),
            instructions=PaymentInstructionFactory(telegram_client_factory=lambda t: telegram),
            clock=clock,
        ),
        "settlement": SettlementCoordinator(
            orders=orders,
            listings=listings,
            bids=bids,
            collectibles=collectibles,
            locks=locks,
            clock=clock,
        ),
    }


async def _fund(world, db, bidder: str, bid_id: str) -> None:
    order = await world["ledger"].create_order(
        db,
        bidder,
        CreateOrderRequest(
            listing_id="lst_auction", kind="BID_ESCROW", rail="ON_CHAIN", linked_bid_id=bid_id
        ),
    )
    await world["settlement"].confirm_payment(db, order.id, PaymentProof(tx_hash=f"tx-{bid_id}"))


class TestIncrementAndPromotion:
    @pytest.mark.asyncio
    async def test_funding_moves_the_lead(self, world, listings, bids, db):
        engine = world["engine"]

        bid_a = await engine.place_bid("lst_auction", "A", 1.2, PaymentRail.ON_CHAIN, db)
        with pytest.raises(BidTooLowError):
            await engine.place_bid("lst_auction", "B", 1.19, PaymentRail.ON_CHAIN, db)

        await _fund(world, db, "A", bid_a.id)
        listing = listings.items["lst_auction"]
        assert (listing.highest_bid_amount, listing.highest_bidder) == (1.2, "A")

        bid_c = await engine.place_bid("lst_auction", "C", 1.5, PaymentRail.ON_CHAIN, db)
        await _fund(world, db, "C", bid_c.id)

        assert (listing.highest_bid_amount, listing.highest_bidder) == (1.5, "C")
        assert bids.items[bid_a.id].status == "FUNDED"
        assert bids.items[bid_c.id].status == "FUNDED"

    @pytest.mark.asyncio
    async def test_winner_takes_collectible_after_end(
        self, world, listings, collectibles, clock, db
    ):
        engine = world["engine"]
        bid_c = await engine.place_bid("lst_auction", "C", 1.5, PaymentRail.ON_CHAIN, db)
        await _fund(world, db, "C", bid_c.id)
        clock.advance(hours=24, minutes=1)

        await world["settlement"].finalize_auction_settlement(db, "lst_auction")

        assert collectibles.items["col_1"].owner == "C"
        assert listings.items["lst_auction"].active is False
