"""SettlementCoordinator — the only writer of confirmed-payment effects.

Every confirmation runs as one transaction:
  1. CAS the order PENDING → PAID (no row means duplicate delivery: NOOP)
  2. Lock the listing (and the bid for escrow orders)
  3. BUY: move collectible ownership to the buyer, close the listing
     BID_ESCROW: fund the bid, promote it if it beats the current highest
  4. Append settlement_events rows for each effect

Row locks follow order → listing → bid → collectible.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.sm_asset.domain.repository import CollectibleRepositoryProtocol
from src.sm_asset.infrastructure.persistence import CollectibleRepository
from src.sm_auction.domain.repository import BidRepositoryProtocol
from src.sm_auction.domain.rules import takes_lead
from src.sm_auction.infrastructure.persistence import BidRepository
from src.sm_common.amounts import amounts_match
from src.sm_common.datetime_utils import Clock, utc_now
from src.sm_common.enums import (
    BidStatus,
    OrderKind,
    OrderStatus,
    SettlementEventType,
    SettlementStatus,
)
from src.sm_common.errors import (
    AuctionNotEndedError,
    ListingNotActiveError,
    ListingNotFoundError,
    NoValidEscrowError,
    OrderNotFoundError,
    SettlementInvariantError,
    ValidationError,
)
from src.sm_common.locks import KeyedLocks, get_listing_locks
from src.sm_listing.domain.models import Listing
from src.sm_listing.domain.repository import ListingRepositoryProtocol
from src.sm_listing.infrastructure.persistence import ListingRepository
from src.sm_order.domain.models import Order, PaymentProof
from src.sm_order.domain.repository import OrderRepositoryProtocol
from src.sm_order.infrastructure.persistence import OrderRepository
from src.sm_settlement.domain.models import AuctionSettlement, SettlementOutcome
from src.sm_settlement.infrastructure.event_log import write_settlement_event

logger = logging.getLogger(__name__)


class SettlementCoordinator:
    def __init__(
        self,
        orders: OrderRepositoryProtocol | None = None,
        listings: ListingRepositoryProtocol | None = None,
        bids: BidRepositoryProtocol | None = None,
        collectibles: CollectibleRepositoryProtocol | None = None,
        locks: KeyedLocks | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._orders: OrderRepositoryProtocol = orders or OrderRepository()
        self._listings: ListingRepositoryProtocol = listings or ListingRepository()
        self._bids: BidRepositoryProtocol = bids or BidRepository()
        self._collectibles: CollectibleRepositoryProtocol = (
            collectibles or CollectibleRepository()
        )
        self._locks = locks or get_listing_locks()
        self._clock = clock

    async def confirm_payment(
        self, db: AsyncSession, order_id: str, proof: PaymentProof
    ) -> SettlementOutcome:
        """Apply a verified payment exactly once. Safe to call repeatedly."""
        order = await self._orders.get_by_id(order_id, db)
        if order is None:
            raise OrderNotFoundError(order_id)

        async with self._locks.for_key(order.listing_id):
            try:
                paid = await self._orders.transition_from_pending(
                    order_id, OrderStatus.PAID.value, proof, self._clock(), db
                )
                if paid is None:
                    await db.rollback()
                    current = await self._orders.get_by_id(order_id, db)
                    status = current.status if current else order.status
                    logger.info(
                        "Confirmation for order %s ignored: already %s", order_id, status
                    )
                    return SettlementOutcome(order_id, SettlementStatus.NOOP.value, status)

                await write_settlement_event(
                    SettlementEventType.ORDER_PAID.value,
                    paid.listing_id,
                    paid.id,
                    {
                        "buyer": paid.buyer,
                        "kind": paid.kind,
                        "rail": paid.rail,
                        "amount": paid.amount,
                        "tx_hash": proof.tx_hash,
                        "telegram_charge_id": proof.telegram_charge_id,
                    },
                    db,
                )
                if paid.kind == OrderKind.BUY.value:
                    await self._apply_purchase(paid, db)
                else:
                    await self._apply_escrow(paid, db)
                await db.commit()
            except SettlementInvariantError:
                await db.rollback()
                logger.error("Settlement of order %s aborted", order_id, exc_info=True)
                raise
            except Exception:
                await db.rollback()
                raise

        logger.info("Order %s settled (%s via %s)", order_id, paid.kind, paid.rail)
        return SettlementOutcome(order_id, SettlementStatus.APPLIED.value, paid.status)

    async def finalize_auction_settlement(
        self, db: AsyncSession, listing_id: str
    ) -> AuctionSettlement:
        """Hand an ended auction to the highest bidder, backed by their funded escrow."""
        async with self._locks.for_key(listing_id):
            try:
                listing = await self._listings.get_for_update(listing_id, db)
                if listing is None:
                    raise ListingNotFoundError(listing_id)
                if not listing.is_auction:
                    raise ValidationError(f"listing {listing_id} is not an auction")
                if not listing.active:
                    raise ListingNotActiveError(listing_id)
                if not listing.has_ended(self._clock()):
                    raise AuctionNotEndedError(listing_id)
                winner = listing.highest_bidder
                amount = listing.highest_bid_amount
                if winner is None or not amount:
                    raise NoValidEscrowError(listing_id)

                funded = await self._bids.list_by_listing(
                    listing_id, BidStatus.FUNDED.value, db
                )
                escrow = next(
                    (b for b in funded if b.bidder == winner and amounts_match(b.amount, amount)),
                    None,
                )
                if escrow is None:
                    raise NoValidEscrowError(listing_id)

                await self._transfer(listing, winner, None, db)
                await write_settlement_event(
                    SettlementEventType.AUCTION_SETTLED.value,
                    listing_id,
                    None,
                    {"winner": winner, "amount": amount, "bid_id": escrow.id},
                    db,
                )
                await db.commit()
            except Exception:
                await db.rollback()
                raise

        logger.info("Auction %s settled: %s wins at %s", listing_id, winner, amount)
        return AuctionSettlement(
            listing_id=listing_id,
            collectible_id=listing.collectible_id,
            winner=winner,
            amount=amount,
            currency=listing.currency,
        )

    # ------------------------------------------------------------------
    # Effects (caller holds the transaction)
    # ------------------------------------------------------------------

    async def _apply_purchase(self, order: Order, db: AsyncSession) -> None:
        # Applies even if the listing was cancelled while the payment was in flight.
        listing = await self._listings.get_for_update(order.listing_id, db)
        if listing is None:
            raise SettlementInvariantError(
                f"listing {order.listing_id} missing for order {order.id}"
            )
        await self._transfer(listing, order.buyer, order.id, db)

    async def _apply_escrow(self, order: Order, db: AsyncSession) -> None:
        listing = await self._listings.get_for_update(order.listing_id, db)
        if listing is None:
            raise SettlementInvariantError(
                f"listing {order.listing_id} missing for order {order.id}"
            )
        if order.linked_bid_id is None:
            raise SettlementInvariantError(f"escrow order {order.id} has no bid")
        bid = await self._bids.get_for_update(order.linked_bid_id, db)
        if bid is None:
            raise SettlementInvariantError(
                f"bid {order.linked_bid_id} missing for order {order.id}"
            )
        if bid.is_funded:
            logger.warning(
                "Bid %s already funded; order %s paid a second escrow", bid.id, order.id
            )
            return

        await self._bids.mark_funded(bid.id, order.correlation_token, self._clock(), db)
        await write_settlement_event(
            SettlementEventType.BID_FUNDED.value,
            listing.id,
            order.id,
            {"bid_id": bid.id, "bidder": bid.bidder, "amount": bid.amount},
            db,
        )
        if takes_lead(listing, bid.amount):
            await self._listings.update_highest_bid(listing.id, bid.amount, bid.bidder, db)
            await write_settlement_event(
                SettlementEventType.BID_PROMOTED.value,
                listing.id,
                order.id,
                {
                    "bid_id": bid.id,
                    "bidder": bid.bidder,
                    "amount": bid.amount,
                    "previous_amount": listing.highest_bid_amount,
                    "previous_bidder": listing.highest_bidder,
                },
                db,
            )

    async def _transfer(
        self, listing: Listing, new_owner: str, order_id: str | None, db: AsyncSession
    ) -> None:
        collectible = await self._collectibles.get_for_update(listing.collectible_id, db)
        if collectible is None:
            raise SettlementInvariantError(
                f"collectible {listing.collectible_id} missing for listing {listing.id}"
            )
        await self._collectibles.update_owner(collectible.id, new_owner, db)
        await write_settlement_event(
            SettlementEventType.OWNERSHIP_TRANSFERRED.value,
            listing.id,
            order_id,
            {"collectible_id": collectible.id, "from": collectible.owner, "to": new_owner},
            db,
        )
        await self._close(listing, order_id, db)
        # A cancelled-then-relisted collectible must not stay listed by its former owner.
        other = await self._listings.get_active_by_collectible(collectible.id, db)
        if other is not None and other.id != listing.id:
            await self._close(other, order_id, db)

    async def _close(self, listing: Listing, order_id: str | None, db: AsyncSession) -> None:
        if not listing.active:
            return
        await self._listings.set_active(listing.id, False, db)
        listing.active = False
        await write_settlement_event(
            SettlementEventType.LISTING_CLOSED.value, listing.id, order_id, {}, db
        )


_coordinator: SettlementCoordinator | None = None


def get_settlement_coordinator() -> SettlementCoordinator:
    global _coordinator  # noqa: PLW0603
    if _coordinator is None:
        _coordinator = SettlementCoordinator()
    return _coordinator
