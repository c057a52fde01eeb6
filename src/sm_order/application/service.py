"""OrderLedger — create, cancel, expire and read payment orders.

An order freezes everything needed to judge its payment later: the amount
in the rail's unit, the rate and config version used for conversion, and a
unique correlation token the payer echoes back.
"""

import logging
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from src.sm_asset.domain.repository import CollectibleRepositoryProtocol
from src.sm_asset.infrastructure.persistence import CollectibleRepository
from src.sm_auction.domain.repository import BidRepositoryProtocol
from src.sm_auction.infrastructure.persistence import BidRepository
from src.sm_common.amounts import to_rail_amount
from src.sm_common.datetime_utils import Clock, utc_now
from src.sm_common.enums import Currency, OrderKind, OrderStatus, PaymentRail, SettlementEventType
from src.sm_common.errors import (
    ListingNotActiveError,
    ListingNotFoundError,
    NotOwnerError,
    OrderNotFoundError,
    OrderNotPendingError,
    ValidationError,
)
from src.sm_common.id_generator import generate_id
from src.sm_config.application.service import MarketplaceConfigService
from src.sm_listing.domain.repository import ListingRepositoryProtocol
from src.sm_listing.infrastructure.persistence import ListingRepository
from src.sm_order.application.schemas import (
    CreateOrderRequest,
    ExpireOrdersResponse,
    OrderListResponse,
    OrderResponse,
)
from src.sm_order.domain.models import Order
from src.sm_order.domain.pricing import (
    correlation_token,
    resolve_buy_amount,
    resolve_escrow_amount,
)
from src.sm_order.domain.repository import OrderRepositoryProtocol
from src.sm_order.infrastructure.persistence import OrderRepository
from src.sm_payment.application.instructions import (
    PaymentInstructionFactory,
    require_rail_config,
)
from src.sm_settlement.infrastructure.event_log import write_settlement_event

logger = logging.getLogger(__name__)

_DEFAULT_LABEL = "Sticker"


class OrderLedger:
    def __init__(
        self,
        repo: OrderRepositoryProtocol | None = None,
        listings: ListingRepositoryProtocol | None = None,
        bids: BidRepositoryProtocol | None = None,
        collectibles: CollectibleRepositoryProtocol | None = None,
        config_service: MarketplaceConfigService | None = None,
        instructions: PaymentInstructionFactory | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._repo: OrderRepositoryProtocol = repo or OrderRepository()
        self._listings: ListingRepositoryProtocol = listings or ListingRepository()
        self._bids: BidRepositoryProtocol = bids or BidRepository()
        self._collectibles: CollectibleRepositoryProtocol = (
            collectibles or CollectibleRepository()
        )
        self._config = config_service or MarketplaceConfigService()
        self._instructions = instructions or PaymentInstructionFactory()
        self._clock = clock

    async def create_order(
        self, db: AsyncSession, buyer: str, req: CreateOrderRequest
    ) -> OrderResponse:
        kind = OrderKind(req.kind)
        rail = PaymentRail(req.rail)
        try:
            config = await self._config.current(db)
            require_rail_config(config, rail)

            listing = await self._listings.get_by_id(req.listing_id, db)
            if listing is None:
                raise ListingNotFoundError(req.listing_id)
            if not listing.active:
                raise ListingNotActiveError(req.listing_id)
            if listing.seller == buyer:
                raise ValidationError("seller cannot pay for own listing")

            if kind is OrderKind.BUY:
                listing_amount = resolve_buy_amount(listing, buyer, self._clock())
            else:
                if not listing.is_auction:
                    raise ValidationError("escrow orders are only for auctions")
                if not req.linked_bid_id:
                    raise ValidationError("linked_bid_id is required for BID_ESCROW")
                bid = await self._bids.get_by_id(req.linked_bid_id, db)
                listing_amount = resolve_escrow_amount(listing, buyer, bid, req.bid_amount)

            amount = to_rail_amount(
                listing_amount, Currency(listing.currency), rail, config.ton_to_stars_rate
            )
            order_id = generate_id("ord")
            token = correlation_token(order_id, listing.id, kind)
            collectible = await self._collectibles.get_by_id(listing.collectible_id, db)
            # Bot API calls can be slow; the insert below runs in a fresh transaction.
            await db.rollback()
            instruction = await self._instructions.build(
                config,
                rail,
                amount,
                token,
                collectible.name if collectible else _DEFAULT_LABEL,
            )
            order = Order(
                id=order_id,
                listing_id=listing.id,
                buyer=buyer,
                kind=kind.value,
                rail=rail.value,
                amount=amount,
                listing_amount=listing_amount,
                listing_currency=listing.currency,
                rate=config.ton_to_stars_rate,
                config_version=config.version,
                correlation_token=token,
                status=OrderStatus.PENDING.value,
                linked_bid_id=req.linked_bid_id if kind is OrderKind.BID_ESCROW else None,
                payment_uri=instruction.payment_uri,
                destination=instruction.destination,
                created_at=self._clock(),
            )
            await self._repo.save(order, db)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(
            "Order %s created: %s %s %s via %s (config v%d)",
            order.id,
            buyer,
            kind.value,
            listing.id,
            rail.value,
            config.version,
        )
        return OrderResponse.from_domain(order)

    async def cancel_order(
        self, db: AsyncSession, order_id: str, requester: str
    ) -> OrderResponse:
        order = await self._load_owned(db, order_id, requester)
        try:
            cancelled = await self._repo.transition_from_pending(
                order_id, OrderStatus.CANCELLED.value, None, self._clock(), db
            )
            if cancelled is None:
                raise OrderNotPendingError(order_id, order.status)
            await write_settlement_event(
                SettlementEventType.ORDER_CANCELLED.value,
                cancelled.listing_id,
                cancelled.id,
                {"by": requester},
                db,
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Order %s cancelled by %s", order_id, requester)
        return OrderResponse.from_domain(cancelled)

    async def expire_pending_orders(
        self, db: AsyncSession, older_than_minutes: int, limit: int
    ) -> ExpireOrdersResponse:
        """Fail PENDING orders created before the cutoff. Settled races are skipped."""
        now = self._clock()
        cutoff = now - timedelta(minutes=older_than_minutes)
        expired: list[str] = []
        try:
            for stale in await self._repo.list_stale_pending(cutoff, limit, db):
                failed = await self._repo.transition_from_pending(
                    stale.id, OrderStatus.FAILED.value, None, now, db
                )
                if failed is None:
                    continue
                await write_settlement_event(
                    SettlementEventType.ORDER_FAILED.value,
                    failed.listing_id,
                    failed.id,
                    {"reason": "expired", "cutoff": cutoff.isoformat()},
                    db,
                )
                expired.append(failed.id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        if expired:
            logger.info("Expired %d pending orders older than %s", len(expired), cutoff)
        return ExpireOrdersResponse(expired_order_ids=expired)

    async def get_order(self, db: AsyncSession, order_id: str, requester: str) -> OrderResponse:
        return OrderResponse.from_domain(await self._load_owned(db, order_id, requester))

    async def list_orders(
        self,
        db: AsyncSession,
        buyer: str,
        status: str | None,
        limit: int,
        cursor: str | None,
    ) -> OrderListResponse:
        orders = await self._repo.list_by_buyer(
            buyer=buyer, status=status, limit=limit + 1, cursor_id=cursor, db=db
        )
        has_more = len(orders) > limit
        if has_more:
            orders = orders[:limit]
        return OrderListResponse(
            items=[OrderResponse.from_domain(o) for o in orders],
            next_cursor=orders[-1].id if has_more else None,
            has_more=has_more,
        )

    async def _load_owned(self, db: AsyncSession, order_id: str, requester: str) -> Order:
        order = await self._repo.get_by_id(order_id, db)
        if order is None:
            raise OrderNotFoundError(order_id)
        if order.buyer != requester:
            raise NotOwnerError(requester)
        return order
