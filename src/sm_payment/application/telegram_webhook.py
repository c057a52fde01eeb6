"""TelegramWebhookHandler — push confirmations for Stars invoices.

Handles three kinds of updates:
  pre_checkout_query   — approve only while a PENDING order carries the payload
  successful_payment   — hand the order to SettlementCoordinator
  /start <payload>     — re-send the invoice (fallback bot-link path)

Anything else is acknowledged and ignored, as are payments whose settlement
hits a broken invariant. Other failures propagate so Telegram redelivers.
Delivery is at least once: a Redis claim on update_id skips repeats, the
order CAS makes repeats harmless anyway.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

import redis.asyncio as aioredis
from redis.exceptions import RedisError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.sm_common.enums import PaymentRail, SettlementStatus
from src.sm_common.errors import PaymentConfigMissingError, SettlementInvariantError
from src.sm_common.redis_client import get_redis
from src.sm_config.application.service import MarketplaceConfigService
from src.sm_order.domain.models import Order, PaymentProof
from src.sm_order.domain.repository import OrderRepositoryProtocol
from src.sm_order.infrastructure.persistence import OrderRepository
from src.sm_payment.application.instructions import PaymentInstructionFactory
from src.sm_payment.domain.instructions import build_invoice
from src.sm_payment.domain.models import WebhookAction
from src.sm_payment.infrastructure.webhook_dedup import claim_update, release_update
from src.sm_settlement.application.service import (
    SettlementCoordinator,
    get_settlement_coordinator,
)

logger = logging.getLogger(__name__)

RedisFactory = Callable[[], Awaitable[aioredis.Redis]]

_RESEND_LABEL = "Sticker"


class TelegramWebhookHandler:
    def __init__(
        self,
        orders: OrderRepositoryProtocol | None = None,
        settlement: SettlementCoordinator | None = None,
        config_service: MarketplaceConfigService | None = None,
        instructions: PaymentInstructionFactory | None = None,
        redis_factory: RedisFactory = get_redis,
        dedup_ttl_seconds: int | None = None,
    ) -> None:
        self._orders: OrderRepositoryProtocol = orders or OrderRepository()
        self._settlement = settlement or get_settlement_coordinator()
        self._config = config_service or MarketplaceConfigService()
        self._instructions = instructions or PaymentInstructionFactory()
        self._redis_factory = redis_factory
        self._dedup_ttl = dedup_ttl_seconds or settings.WEBHOOK_DEDUP_TTL_SECONDS

    async def handle(self, db: AsyncSession, update: dict[str, Any]) -> WebhookAction:
        update_id = update.get("update_id")
        if isinstance(update_id, int) and not await self._claim(update_id):
            logger.info("Telegram update %d already handled", update_id)
            return WebhookAction.DUPLICATE
        try:
            return await self._dispatch(db, update)
        except Exception:
            # Let Telegram redeliver it.
            if isinstance(update_id, int):
                await self._release(update_id)
            raise

    async def _dispatch(self, db: AsyncSession, update: dict[str, Any]) -> WebhookAction:
        query = update.get("pre_checkout_query")
        if isinstance(query, dict):
            return await self._pre_checkout(db, query)

        message = update.get("message")
        if not isinstance(message, dict):
            return WebhookAction.IGNORED
        payment = message.get("successful_payment")
        if isinstance(payment, dict):
            return await self._successful_payment(db, payment)
        text = message.get("text")
        if isinstance(text, str) and text.startswith("/start"):
            return await self._resend_invoice(db, message, text)
        return WebhookAction.IGNORED

    async def _pre_checkout(self, db: AsyncSession, query: dict[str, Any]) -> WebhookAction:
        payload = str(query.get("invoice_payload") or "")
        order = await self._find_invoice_order(db, payload)
        ok = order is not None and order.is_pending
        try:
            config = await self._config.current(db)
        except PaymentConfigMissingError:
            logger.warning("pre_checkout_query %s left unanswered: no settings", query.get("id"))
            return WebhookAction.IGNORED
        await self._instructions.telegram(config).answer_pre_checkout_query(
            str(query.get("id")),
            ok,
            None if ok else "This order is no longer payable",
        )
        logger.info("pre_checkout for %r answered ok=%s", payload, ok)
        return WebhookAction.PRE_CHECKOUT_ANSWERED

    async def _successful_payment(
        self, db: AsyncSession, payment: dict[str, Any]
    ) -> WebhookAction:
        payload = str(payment.get("invoice_payload") or "")
        order = await self._find_invoice_order(db, payload)
        if order is None:
            logger.warning("successful_payment for unknown payload %r ignored", payload)
            return WebhookAction.IGNORED
        try:
            outcome = await self._settlement.confirm_payment(
                db,
                order.id,
                PaymentProof(
                    telegram_charge_id=payment.get("telegram_payment_charge_id"),
                    provider_charge_id=payment.get("provider_payment_charge_id"),
                ),
            )
        except SettlementInvariantError:
            # Logged by settlement; a redelivery would fail the same way.
            return WebhookAction.IGNORED
        if outcome.status == SettlementStatus.NOOP.value:
            return WebhookAction.NOOP
        return WebhookAction.SETTLED

    async def _resend_invoice(
        self, db: AsyncSession, message: dict[str, Any], text: str
    ) -> WebhookAction:
        parts = text.split()
        if len(parts) < 2:
            return WebhookAction.IGNORED
        order = await self._find_invoice_order(db, parts[1])
        chat = message.get("chat")
        if order is None or not order.is_pending or not isinstance(chat, dict):
            return WebhookAction.IGNORED
        config = await self._config.current(db)
        await self._instructions.telegram(config).send_invoice(
            chat["id"], build_invoice(order.correlation_token, _RESEND_LABEL, order.amount)
        )
        logger.info("Invoice for order %s re-sent to chat %s", order.id, chat["id"])
        return WebhookAction.INVOICE_SENT

    async def _find_invoice_order(self, db: AsyncSession, payload: str) -> Order | None:
        if not payload:
            return None
        order = await self._orders.get_by_correlation_token(payload, db)
        if order is None or order.rail != PaymentRail.PUSH_INVOICE.value:
            return None
        return order

    async def _claim(self, update_id: int) -> bool:
        try:
            return await claim_update(await self._redis_factory(), update_id, self._dedup_ttl)
        except RedisError as e:
            logger.warning("Webhook dedup unavailable, processing update %d: %s", update_id, e)
            return True

    async def _release(self, update_id: int) -> None:
        try:
            await release_update(await self._redis_factory(), update_id)
        except RedisError as e:
            logger.warning("Could not release update %d: %s", update_id, e)
