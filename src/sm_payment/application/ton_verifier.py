"""TonPaymentVerifier — poll the destination wallet for the order's transfer."""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.sm_common.enums import OrderStatus, PaymentRail
from src.sm_common.errors import (
    ExternalServiceUnavailableError,
    OrderNotFoundError,
    PaymentConfigMissingError,
    ValidationError,
)
from src.sm_order.domain.models import PaymentProof
from src.sm_order.domain.repository import OrderRepositoryProtocol
from src.sm_order.infrastructure.persistence import OrderRepository
from src.sm_payment.domain.instructions import find_transaction, transaction_hash
from src.sm_payment.domain.models import RetryPolicy, VerificationResult
from src.sm_payment.infrastructure.ton_client import TonApiClient
from src.sm_settlement.application.service import (
    SettlementCoordinator,
    get_settlement_coordinator,
)

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


def default_retry_policy() -> RetryPolicy:
    return RetryPolicy(delays=tuple(settings.TON_VERIFY_DELAYS_SECONDS))


class TonPaymentVerifier:
    def __init__(
        self,
        orders: OrderRepositoryProtocol | None = None,
        settlement: SettlementCoordinator | None = None,
        ton: TonApiClient | None = None,
        policy: RetryPolicy | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._orders: OrderRepositoryProtocol = orders or OrderRepository()
        self._settlement = settlement or get_settlement_coordinator()
        self._ton = ton or TonApiClient()
        self._policy = policy or default_retry_policy()
        self._sleep = sleep

    async def verify(self, db: AsyncSession, order_id: str) -> VerificationResult:
        order = await self._orders.get_by_id(order_id, db)
        if order is None:
            raise OrderNotFoundError(order_id)
        if order.rail != PaymentRail.ON_CHAIN.value:
            raise ValidationError(f"order {order_id} is not an on-chain payment")
        if order.status == OrderStatus.PAID.value:
            return VerificationResult(order_id, True, order.status, tx_hash=order.tx_hash)
        if not order.is_pending:
            return VerificationResult(order_id, False, order.status)
        if not order.destination:
            raise PaymentConfigMissingError(f"order {order_id} has no destination wallet")
        # Return the connection to the pool while polling; settlement opens its own.
        await db.rollback()

        reached = False
        for attempt, delay in enumerate(self._policy.delays, start=1):
            if delay > 0:
                await self._sleep(delay)
            try:
                transactions = await self._ton.recent_transactions(order.destination)
            except ExternalServiceUnavailableError as e:
                logger.warning(
                    "Verify %s attempt %d/%d: %s",
                    order_id,
                    attempt,
                    self._policy.attempts,
                    e.message,
                )
                continue
            reached = True
            tx = find_transaction(transactions, order.correlation_token)
            if tx is None:
                logger.debug("Verify %s attempt %d: no matching transfer", order_id, attempt)
                continue
            tx_hash = transaction_hash(tx)
            outcome = await self._settlement.confirm_payment(
                db, order_id, PaymentProof(tx_hash=tx_hash or None)
            )
            return VerificationResult(
                order_id,
                outcome.order_status == OrderStatus.PAID.value,
                outcome.order_status,
                tx_hash=tx_hash or None,
            )

        return VerificationResult(
            order_id, False, OrderStatus.PENDING.value, retry_later=not reached
        )
