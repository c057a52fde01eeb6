# src/sm_order/domain/repository.py
"""OrderRepository Protocol — interface contract for persistence layer.

Status changes only go through ``transition_from_pending``: a single
compare-and-set statement that returns None when the order already left
PENDING.
"""
from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.sm_order.domain.models import Order, PaymentProof


class OrderRepositoryProtocol(Protocol):
    async def save(self, order: Order, db: AsyncSession) -> None: ...

    async def get_by_id(self, order_id: str, db: AsyncSession) -> Order | None: ...

    async def get_by_correlation_token(
        self, correlation_token: str, db: AsyncSession
    ) -> Order | None: ...

    async def transition_from_pending(
        self,
        order_id: str,
        new_status: str,
        proof: PaymentProof | None,
        at: datetime,
        db: AsyncSession,
    ) -> Order | None: ...

    async def list_by_buyer(
        self,
        buyer: str,
        status: str | None,
        limit: int,
        cursor_id: str | None,
        db: AsyncSession,
    ) -> list[Order]: ...

    async def list_stale_pending(
        self, created_before: datetime, limit: int, db: AsyncSession
    ) -> list[Order]: ...
