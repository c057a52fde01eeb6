"""OrderRepository — concrete implementation of OrderRepositoryProtocol.

All queries use raw text() SQL (no ORM).
asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL required for None values.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sm_order.domain.models import Order, PaymentProof

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_SELECT_COLUMNS = """
    id, listing_id, buyer, kind, rail, amount, listing_amount, listing_currency,
    rate, config_version, correlation_token, status, linked_bid_id,
    payment_uri, destination, tx_hash, telegram_charge_id, provider_charge_id,
    created_at, updated_at, paid_at
"""

_INSERT_ORDER_SQL = text("""
    INSERT INTO orders (
        id, listing_id, buyer, kind, rail, amount, listing_amount, listing_currency,
        rate, config_version, correlation_token, status, linked_bid_id,
        payment_uri, destination, created_at
    ) VALUES (
        :id, :listing_id, :buyer, :kind, :rail, :amount, :listing_amount, :listing_currency,
        :rate, :config_version, :correlation_token, :status, :linked_bid_id,
        :payment_uri, :destination, :created_at
    )
""")

_GET_ORDER_BY_ID_SQL = text(f"SELECT {_SELECT_COLUMNS} FROM orders WHERE id = :id")

_GET_ORDER_BY_TOKEN_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM orders WHERE correlation_token = :correlation_token
""")

# Compare-and-set: only a PENDING row moves, and only once.
_TRANSITION_SQL = text(f"""
    UPDATE orders
    SET status = CAST(:new_status AS TEXT),
        tx_hash = COALESCE(CAST(:tx_hash AS TEXT), tx_hash),
        telegram_charge_id = COALESCE(CAST(:telegram_charge_id AS TEXT), telegram_charge_id),
        provider_charge_id = COALESCE(CAST(:provider_charge_id AS TEXT), provider_charge_id),
        paid_at = CASE WHEN CAST(:new_status AS TEXT) = 'PAID' THEN :at ELSE paid_at END,
        updated_at = :at
    WHERE id = :id AND status = 'PENDING'
    RETURNING {_SELECT_COLUMNS}
""")

_LIST_ORDERS_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM orders
    WHERE buyer = :buyer
      AND (CAST(:status AS TEXT) IS NULL OR status = CAST(:status AS TEXT))
      AND (CAST(:cursor_id AS TEXT) IS NULL OR id < :cursor_id)
    ORDER BY id DESC
    LIMIT :limit
""")

_LIST_STALE_PENDING_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM orders
    WHERE status = 'PENDING' AND created_at < :created_before
    ORDER BY created_at ASC
    LIMIT :limit
""")


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_order(row: Any) -> Order:
    """Convert a DB result row to an Order domain object."""
    return Order(
        id=row.id,
        listing_id=row.listing_id,
        buyer=row.buyer,
        kind=row.kind,
        rail=row.rail,
        amount=float(row.amount),
        listing_amount=float(row.listing_amount),
        listing_currency=row.listing_currency,
        rate=float(row.rate),
        config_version=row.config_version,
        correlation_token=row.correlation_token,
        status=row.status,
        linked_bid_id=row.linked_bid_id,
        payment_uri=row.payment_uri,
        destination=row.destination,
        tx_hash=row.tx_hash,
        telegram_charge_id=row.telegram_charge_id,
        provider_charge_id=row.provider_charge_id,
        created_at=row.created_at,
        updated_at=row.updated_at,
        paid_at=row.paid_at,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class OrderRepository:
    """Concrete implementation of OrderRepositoryProtocol using raw SQL."""

    async def save(self, order: Order, db: AsyncSession) -> None:
        await db.execute(
            _INSERT_ORDER_SQL,
            {
                "id": order.id,
                "listing_id": order.listing_id,
                "buyer": order.buyer,
                "kind": order.kind,
                "rail": order.rail,
                "amount": order.amount,
                "listing_amount": order.listing_amount,
                "listing_currency": order.listing_currency,
                "rate": order.rate,
                "config_version": order.config_version,
                "correlation_token": order.correlation_token,
                "status": order.status,
                "linked_bid_id": order.linked_bid_id,
                "payment_uri": order.payment_uri,
                "destination": order.destination,
                "created_at": order.created_at,
            },
        )

    async def get_by_id(self, order_id: str, db: AsyncSession) -> Order | None:
        result = await db.execute(_GET_ORDER_BY_ID_SQL, {"id": order_id})
        row = result.fetchone()
        return _row_to_order(row) if row else None

    async def get_by_correlation_token(
        self, correlation_token: str, db: AsyncSession
    ) -> Order | None:
        result = await db.execute(
            _GET_ORDER_BY_TOKEN_SQL, {"correlation_token": correlation_token}
        )
        row = result.fetchone()
        return _row_to_order(row) if row else None

    async def transition_from_pending(
        self,
        order_id: str,
        new_status: str,
        proof: PaymentProof | None,
        at: datetime,
        db: AsyncSession,
    ) -> Order | None:
        proof = proof or PaymentProof()
        result = await db.execute(
            _TRANSITION_SQL,
            {
                "id": order_id,
                "new_status": new_status,
                "tx_hash": proof.tx_hash,
                "telegram_charge_id": proof.telegram_charge_id,
                "provider_charge_id": proof.provider_charge_id,
                "at": at,
            },
        )
        row = result.fetchone()
        return _row_to_order(row) if row else None

    async def list_by_buyer(
        self,
        buyer: str,
        status: str | None,
        limit: int,
        cursor_id: str | None,
        db: AsyncSession,
    ) -> list[Order]:
        result = await db.execute(
            _LIST_ORDERS_SQL,
            {"buyer": buyer, "status": status, "cursor_id": cursor_id, "limit": limit},
        )
        return [_row_to_order(row) for row in result.fetchall()]

    async def list_stale_pending(
        self, created_before: datetime, limit: int, db: AsyncSession
    ) -> list[Order]:
        result = await db.execute(
            _LIST_STALE_PENDING_SQL, {"created_before": created_before, "limit": limit}
        )
        return [_row_to_order(row) for row in result.fetchall()]
