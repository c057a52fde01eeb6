# src/sm_auction/infrastructure/persistence.py
"""BidRepository — raw SQL persistence implementation."""
from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sm_auction.domain.models import Bid

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_INSERT_BID_SQL = text("""
    INSERT INTO bids (id, listing_id, bidder, amount, rail, status, created_at)
    VALUES (:id, :listing_id, :bidder, :amount, :rail, :status, :created_at)
""")

_SELECT_COLUMNS = """
    id, listing_id, bidder, amount, rail, status, correlation_token,
    created_at, funded_at
"""

_GET_BID_BY_ID_SQL = text(f"SELECT {_SELECT_COLUMNS} FROM bids WHERE id = :id")

_GET_BID_FOR_UPDATE_SQL = text(f"SELECT {_SELECT_COLUMNS} FROM bids WHERE id = :id FOR UPDATE")

# Guarded so a bid can only be funded once even if called twice.
_MARK_FUNDED_SQL = text("""
    UPDATE bids
    SET status = 'FUNDED', correlation_token = :correlation_token, funded_at = :funded_at
    WHERE id = :id AND status = 'PENDING'
""")

_LIST_BY_LISTING_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM bids
    WHERE listing_id = :listing_id
      AND (CAST(:status AS TEXT) IS NULL OR status = CAST(:status AS TEXT))
    ORDER BY amount DESC, created_at ASC
""")


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_bid(row: Any) -> Bid:
    return Bid(
        id=row.id,
        listing_id=row.listing_id,
        bidder=row.bidder,
        amount=float(row.amount),
        rail=row.rail,
        status=row.status,
        correlation_token=row.correlation_token,
        created_at=row.created_at,
        funded_at=row.funded_at,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class BidRepository:
    """Concrete implementation of BidRepositoryProtocol using raw SQL."""

    async def save(self, bid: Bid, db: AsyncSession) -> None:
        await db.execute(
            _INSERT_BID_SQL,
            {
                "id": bid.id,
                "listing_id": bid.listing_id,
                "bidder": bid.bidder,
                "amount": bid.amount,
                "rail": bid.rail,
                "status": bid.status,
                "created_at": bid.created_at,
            },
        )

    async def get_by_id(self, bid_id: str, db: AsyncSession) -> Bid | None:
        result = await db.execute(_GET_BID_BY_ID_SQL, {"id": bid_id})
        row = result.fetchone()
        return _row_to_bid(row) if row else None

    async def get_for_update(self, bid_id: str, db: AsyncSession) -> Bid | None:
        result = await db.execute(_GET_BID_FOR_UPDATE_SQL, {"id": bid_id})
        row = result.fetchone()
        return _row_to_bid(row) if row else None

    async def mark_funded(
        self, bid_id: str, correlation_token: str, funded_at: datetime, db: AsyncSession
    ) -> None:
        await db.execute(
            _MARK_FUNDED_SQL,
            {"id": bid_id, "correlation_token": correlation_token, "funded_at": funded_at},
        )

    async def list_by_listing(
        self, listing_id: str, status: str | None, db: AsyncSession
    ) -> list[Bid]:
        result = await db.execute(
            _LIST_BY_LISTING_SQL, {"listing_id": listing_id, "status": status}
        )
        return [_row_to_bid(row) for row in result.fetchall()]
