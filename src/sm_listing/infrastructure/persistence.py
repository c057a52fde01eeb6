"""ListingRepository — concrete implementation of ListingRepositoryProtocol.

All queries use raw text() SQL (no ORM).
asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL required for None values.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sm_listing.domain.models import Listing

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_SELECT_COLUMNS = """
    id, collectible_id, seller, currency, kind, active, price,
    ends_at, min_bid, buy_now_price, increment_percent,
    highest_bid_amount, highest_bidder, created_at, updated_at
"""

_INSERT_SQL = text("""
    INSERT INTO listings (id, collectible_id, seller, currency, kind, active, price,
        ends_at, min_bid, buy_now_price, increment_percent)
    VALUES (:id, :collectible_id, :seller, :currency, :kind, :active, :price,
        :ends_at, :min_bid, :buy_now_price, :increment_percent)
""")

_GET_BY_ID_SQL = text(f"SELECT {_SELECT_COLUMNS} FROM listings WHERE id = :id")

_GET_FOR_UPDATE_SQL = text(f"SELECT {_SELECT_COLUMNS} FROM listings WHERE id = :id FOR UPDATE")

_GET_ACTIVE_BY_COLLECTIBLE_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM listings
    WHERE collectible_id = :collectible_id AND active = TRUE
    LIMIT 1
""")

_SET_ACTIVE_SQL = text("""
    UPDATE listings SET active = :active, updated_at = NOW() WHERE id = :id
""")

_UPDATE_HIGHEST_SQL = text("""
    UPDATE listings
    SET highest_bid_amount = :amount, highest_bidder = :bidder, updated_at = NOW()
    WHERE id = :id
""")

_LIST_ACTIVE_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM listings
    WHERE active = TRUE
      AND (CAST(:currency AS TEXT) IS NULL OR currency = CAST(:currency AS TEXT))
    ORDER BY created_at DESC, id DESC
""")

# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _opt_float(value: Any) -> float | None:
    return None if value is None else float(value)


def _row_to_listing(row: Any) -> Listing:
    return Listing(
        id=row.id,
        collectible_id=row.collectible_id,
        seller=row.seller,
        currency=row.currency,
        kind=row.kind,
        active=row.active,
        price=_opt_float(row.price),
        ends_at=row.ends_at,
        min_bid=_opt_float(row.min_bid),
        buy_now_price=_opt_float(row.buy_now_price),
        increment_percent=_opt_float(row.increment_percent),
        highest_bid_amount=_opt_float(row.highest_bid_amount),
        highest_bidder=row.highest_bidder,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class ListingRepository:
    async def save(self, listing: Listing, db: AsyncSession) -> None:
        await db.execute(
            _INSERT_SQL,
            {
                "id": listing.id,
                "collectible_id": listing.collectible_id,
                "seller": listing.seller,
                "currency": listing.currency,
                "kind": listing.kind,
                "active": listing.active,
                "price": listing.price,
                "ends_at": listing.ends_at,
                "min_bid": listing.min_bid,
                "buy_now_price": listing.buy_now_price,
                "increment_percent": listing.increment_percent,
            },
        )

    async def get_by_id(self, listing_id: str, db: AsyncSession) -> Listing | None:
        result = await db.execute(_GET_BY_ID_SQL, {"id": listing_id})
        row = result.fetchone()
        return _row_to_listing(row) if row else None

    async def get_for_update(self, listing_id: str, db: AsyncSession) -> Listing | None:
        result = await db.execute(_GET_FOR_UPDATE_SQL, {"id": listing_id})
        row = result.fetchone()
        return _row_to_listing(row) if row else None

    async def get_active_by_collectible(
        self, collectible_id: str, db: AsyncSession
    ) -> Listing | None:
        result = await db.execute(
            _GET_ACTIVE_BY_COLLECTIBLE_SQL, {"collectible_id": collectible_id}
        )
        row = result.fetchone()
        return _row_to_listing(row) if row else None

    async def set_active(self, listing_id: str, active: bool, db: AsyncSession) -> None:
        await db.execute(_SET_ACTIVE_SQL, {"id": listing_id, "active": active})

    async def update_highest_bid(
        self, listing_id: str, amount: float, bidder: str, db: AsyncSession
    ) -> None:
        await db.execute(
            _UPDATE_HIGHEST_SQL, {"id": listing_id, "amount": amount, "bidder": bidder}
        )

    async def list_active(self, currency: str | None, db: AsyncSession) -> list[Listing]:
        result = await db.execute(_LIST_ACTIVE_SQL, {"currency": currency})
        return [_row_to_listing(row) for row in result.fetchall()]
