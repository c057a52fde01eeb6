"""Append-only settlement_events writer.

Called from SettlementCoordinator and the order ledger within a transaction.
"""
import json

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

_INSERT_EVENT_SQL = text("""
    INSERT INTO settlement_events (event_type, listing_id, order_id, payload)
    VALUES (:event_type, :listing_id, :order_id, :payload)
""")


async def write_settlement_event(
    event_type: str,
    listing_id: str,
    order_id: str | None,
    payload: dict[str, object],
    db: AsyncSession,
) -> None:
    """Insert one row into settlement_events within the caller's transaction."""
    await db.execute(
        _INSERT_EVENT_SQL,
        {
            "event_type": event_type,
            "listing_id": listing_id,
            "order_id": order_id,
            "payload": json.dumps(payload),
        },
    )
