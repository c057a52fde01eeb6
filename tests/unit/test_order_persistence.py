# tests/unit/test_order_persistence.py
"""Unit tests for OrderRepository using MagicMock AsyncSession."""
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from fakes import make_order

from src.sm_order.domain.models import PaymentProof
from src.sm_order.infrastructure.persistence import OrderRepository

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _make_row(**kwargs: Any) -> MagicMock:
    """Create a mock row with all Order fields."""
    row = MagicMock()
    row.id = kwargs.get("id", "ord_1")
    row.listing_id = kwargs.get("listing_id", "lst_fixed")
    row.buyer = kwargs.get("buyer", "bob")
    row.kind = kwargs.get("kind", "BUY")
    row.rail = kwargs.get("rail", "ON_CHAIN")
    row.amount = kwargs.get("amount", Decimal("5.000000000"))
    row.listing_amount = kwargs.get("listing_amount", Decimal("5"))
    row.listing_currency = kwargs.get("listing_currency", "TON")
    row.rate = kwargs.get("rate", Decimal("250"))
    row.config_version = kwargs.get("config_version", 1)
    row.correlation_token = kwargs.get("correlation_token", "order:ord_1:lst_fixed:BUY")
    row.status = kwargs.get("status", "PENDING")
    row.linked_bid_id = kwargs.get("linked_bid_id")
    row.payment_uri = kwargs.get("payment_uri")
    row.destination = kwargs.get("destination", "EQDestWallet")
    row.tx_hash = kwargs.get("tx_hash")
    row.telegram_charge_id = kwargs.get("telegram_charge_id")
    row.provider_charge_id = kwargs.get("provider_charge_id")
    row.created_at = kwargs.get("created_at", NOW)
    row.updated_at = kwargs.get("updated_at")
    row.paid_at = kwargs.get("paid_at")
    return row


def _session(fetchone: Any = None, fetchall: list | None = None) -> AsyncMock:
    db = AsyncMock()
    result_mock = MagicMock()
    result_mock.fetchone.return_value = fetchone
    result_mock.fetchall.return_value = fetchall or []
    db.execute.return_value = result_mock
    return db


class TestOrderRepository:
    @pytest.mark.asyncio
    async def test_save_executes_insert(self) -> None:
        db = AsyncMock()
        await OrderRepository().save(make_order(), db)

        db.execute.assert_awaited_once()
        params = db.execute.call_args[0][1]
        assert params["correlation_token"] == "order:ord_1:lst_fixed:BUY"
        assert params["status"] == "PENDING"

    @pytest.mark.asyncio
    async def test_get_by_id_maps_numeric_columns(self) -> None:
        order = await OrderRepository().get_by_id("ord_1", _session(_make_row()))

        assert order is not None
        assert order.amount == 5.0
        assert isinstance(order.amount, float)
        assert isinstance(order.rate, float)

    @pytest.mark.asyncio
    async def test_get_by_id_missing(self) -> None:
        assert await OrderRepository().get_by_id("ord_x", _session(None)) is None

    @pytest.mark.asyncio
    async def test_transition_returns_updated_row(self) -> None:
        db = _session(_make_row(status="PAID", tx_hash="h1", paid_at=NOW))

        order = await OrderRepository().transition_from_pending(
            "ord_1", "PAID", PaymentProof(tx_hash="h1"), NOW, db
        )

        assert order is not None
        assert order.status == "PAID"
        params = db.execute.call_args[0][1]
        assert params == {
            "id": "ord_1",
            "new_status": "PAID",
            "tx_hash": "h1",
            "telegram_charge_id": None,
            "provider_charge_id": None,
            "at": NOW,
        }

    @pytest.mark.asyncio
    async def test_transition_lost_race_returns_none(self) -> None:
        order = await OrderRepository().transition_from_pending(
            "ord_1", "CANCELLED", None, NOW, _session(None)
        )
        assert order is None

    @pytest.mark.asyncio
    async def test_list_by_buyer_passes_cursor(self) -> None:
        db = _session(fetchall=[_make_row(id="ord_3"), _make_row(id="ord_2")])

        orders = await OrderRepository().list_by_buyer("bob", "PENDING", 3, "ord_4", db)

        assert [o.id for o in orders] == ["ord_3", "ord_2"]
        params = db.execute.call_args[0][1]
        assert params == {"buyer": "bob", "status": "PENDING", "cursor_id": "ord_4", "limit": 3}
