# src/sm_order/application/schemas.py
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from src.sm_common.enums import PaymentRail
from src.sm_order.domain.models import Order


class CreateOrderRequest(BaseModel):
    listing_id: str
    kind: Literal["BUY", "BID_ESCROW"]
    rail: Literal["ON_CHAIN", "PUSH_INVOICE"]
    linked_bid_id: str | None = None
    # Defaults to the linked bid's amount; must match it when given.
    bid_amount: float | None = Field(None, gt=0)


class OrderResponse(BaseModel):
    id: str
    listing_id: str
    buyer: str
    kind: str
    rail: str
    amount: float
    currency: str
    listing_amount: float
    listing_currency: str
    rate: float
    config_version: int
    status: str
    correlation_token: str
    linked_bid_id: str | None = None
    payment_uri: str | None = None
    destination: str | None = None
    tx_hash: str | None = None
    telegram_charge_id: str | None = None
    created_at: datetime | None = None
    paid_at: datetime | None = None

    @classmethod
    def from_domain(cls, order: Order) -> "OrderResponse":
        return cls(
            id=order.id,
            listing_id=order.listing_id,
            buyer=order.buyer,
            kind=order.kind,
            rail=order.rail,
            amount=order.amount,
            currency=PaymentRail(order.rail).native_currency.value,
            listing_amount=order.listing_amount,
            listing_currency=order.listing_currency,
            rate=order.rate,
            config_version=order.config_version,
            status=order.status,
            correlation_token=order.correlation_token,
            linked_bid_id=order.linked_bid_id,
            payment_uri=order.payment_uri,
            destination=order.destination,
            tx_hash=order.tx_hash,
            telegram_charge_id=order.telegram_charge_id,
            created_at=order.created_at,
            paid_at=order.paid_at,
        )


class OrderListResponse(BaseModel):
    items: list[OrderResponse]
    next_cursor: str | None
    has_more: bool


class ExpireOrdersRequest(BaseModel):
    older_than_minutes: int = Field(60, ge=1)
    limit: int = Field(100, ge=1, le=1000)


class ExpireOrdersResponse(BaseModel):
    expired_order_ids: list[str]


class VerificationResponse(BaseModel):
    order_id: str
    verified: bool
    status: str
    retry_later: bool
    tx_hash: str | None = None
