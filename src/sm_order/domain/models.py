"""Order domain model — pure dataclass, no SQLAlchemy dependency."""
from dataclasses import dataclass
from datetime import datetime


@dataclass
class PaymentProof:
    """Evidence attached to an order when its rail confirms payment."""

    tx_hash: str | None = None
    telegram_charge_id: str | None = None
    provider_charge_id: str | None = None


@dataclass
class Order:
    """One payment attempt for a listing.

    ``amount`` is in the rail's native unit (TON for ON_CHAIN, Stars for
    PUSH_INVOICE) and is frozen at creation together with the rate and the
    config version it was priced with.
    """

    id: str
    listing_id: str
    buyer: str
    kind: str  # BUY / BID_ESCROW
    rail: str  # ON_CHAIN / PUSH_INVOICE
    amount: float
    listing_amount: float
    listing_currency: str
    rate: float
    config_version: int
    correlation_token: str
    status: str = "PENDING"
    linked_bid_id: str | None = None
    payment_uri: str | None = None
    destination: str | None = None
    tx_hash: str | None = None
    telegram_charge_id: str | None = None
    provider_charge_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    paid_at: datetime | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == "PENDING"
