"""Settlement outcomes — pure dataclasses."""
from dataclasses import dataclass


@dataclass
class SettlementOutcome:
    """Result of one payment confirmation.

    NOOP means the order had already left PENDING (duplicate or late
    delivery); ``order_status`` is then its current status.
    """

    order_id: str
    status: str  # APPLIED / NOOP
    order_status: str


@dataclass
class AuctionSettlement:
    listing_id: str
    collectible_id: str
    winner: str
    amount: float
    currency: str
