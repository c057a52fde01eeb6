"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class Currency(str, Enum):
    TON = "TON"
    STARS = "STARS"


class ListingKind(str, Enum):
    FIXED = "FIXED"
    AUCTION = "AUCTION"


class BidStatus(str, Enum):
    PENDING = "PENDING"
    FUNDED = "FUNDED"


class OrderKind(str, Enum):
    """BUY pays for the collectible; BID_ESCROW funds one pending bid."""
    BUY = "BUY"
    BID_ESCROW = "BID_ESCROW"


class PaymentRail(str, Enum):
    """ON_CHAIN is confirmed by polling the TON ledger, PUSH_INVOICE by Telegram webhook."""
    ON_CHAIN = "ON_CHAIN"
    PUSH_INVOICE = "PUSH_INVOICE"

    @property
    def native_currency(self) -> Currency:
        return Currency.TON if self is PaymentRail.ON_CHAIN else Currency.STARS


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


class SettlementStatus(str, Enum):
    APPLIED = "APPLIED"
    # Confirmation for an order that already left PENDING
    NOOP = "NOOP"


class SettlementEventType(str, Enum):
    ORDER_PAID = "ORDER_PAID"
    ORDER_CANCELLED = "ORDER_CANCELLED"
    ORDER_FAILED = "ORDER_FAILED"
    BID_FUNDED = "BID_FUNDED"
    BID_PROMOTED = "BID_PROMOTED"
    OWNERSHIP_TRANSFERRED = "OWNERSHIP_TRANSFERRED"
    LISTING_CLOSED = "LISTING_CLOSED"
    AUCTION_SETTLED = "AUCTION_SETTLED"
