"""Listing domain model — pure dataclass, no business logic."""

from dataclasses import dataclass
from datetime import datetime

AUCTION_DURATION_HOURS = 24
AUCTION_INCREMENT_PERCENT = 20.0


@dataclass
class Listing:
    """An offer to sell one collectible.

    FIXED listings use ``price``. AUCTION listings use the auction block;
    ``highest_*`` stay None until a funded bid (or buy-now) takes the lead.
    """

    id: str
    collectible_id: str
    seller: str
    currency: str  # TON / STARS
    kind: str  # FIXED / AUCTION
    active: bool = True
    # Fixed
    price: float | None = None
    # Auction
    ends_at: datetime | None = None
    min_bid: float | None = None
    buy_now_price: float | None = None
    increment_percent: float | None = None
    highest_bid_amount: float | None = None
    highest_bidder: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_auction(self) -> bool:
        return self.kind == "AUCTION"

    def has_ended(self, now: datetime) -> bool:
        return self.ends_at is not None and now >= self.ends_at
