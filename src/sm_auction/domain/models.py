"""Bid domain model — pure dataclass, no SQLAlchemy dependency."""
from dataclasses import dataclass
from datetime import datetime


@dataclass
class Bid:
    id: str
    listing_id: str
    bidder: str
    amount: float  # listing currency
    rail: str  # ON_CHAIN / PUSH_INVOICE the bidder intends to escrow with
    status: str = "PENDING"  # PENDING → FUNDED, never back
    correlation_token: str | None = None  # token of the order that funded it
    created_at: datetime | None = None
    funded_at: datetime | None = None

    @property
    def is_funded(self) -> bool:
        return self.status == "FUNDED"
