"""Auction rules — pure functions over a Listing snapshot.

Callers must hold the listing row lock so the snapshot cannot go stale
between the check and the write that depends on it.
"""

from datetime import datetime

from src.sm_common.amounts import AMOUNT_TOLERANCE
from src.sm_common.errors import AuctionClosedError, BidTooLowError, ValidationError
from src.sm_listing.domain.models import AUCTION_INCREMENT_PERCENT, Listing


def check_auction_open(listing: Listing, now: datetime) -> None:
    """Raise AuctionClosedError unless the listing is an active, unexpired auction."""
    if not listing.active:
        raise AuctionClosedError(listing.id, "listing is not active")
    if not listing.is_auction:
        raise AuctionClosedError(listing.id, "listing is not an auction")
    if listing.ends_at is None or now > listing.ends_at:
        raise AuctionClosedError(listing.id, "auction expired")


def min_next_bid(listing: Listing) -> float:
    """base * (1 + increment%), base = max(min_bid, current highest)."""
    base = max(listing.min_bid or 0.0, listing.highest_bid_amount or 0.0)
    percent = (
        listing.increment_percent
        if listing.increment_percent is not None
        else AUCTION_INCREMENT_PERCENT
    )
    return base * (1 + percent / 100)


def check_bid_amount(listing: Listing, amount: float) -> None:
    if amount <= 0:
        raise ValidationError("bid amount must be positive")
    min_next = min_next_bid(listing)
    if amount + AMOUNT_TOLERANCE < min_next:
        raise BidTooLowError(min_next, listing.currency)


def takes_lead(listing: Listing, amount: float) -> bool:
    """Whether a funded bid of ``amount`` becomes the auction's highest bid."""
    if listing.highest_bid_amount is None:
        return True
    return amount >= listing.highest_bid_amount + AMOUNT_TOLERANCE
