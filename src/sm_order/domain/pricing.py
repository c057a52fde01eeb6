"""Order pricing — what a buyer owes for a listing, in the listing currency.

Pure functions; conversion to the rail's unit happens afterwards with
``to_rail_amount`` and the config snapshot's rate.
"""

from datetime import datetime

from src.sm_auction.domain.models import Bid
from src.sm_common.amounts import AMOUNT_TOLERANCE, amounts_match
from src.sm_common.enums import BidStatus, OrderKind
from src.sm_common.errors import NotEligibleToPayError, ValidationError
from src.sm_listing.domain.models import Listing


def correlation_token(order_id: str, listing_id: str, kind: OrderKind) -> str:
    """Opaque token the payer echoes back (tx comment or invoice payload)."""
    return f"order:{order_id}:{listing_id}:{kind.value}"


def resolve_buy_amount(listing: Listing, buyer: str, now: datetime) -> float:
    if not listing.is_auction:
        if listing.price is None or listing.price <= 0:
            raise ValidationError(f"listing {listing.id} has no price")
        return listing.price

    if listing.highest_bidder != buyer:
        raise NotEligibleToPayError("only the highest bidder can pay for an auction")
    highest = listing.highest_bid_amount or 0.0
    if listing.buy_now_price is not None and amounts_match(highest, listing.buy_now_price):
        return listing.buy_now_price
    if listing.has_ended(now) and highest > AMOUNT_TOLERANCE:
        return highest
    raise NotEligibleToPayError("auction has not ended and buy-now was not claimed")


def resolve_escrow_amount(
    listing: Listing, buyer: str, bid: Bid | None, bid_amount: float | None
) -> float:
    if bid is None:
        raise ValidationError("linked bid not found")
    if bid.listing_id != listing.id:
        raise ValidationError(f"bid {bid.id} belongs to another listing")
    if bid.bidder != buyer:
        raise ValidationError(f"bid {bid.id} belongs to another bidder")
    if bid.status != BidStatus.PENDING.value:
        raise ValidationError(f"bid {bid.id} is already {bid.status}")
    amount = bid.amount if bid_amount is None else bid_amount
    if not amounts_match(amount, bid.amount):
        raise ValidationError("escrow amount must equal the bid amount")
    return bid.amount
