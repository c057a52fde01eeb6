"""Pydantic schemas for auction endpoints."""

from typing import Literal

from pydantic import BaseModel, Field

from src.sm_auction.domain.models import Bid


class PlaceBidRequest(BaseModel):
    amount: float = Field(..., gt=0, description="In the listing currency")
    rail: Literal["ON_CHAIN", "PUSH_INVOICE"]


class BidResponse(BaseModel):
    id: str
    listing_id: str
    bidder: str
    amount: float
    rail: str
    status: str
    created_at: str | None
    funded_at: str | None

    @classmethod
    def from_domain(cls, bid: Bid) -> "BidResponse":
        return cls(
            id=bid.id,
            listing_id=bid.listing_id,
            bidder=bid.bidder,
            amount=bid.amount,
            rail=bid.rail,
            status=bid.status,
            created_at=bid.created_at.isoformat() if bid.created_at else None,
            funded_at=bid.funded_at.isoformat() if bid.funded_at else None,
        )


class BidListResponse(BaseModel):
    items: list[BidResponse]
