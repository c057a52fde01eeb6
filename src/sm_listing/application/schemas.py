"""Pydantic schemas for listing endpoints."""

from typing import Literal

from pydantic import BaseModel, Field, model_validator

from src.sm_asset.application.schemas import CollectibleResponse
from src.sm_listing.domain.models import Listing


class CreateFixedListingRequest(BaseModel):
    collectible_id: str
    price: float = Field(..., gt=0)
    currency: Literal["TON", "STARS"]


class CreateAuctionListingRequest(BaseModel):
    collectible_id: str
    currency: Literal["TON", "STARS"]
    min_bid: float = Field(..., gt=0)
    buy_now_price: float | None = Field(None, gt=0)

    @model_validator(mode="after")
    def buy_now_above_min_bid(self) -> "CreateAuctionListingRequest":
        if self.buy_now_price is not None and self.buy_now_price <= self.min_bid:
            raise ValueError("buy_now_price must be greater than min_bid")
        return self


class ListingResponse(BaseModel):
    id: str
    collectible_id: str
    seller: str
    currency: str
    kind: str
    active: bool
    price: float | None
    ends_at: str | None
    min_bid: float | None
    buy_now_price: float | None
    increment_percent: float | None
    highest_bid_amount: float | None
    highest_bidder: str | None

    @classmethod
    def from_domain(cls, listing: Listing) -> "ListingResponse":
        return cls(
            id=listing.id,
            collectible_id=listing.collectible_id,
            seller=listing.seller,
            currency=listing.currency,
            kind=listing.kind,
            active=listing.active,
            price=listing.price,
            ends_at=listing.ends_at.isoformat() if listing.ends_at else None,
            min_bid=listing.min_bid,
            buy_now_price=listing.buy_now_price,
            increment_percent=listing.increment_percent,
            highest_bid_amount=listing.highest_bid_amount,
            highest_bidder=listing.highest_bidder,
        )


class MarketplaceItem(BaseModel):
    """Active listing joined with the collectible it sells."""

    listing: ListingResponse
    collectible: CollectibleResponse


class MarketplaceResponse(BaseModel):
    items: list[MarketplaceItem]
