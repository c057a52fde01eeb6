"""sm_auction REST endpoints.

POST /auctions/{id}/bids       — place a PENDING bid (fund it with a BID_ESCROW order)
GET  /auctions/{id}/bids       — bids on the auction, highest first
POST /auctions/{id}/buy-now    — claim buy-now leadership (pay with a BUY order)
POST /auctions/{id}/finalize   — transfer an ended auction to its funded winner
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.sm_auction.application.schemas import BidListResponse, BidResponse, PlaceBidRequest
from src.sm_auction.application.service import get_auction_engine
from src.sm_common.database import get_db_session
from src.sm_common.enums import PaymentRail
from src.sm_common.response import ApiResponse, respond
from src.sm_gateway.auth.dependencies import get_current_identity
from src.sm_listing.application.schemas import ListingResponse
from src.sm_settlement.application.service import get_settlement_coordinator

router = APIRouter(prefix="/auctions", tags=["auctions"])


@router.post("/{listing_id}/bids", status_code=status.HTTP_201_CREATED)
async def place_bid(
    listing_id: str,
    body: PlaceBidRequest,
    request: Request,
    identity: Annotated[str, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    bid = await get_auction_engine().place_bid(
        listing_id, identity, body.amount, PaymentRail(body.rail), db
    )
    return respond(request, BidResponse.from_domain(bid))


@router.get("/{listing_id}/bids")
async def list_bids(
    listing_id: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    bids = await get_auction_engine().list_bids(listing_id, db)
    return respond(request, BidListResponse(items=[BidResponse.from_domain(b) for b in bids]))


@router.post("/{listing_id}/buy-now")
async def buy_now(
    listing_id: str,
    request: Request,
    identity: Annotated[str, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    listing = await get_auction_engine().buy_now(listing_id, identity, db)
    return respond(request, ListingResponse.from_domain(listing))


@router.post("/{listing_id}/finalize")
async def finalize(
    listing_id: str,
    request: Request,
    identity: Annotated[str, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    settled = await get_settlement_coordinator().finalize_auction_settlement(db, listing_id)
    return respond(
        request,
        {
            "listing_id": settled.listing_id,
            "collectible_id": settled.collectible_id,
            "winner": settled.winner,
            "amount": settled.amount,
            "currency": settled.currency,
        },
    )
