"""sm_listing REST endpoints.

GET  /listings                  — active listings joined with their collectible
GET  /listings/{id}             — detail
POST /listings/fixed            — fixed-price listing
POST /listings/auction          — 24h auction listing
POST /listings/{id}/cancel      — deactivate (seller or current owner)
"""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.sm_common.database import get_db_session
from src.sm_common.response import ApiResponse, respond
from src.sm_gateway.auth.dependencies import get_current_identity
from src.sm_listing.application.schemas import (
    CreateAuctionListingRequest,
    CreateFixedListingRequest,
)
from src.sm_listing.application.service import ListingService

router = APIRouter(prefix="/listings", tags=["listings"])

_service = ListingService()


@router.get("")
async def list_active(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    currency: Literal["TON", "STARS"] | None = Query(None),
) -> ApiResponse:
    return respond(request, await _service.list_active(db, currency))


@router.get("/{listing_id}")
async def get_listing(
    listing_id: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    return respond(request, await _service.get_listing(db, listing_id))


@router.post("/fixed", status_code=status.HTTP_201_CREATED)
async def create_fixed(
    body: CreateFixedListingRequest,
    request: Request,
    identity: Annotated[str, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    return respond(request, await _service.create_fixed_listing(db, identity, body))


@router.post("/auction", status_code=status.HTTP_201_CREATED)
async def create_auction(
    body: CreateAuctionListingRequest,
    request: Request,
    identity: Annotated[str, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    return respond(request, await _service.create_auction_listing(db, identity, body))


@router.post("/{listing_id}/cancel")
async def cancel_listing(
    listing_id: str,
    request: Request,
    identity: Annotated[str, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    return respond(request, await _service.deactivate(db, listing_id, identity))
