"""sm_order REST endpoints.

POST /orders                   — create a BUY or BID_ESCROW order with payment instruction
GET  /orders                   — caller's orders (cursor pagination)
GET  /orders/{id}              — detail (buyer only)
POST /orders/{id}/cancel       — cancel own PENDING order
POST /orders/{id}/verify       — poll the TON ledger for an ON_CHAIN order
POST /admin/orders/expire      — fail stale PENDING orders (admin)
"""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.sm_common.database import get_db_session
from src.sm_common.response import ApiResponse, respond
from src.sm_gateway.auth.dependencies import get_current_identity, require_admin
from src.sm_order.application.schemas import (
    CreateOrderRequest,
    ExpireOrdersRequest,
    VerificationResponse,
)
from src.sm_order.application.service import OrderLedger
from src.sm_payment.application.ton_verifier import TonPaymentVerifier

router = APIRouter(prefix="/orders", tags=["orders"])
admin_router = APIRouter(prefix="/admin/orders", tags=["admin"])

_ledger = OrderLedger()
_verifier = TonPaymentVerifier()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_order(
    body: CreateOrderRequest,
    request: Request,
    identity: Annotated[str, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    return respond(request, await _ledger.create_order(db, identity, body))


@router.get("")
async def list_orders(
    request: Request,
    identity: Annotated[str, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    status: Literal["PENDING", "PAID", "FAILED", "CANCELLED"] | None = Query(
        None, description="Filter by order status"
    ),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    cursor: str | None = Query(None, description="Pagination cursor (order ID)"),
) -> ApiResponse:
    return respond(request, await _ledger.list_orders(db, identity, status, limit, cursor))


@router.get("/{order_id}")
async def get_order(
    order_id: str,
    request: Request,
    identity: Annotated[str, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    return respond(request, await _ledger.get_order(db, order_id, identity))


@router.post("/{order_id}/cancel")
async def cancel_order(
    order_id: str,
    request: Request,
    identity: Annotated[str, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    return respond(request, await _ledger.cancel_order(db, order_id, identity))


@router.post("/{order_id}/verify")
async def verify_order(
    order_id: str,
    request: Request,
    identity: Annotated[str, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _verifier.verify(db, order_id)
    return respond(
        request,
        VerificationResponse(
            order_id=result.order_id,
            verified=result.verified,
            status=result.status,
            retry_later=result.retry_later,
            tx_hash=result.tx_hash,
        ),
    )


@admin_router.post("/expire")
async def expire_orders(
    body: ExpireOrdersRequest,
    request: Request,
    admin: Annotated[str, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    return respond(
        request, await _ledger.expire_pending_orders(db, body.older_than_minutes, body.limit)
    )
