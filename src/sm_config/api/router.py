"""Marketplace settings REST endpoints.

GET /settings/public     — current TON→Stars rate (no auth)
GET /admin/settings      — current snapshot (admin)
PUT /admin/settings      — publish a new snapshot version (admin)
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.sm_common.database import get_db_session
from src.sm_common.response import ApiResponse, respond
from src.sm_config.application.schemas import PublishSettingsRequest
from src.sm_config.application.service import MarketplaceConfigService
from src.sm_gateway.auth.dependencies import require_admin

router = APIRouter(tags=["settings"])

_service = MarketplaceConfigService()


@router.get("/settings/public")
async def public_settings(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    return respond(request, await _service.public_settings(db))


@router.get("/admin/settings")
async def get_settings(
    request: Request,
    admin: Annotated[str, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    return respond(request, await _service.get_settings(db))


@router.put("/admin/settings")
async def publish_settings(
    body: PublishSettingsRequest,
    request: Request,
    admin: Annotated[str, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    return respond(request, await _service.publish(db, body, admin))
