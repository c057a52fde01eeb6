"""sm_asset REST endpoints.

POST   /collectibles                 — record a minted collectible for the caller
GET    /collectibles                 — collectibles owned by the caller
GET    /collectibles/{id}            — detail
DELETE /collectibles/{id}            — delete (owner, not listed)
GET    /nft/metadata?id=             — public TEP-64 metadata (mounted at root)
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from src.sm_asset.application.schemas import RegisterCollectibleRequest
from src.sm_asset.application.service import AssetRegistryService
from src.sm_common.database import get_db_session
from src.sm_common.errors import CollectibleNotFoundError
from src.sm_common.response import ApiResponse, respond
from src.sm_gateway.auth.dependencies import get_current_identity

router = APIRouter(prefix="/collectibles", tags=["collectibles"])
metadata_router = APIRouter(tags=["metadata"])

_service = AssetRegistryService()


@router.post("", status_code=status.HTTP_201_CREATED)
async def register_collectible(
    body: RegisterCollectibleRequest,
    request: Request,
    identity: Annotated[str, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    return respond(request, await _service.register(db, identity, body))


@router.get("")
async def list_collectibles(
    request: Request,
    identity: Annotated[str, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    return respond(request, await _service.list_owned(db, identity))


@router.get("/{collectible_id}")
async def get_collectible(
    collectible_id: str,
    request: Request,
    identity: Annotated[str, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    return respond(request, await _service.get(db, collectible_id))


@router.delete("/{collectible_id}")
async def delete_collectible(
    collectible_id: str,
    request: Request,
    identity: Annotated[str, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    await _service.delete(db, collectible_id, identity)
    return respond(request, {"id": collectible_id, "deleted": True})


@metadata_router.get("/nft/metadata")
async def nft_metadata(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    collectible_id: str | None = Query(None, alias="id"),
) -> JSONResponse:
    """Plain JSON (no envelope): indexers expect the bare TEP-64 document."""
    if not collectible_id:
        return JSONResponse({"error": "missing id"}, status_code=400)
    try:
        meta = await _service.metadata(db, collectible_id)
    except CollectibleNotFoundError:
        return JSONResponse({"error": "not found"}, status_code=404)
    return JSONResponse(
        meta.model_dump(), headers={"Cache-Control": "public, max-age=300"}
    )
