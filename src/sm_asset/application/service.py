"""AssetRegistry — collectible records and their public metadata.

Ownership changes are not exposed here: only settlement rewrites owners.
"""

import logging
from urllib.parse import quote

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.sm_asset.application.schemas import (
    CollectibleListResponse,
    CollectibleMetadata,
    CollectibleResponse,
    RegisterCollectibleRequest,
)
from src.sm_asset.domain.models import Collectible
from src.sm_asset.domain.repository import CollectibleRepositoryProtocol
from src.sm_asset.infrastructure.persistence import CollectibleRepository
from src.sm_common.datetime_utils import utc_now
from src.sm_common.errors import CollectibleListedError, CollectibleNotFoundError, NotOwnerError
from src.sm_common.id_generator import generate_id
from src.sm_listing.domain.repository import ListingRepositoryProtocol
from src.sm_listing.infrastructure.persistence import ListingRepository

logger = logging.getLogger(__name__)


def metadata_url_for(collectible_id: str) -> str:
    return f"{settings.PUBLIC_BASE_URL.rstrip('/')}/nft/metadata?id={quote(collectible_id)}"


class AssetRegistryService:
    def __init__(
        self,
        repo: CollectibleRepositoryProtocol | None = None,
        listings: ListingRepositoryProtocol | None = None,
    ) -> None:
        self._repo: CollectibleRepositoryProtocol = repo or CollectibleRepository()
        self._listings: ListingRepositoryProtocol = listings or ListingRepository()

    async def register(
        self, db: AsyncSession, owner: str, req: RegisterCollectibleRequest
    ) -> CollectibleResponse:
        collectible_id = generate_id("col")
        collectible = Collectible(
            id=collectible_id,
            owner=owner,
            source_asset_ref=req.source_asset_ref,
            name=req.name,
            description=req.description,
            image_ref=req.image_ref,
            chain=req.chain,
            token_ref=req.token_ref,
            metadata_url=metadata_url_for(collectible_id),
            created_at=utc_now(),
        )
        try:
            await self._repo.save(collectible, db)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Collectible %s registered for %s", collectible.id, owner)
        return CollectibleResponse.from_domain(collectible)

    async def get(self, db: AsyncSession, collectible_id: str) -> CollectibleResponse:
        return CollectibleResponse.from_domain(await self._load(db, collectible_id))

    async def list_owned(self, db: AsyncSession, owner: str) -> CollectibleListResponse:
        items = await self._repo.list_by_owner(owner, db)
        return CollectibleListResponse(items=[CollectibleResponse.from_domain(c) for c in items])

    async def metadata(self, db: AsyncSession, collectible_id: str) -> CollectibleMetadata:
        return CollectibleMetadata.from_domain(await self._load(db, collectible_id))

    async def delete(self, db: AsyncSession, collectible_id: str, requester: str) -> None:
        """Delete an owned collectible that is not currently for sale."""
        try:
            collectible = await self._repo.get_for_update(collectible_id, db)
            if collectible is None:
                raise CollectibleNotFoundError(collectible_id)
            if collectible.owner != requester:
                raise NotOwnerError(requester)
            if await self._listings.get_active_by_collectible(collectible_id, db):
                raise CollectibleListedError(collectible_id)
            await self._repo.delete(collectible_id, db)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Collectible %s deleted by %s", collectible_id, requester)

    async def _load(self, db: AsyncSession, collectible_id: str) -> Collectible:
        collectible = await self._repo.get_by_id(collectible_id, db)
        if collectible is None:
            raise CollectibleNotFoundError(collectible_id)
        return collectible
