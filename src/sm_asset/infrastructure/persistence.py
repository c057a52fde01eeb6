# src/sm_asset/infrastructure/persistence.py
"""CollectibleRepository — raw SQL persistence implementation."""
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sm_asset.domain.models import Collectible

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_INSERT_SQL = text("""
    INSERT INTO collectibles (id, owner, source_asset_ref, name, description,
        image_ref, chain, token_ref, metadata_url)
    VALUES (:id, :owner, :source_asset_ref, :name, :description,
        :image_ref, :chain, :token_ref, :metadata_url)
""")

_SELECT_COLUMNS = """
    id, owner, source_asset_ref, name, description, image_ref, chain,
    token_ref, metadata_url, created_at, updated_at
"""

_GET_BY_ID_SQL = text(f"SELECT {_SELECT_COLUMNS} FROM collectibles WHERE id = :id")

_GET_FOR_UPDATE_SQL = text(
    f"SELECT {_SELECT_COLUMNS} FROM collectibles WHERE id = :id FOR UPDATE"
)

_UPDATE_OWNER_SQL = text("""
    UPDATE collectibles SET owner = :owner, updated_at = NOW() WHERE id = :id
""")

_DELETE_SQL = text("DELETE FROM collectibles WHERE id = :id")

_LIST_BY_OWNER_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM collectibles
    WHERE owner = :owner
    ORDER BY created_at DESC, id DESC
""")


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_collectible(row: Any) -> Collectible:
    return Collectible(
        id=row.id,
        owner=row.owner,
        source_asset_ref=row.source_asset_ref,
        name=row.name,
        description=row.description,
        image_ref=row.image_ref,
        chain=row.chain,
        token_ref=row.token_ref,
        metadata_url=row.metadata_url,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class CollectibleRepository:
    """Concrete implementation of CollectibleRepositoryProtocol using raw SQL."""

    async def save(self, collectible: Collectible, db: AsyncSession) -> None:
        await db.execute(
            _INSERT_SQL,
            {
                "id": collectible.id,
                "owner": collectible.owner,
                "source_asset_ref": collectible.source_asset_ref,
                "name": collectible.name,
                "description": collectible.description,
                "image_ref": collectible.image_ref,
                "chain": collectible.chain,
                "token_ref": collectible.token_ref,
                "metadata_url": collectible.metadata_url,
            },
        )

    async def get_by_id(self, collectible_id: str, db: AsyncSession) -> Collectible | None:
        result = await db.execute(_GET_BY_ID_SQL, {"id": collectible_id})
        row = result.fetchone()
        return _row_to_collectible(row) if row else None

    async def get_for_update(
        self, collectible_id: str, db: AsyncSession
    ) -> Collectible | None:
        result = await db.execute(_GET_FOR_UPDATE_SQL, {"id": collectible_id})
        row = result.fetchone()
        return _row_to_collectible(row) if row else None

    async def update_owner(self, collectible_id: str, owner: str, db: AsyncSession) -> None:
        await db.execute(_UPDATE_OWNER_SQL, {"id": collectible_id, "owner": owner})

    async def delete(self, collectible_id: str, db: AsyncSession) -> None:
        await db.execute(_DELETE_SQL, {"id": collectible_id})

    async def list_by_owner(self, owner: str, db: AsyncSession) -> list[Collectible]:
        result = await db.execute(_LIST_BY_OWNER_SQL, {"owner": owner})
        return [_row_to_collectible(row) for row in result.fetchall()]
