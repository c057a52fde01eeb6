"""Pydantic schemas for collectible endpoints."""

from typing import Literal

from pydantic import BaseModel, Field

from src.sm_asset.domain.models import Collectible


class RegisterCollectibleRequest(BaseModel):
    """Recorded by the client after the external minting step succeeded."""

    source_asset_ref: str = Field(..., min_length=1, max_length=256)
    name: str = Field(..., min_length=1, max_length=128)
    description: str = Field("", max_length=2000)
    image_ref: str = Field(..., min_length=1, max_length=2048)
    chain: Literal["TON", "STARS"]
    token_ref: str | None = Field(None, max_length=256)


class CollectibleResponse(BaseModel):
    id: str
    owner: str
    source_asset_ref: str
    name: str
    description: str
    image_ref: str
    chain: str
    token_ref: str | None
    metadata_url: str | None

    @classmethod
    def from_domain(cls, c: Collectible) -> "CollectibleResponse":
        return cls(
            id=c.id,
            owner=c.owner,
            source_asset_ref=c.source_asset_ref,
            name=c.name,
            description=c.description,
            image_ref=c.image_ref,
            chain=c.chain,
            token_ref=c.token_ref,
            metadata_url=c.metadata_url,
        )


class CollectibleListResponse(BaseModel):
    items: list[CollectibleResponse]


class CollectibleMetadata(BaseModel):
    """Off-chain NFT metadata (TEP-64 JSON) served to external indexers."""

    name: str
    description: str
    image: str
    attributes: list[dict[str, str]] = []

    @classmethod
    def from_domain(cls, c: Collectible) -> "CollectibleMetadata":
        return cls(name=c.name, description=c.description, image=c.image_ref)
