"""Collectible domain model — pure dataclass, no SQLAlchemy dependency."""
from dataclasses import dataclass
from datetime import datetime


@dataclass
class Collectible:
    id: str
    owner: str  # identity string; rewritten only by settlement
    source_asset_ref: str  # uploaded sticker this collectible was minted from
    name: str
    description: str
    image_ref: str
    chain: str  # TON / STARS
    token_ref: str | None = None  # on-chain item address, if minted on chain
    metadata_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
