"""Marketplace settings snapshot — pure dataclass, no SQLAlchemy dependency."""
from dataclasses import dataclass
from datetime import datetime

DEFAULT_TON_TO_STARS_RATE = 250.0


@dataclass(frozen=True)
class MarketplaceConfig:
    """One immutable version of the runtime marketplace settings.

    Snapshots are append-only; orders record the version they were priced with.
    """

    version: int
    ton_to_stars_rate: float  # Stars per 1 TON
    ton_destination_wallet: str
    telegram_bot_token: str
    app_base_url: str | None = None
    created_by: str | None = None
    created_at: datetime | None = None
