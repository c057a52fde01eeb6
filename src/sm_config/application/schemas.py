"""Pydantic schemas for marketplace settings endpoints."""

from pydantic import BaseModel, Field

from src.sm_config.domain.models import MarketplaceConfig


class PublishSettingsRequest(BaseModel):
    """Fields left unset are carried over from the current snapshot."""

    ton_to_stars_rate: float | None = Field(None, gt=0)
    ton_destination_wallet: str | None = Field(None, min_length=1)
    telegram_bot_token: str | None = Field(None, min_length=1)
    app_base_url: str | None = None


class PublicSettingsResponse(BaseModel):
    ton_to_stars_rate: float
    version: int | None


class SettingsResponse(BaseModel):
    """Admin view. The bot token is masked."""

    version: int
    ton_to_stars_rate: float
    ton_destination_wallet: str
    telegram_bot_token_masked: str
    app_base_url: str | None
    created_by: str | None
    created_at: str | None

    @classmethod
    def from_domain(cls, c: MarketplaceConfig) -> "SettingsResponse":
        token = c.telegram_bot_token
        masked = f"{token[:4]}…{token[-4:]}" if len(token) > 8 else "****" if token else ""
        return cls(
            version=c.version,
            ton_to_stars_rate=c.ton_to_stars_rate,
            ton_destination_wallet=c.ton_destination_wallet,
            telegram_bot_token_masked=masked,
            app_base_url=c.app_base_url,
            created_by=c.created_by,
            created_at=c.created_at.isoformat() if c.created_at else None,
        )
