# tests/unit/test_config_service.py
"""MarketplaceConfigService: versioned snapshots and masked admin view."""
import pytest
from fakes import FakeConfigRepo, make_config

from src.sm_common.errors import PaymentConfigMissingError
from src.sm_config.application.schemas import PublishSettingsRequest
from src.sm_config.application.service import MarketplaceConfigService


@pytest.mark.asyncio
async def test_current_without_snapshot_raises(db) -> None:
    with pytest.raises(PaymentConfigMissingError):
        await MarketplaceConfigService(repo=FakeConfigRepo()).current(db)


@pytest.mark.asyncio
async def test_public_settings_default_rate(db) -> None:
    resp = await MarketplaceConfigService(repo=FakeConfigRepo()).public_settings(db)

    assert resp.ton_to_stars_rate == 250.0
    assert resp.version is None


@pytest.mark.asyncio
async def test_first_publish_fills_defaults(db) -> None:
    repo = FakeConfigRepo()
    service = MarketplaceConfigService(repo=repo)

    resp = await service.publish(
        db, PublishSettingsRequest(ton_destination_wallet="EQNew"), "admin-1"
    )

    assert resp.version == 1
    assert resp.ton_to_stars_rate == 250.0
    assert resp.ton_destination_wallet == "EQNew"
    assert resp.telegram_bot_token_masked == ""
    assert resp.created_by == "admin-1"
    db.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_publish_appends_and_carries_over(db) -> None:
    repo = FakeConfigRepo(make_config())
    service = MarketplaceConfigService(repo=repo)

    resp = await service.publish(db, PublishSettingsRequest(ton_to_stars_rate=300), "admin-1")

    assert resp.version == 2
    assert [c.ton_to_stars_rate for c in repo.versions] == [250.0, 300.0]
    assert repo.versions[-1].ton_destination_wallet == "EQDestWallet"
    assert repo.versions[-1].telegram_bot_token == "123456:bot-token"


@pytest.mark.asyncio
async def test_explicit_empty_value_replaces_previous(db) -> None:
    repo = FakeConfigRepo(make_config())
    service = MarketplaceConfigService(repo=repo)

    await service.publish(db, PublishSettingsRequest(app_base_url=""), "admin-1")

    assert repo.versions[-1].app_base_url == ""
    assert repo.versions[-1].ton_to_stars_rate == 250.0


@pytest.mark.asyncio
async def test_admin_view_masks_token(db) -> None:
    resp = await MarketplaceConfigService(repo=FakeConfigRepo(make_config())).get_settings(db)

    assert resp.telegram_bot_token_masked == "1234…oken"
    assert "bot-token" not in resp.model_dump_json()
