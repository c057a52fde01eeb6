"""HTTP surface: envelope, auth, metadata endpoint, webhook secret."""

from unittest.mock import AsyncMock

import pytest
from fakes import FakeCollectibleRepo, FakeListingRepo, make_collectible

from config.settings import settings
from src.sm_asset.api import router as asset_router
from src.sm_asset.application.service import AssetRegistryService
from src.sm_common.database import get_db_session
from src.sm_gateway.auth.jwt_handler import create_access_token
from src.sm_payment.api import router as telegram_router
from src.sm_payment.domain.models import WebhookAction


@pytest.fixture
def app_with_fakes(monkeypatch):
    from src.main import app

    async def fake_session():
        yield AsyncMock()

    repo = FakeCollectibleRepo()
    repo.add(make_collectible())
    monkeypatch.setattr(
        asset_router, "_service", AssetRegistryService(repo=repo, listings=FakeListingRepo())
    )
    app.dependency_overrides[get_db_session] = fake_session
    yield app
    app.dependency_overrides.clear()


def _auth(identity: str = "alice") -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(identity)}"}


@pytest.mark.asyncio
async def test_health(client) -> None:
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


class TestMetadata:
    @pytest.mark.asyncio
    async def test_served_without_envelope(self, app_with_fakes, client):
        resp = await client.get("/nft/metadata", params={"id": "col_1"})

        assert resp.status_code == 200
        assert resp.json()["name"] == "Happy Cat"
        assert resp.headers["Cache-Control"] == "public, max-age=300"
        assert "X-Request-ID" in resp.headers

    @pytest.mark.asyncio
    async def test_missing_id(self, app_with_fakes, client):
        resp = await client.get("/nft/metadata")
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_id(self, app_with_fakes, client):
        resp = await client.get("/nft/metadata", params={"id": "col_x"})
        assert resp.status_code == 404


class TestEnvelope:
    @pytest.mark.asyncio
    async def test_requires_token(self, app_with_fakes, client):
        resp = await client.get("/api/v1/collectibles/col_1")
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_success_envelope(self, app_with_fakes, client):
        resp = await client.get("/api/v1/collectibles/col_1", headers=_auth())

        body = resp.json()
        assert resp.status_code == 200
        assert body["code"] == 0
        assert body["data"]["owner"] == "seller"
        assert body["request_id"] == resp.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_app_error_envelope(self, app_with_fakes, client):
        resp = await client.get("/api/v1/collectibles/col_x", headers=_auth())

        body = resp.json()
        assert resp.status_code == 404
        assert body["code"] == 2001
        assert body["data"] is None

    @pytest.mark.asyncio
    async def test_settings_publish_is_admin_only(self, app_with_fakes, client):
        resp = await client.put(
            "/api/v1/admin/settings", json={"ton_to_stars_rate": 300}, headers=_auth("alice")
        )
        assert resp.status_code == 403
        assert resp.json()["code"] == 1006


class TestTelegramWebhook:
    @pytest.mark.asyncio
    async def test_bad_secret_rejected(self, app_with_fakes, client, monkeypatch):
        monkeypatch.setattr(settings, "TELEGRAM_WEBHOOK_SECRET", "s3cret")

        resp = await client.post(
            "/telegram/webhook",
            json={"update_id": 1},
            headers={"X-Telegram-Bot-Api-Secret-Token": "wrong"},
        )

        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_good_secret_dispatches(self, app_with_fakes, client, monkeypatch):
        monkeypatch.setattr(settings, "TELEGRAM_WEBHOOK_SECRET", "s3cret")
        handle = AsyncMock(return_value=WebhookAction.IGNORED)
        monkeypatch.setattr(telegram_router._handler, "handle", handle)

        resp = await client.post(
            "/telegram/webhook",
            json={"update_id": 1},
            headers={"X-Telegram-Bot-Api-Secret-Token": "s3cret"},
        )

        assert resp.status_code == 200
        assert resp.json() == {"ok": True, "action": "IGNORED"}
        handle.assert_awaited_once()


class TestRequestId:
    @pytest.mark.asyncio
    async def test_caller_request_id_is_kept(self, client):
        resp = await client.get("/health", headers={"X-Request-ID": "miniapp-42"})
        assert resp.headers["X-Request-ID"] == "miniapp-42"

    @pytest.mark.asyncio
    async def test_garbage_request_id_replaced(self, client):
        resp = await client.get("/health", headers={"X-Request-ID": "bad id with spaces"})
        assert resp.headers["X-Request-ID"].startswith("req_")
