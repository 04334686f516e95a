"""Integration tests for the billing webhook."""

from uuid import uuid4

import pytest
from httpx import AsyncClient

from core.config import settings

WEBHOOK_SECRET = "whsec-test"


@pytest.fixture
def webhook_secret(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    monkeypatch.setattr(settings, "billing_webhook_secret", WEBHOOK_SECRET)
    return {"X-Webhook-Secret": WEBHOOK_SECRET}


class TestBillingWebhook:
    @pytest.mark.asyncio
    async def test_upgrade_to_pro(
        self, app_client: AsyncClient, make_user, webhook_secret: dict[str, str]
    ):
        """Test POST /api/v1/billing/webhook."""
        user, headers = await make_user()

        response = await app_client.post(
            "/api/v1/billing/webhook",
            json={"user_id": str(user.id), "is_pro": True},
            headers=webhook_secret,
        )

        assert response.status_code == 200
        assert response.json()["data"]["is_pro"] is True
        me = await app_client.get("/api/v1/users/me", headers=headers)
        assert me.json()["data"]["is_pro"] is True

    @pytest.mark.asyncio
    async def test_downgrade_keeps_existing_domain_record(
        self, app_client: AsyncClient, make_profile, webhook_secret: dict[str, str]
    ):
        profile, headers = await make_profile(is_pro=True)
        domain = f"cv-{uuid4().hex[:8]}.example.com"
        await app_client.post("/api/v1/domains", json={"domain": domain}, headers=headers)

        await app_client.post(
            "/api/v1/billing/webhook",
            json={"user_id": profile["user_id"], "is_pro": False},
            headers=webhook_secret,
        )

        status = await app_client.get("/api/v1/domains/me", headers=headers)
        assert status.status_code == 200
        resubmit = await app_client.post(
            "/api/v1/domains", json={"domain": domain}, headers=headers
        )
        assert resubmit.status_code == 403

    @pytest.mark.asyncio
    async def test_wrong_secret(
        self, app_client: AsyncClient, make_user, webhook_secret: dict[str, str]
    ):
        user, _ = await make_user()

        response = await app_client.post(
            "/api/v1/billing/webhook",
            json={"user_id": str(user.id), "is_pro": True},
            headers={"X-Webhook-Secret": "guess"},
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_unconfigured_secret_rejects_everything(
        self, app_client: AsyncClient, make_user, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.setattr(settings, "billing_webhook_secret", "")
        user, _ = await make_user()

        response = await app_client.post(
            "/api/v1/billing/webhook",
            json={"user_id": str(user.id), "is_pro": True},
            headers={"X-Webhook-Secret": ""},
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_unknown_user(self, app_client: AsyncClient, webhook_secret: dict[str, str]):
        response = await app_client.post(
            "/api/v1/billing/webhook",
            json={"user_id": str(uuid4()), "is_pro": True},
            headers=webhook_secret,
        )

        assert response.status_code == 404
