"""Tests for subscription API endpoints."""

import pytest
from httpx import AsyncClient

from src.models.base import new_id


class TestSubscriptions:
    """Tests for /api/subscriptions."""

    @pytest.mark.asyncio
    async def test_toggle(self, authenticated_client: AsyncClient, other_user):
        first = await authenticated_client.post(f"/api/subscriptions/c/{other_user.id}")
        second = await authenticated_client.post(f"/api/subscriptions/c/{other_user.id}")

        assert first.json()["data"]["created"] is True
        assert first.json()["message"] == "Subscribed"
        assert second.json()["data"]["created"] is False

    @pytest.mark.asyncio
    async def test_unknown_channel(self, authenticated_client: AsyncClient):
        response = await authenticated_client.post(f"/api/subscriptions/c/{new_id()}")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_listings(self, authenticated_client: AsyncClient, test_user, other_user):
        await authenticated_client.post(f"/api/subscriptions/c/{other_user.id}")

        subscribers = await authenticated_client.get(f"/api/subscriptions/c/{other_user.id}")
        channels = await authenticated_client.get(f"/api/subscriptions/u/{test_user.id}")

        subscriber = subscribers.json()["data"]["items"][0]["subscriber"]
        assert subscriber["id"] == test_user.id
        assert "email" not in subscriber
        assert "password_hash" not in subscriber
        assert channels.json()["data"]["items"][0]["channel"]["username"] == "otheruser"

    @pytest.mark.asyncio
    async def test_channel_profile_reflects_subscription(
        self, authenticated_client: AsyncClient, other_user
    ):
        await authenticated_client.post(f"/api/subscriptions/c/{other_user.id}")

        profile = (await authenticated_client.get("/api/users/channel/otheruser")).json()["data"]

        assert profile["subscriber_count"] == 1
        assert profile["is_subscribed"] is True
