"""Tests for tweet API endpoints."""

import pytest
from httpx import AsyncClient

from src.models.base import new_id


class TestTweets:
    """Tests for /api/tweets."""

    @pytest.mark.asyncio
    async def test_create_and_list(self, authenticated_client: AsyncClient, test_user):
        for content in ("first", "second"):
            response = await authenticated_client.post("/api/tweets", json={"content": content})
            assert response.status_code == 201

        response = await authenticated_client.get(f"/api/tweets/user/{test_user.id}")

        page = response.json()["data"]
        assert [item["content"] for item in page["items"]] == ["second", "first"]
        assert page["items"][0]["owner"]["id"] == test_user.id
        assert page["items"][0]["like_count"] == 0

    @pytest.mark.asyncio
    async def test_list_unknown_user(self, client: AsyncClient):
        response = await client.get(f"/api/tweets/user/{new_id()}")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_blank_content(self, authenticated_client: AsyncClient):
        response = await authenticated_client.post("/api/tweets", json={"content": "   "})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_update_and_delete(self, authenticated_client: AsyncClient, test_user, make_tweet):
        tweet = await make_tweet(test_user)

        updated = await authenticated_client.patch(f"/api/tweets/{tweet.id}", json={"content": "edited"})
        deleted = await authenticated_client.delete(f"/api/tweets/{tweet.id}")
        again = await authenticated_client.delete(f"/api/tweets/{tweet.id}")

        assert updated.json()["data"]["content"] == "edited"
        assert deleted.status_code == 200
        assert again.status_code == 404

    @pytest.mark.asyncio
    async def test_non_owner_rejected(self, client: AsyncClient, act_as, test_user, other_user, make_tweet):
        tweet = await make_tweet(test_user)
        act_as(other_user)

        response = await client.patch(f"/api/tweets/{tweet.id}", json={"content": "mine now"})

        assert response.status_code == 403
