"""Tests for comment API endpoints."""

import pytest
from httpx import AsyncClient

from src.models.base import new_id


class TestComments:
    """Tests for /api/comments."""

    @pytest.mark.asyncio
    async def test_paginated_listing(self, client: AsyncClient, test_user, make_video, make_comment):
        """25 comments at 10 per page: the third page holds 5."""
        video = await make_video(test_user)
        for i in range(25):
            await make_comment(video, test_user, f"comment {i}")

        response = await client.get(f"/api/comments/{video.id}", params={"page": 3, "limit": 10})

        page = response.json()["data"]
        assert page["total_items"] == 25
        assert page["total_pages"] == 3
        assert len(page["items"]) == 5
        assert page["items"][0]["owner"]["username"] == "testuser"
        assert page["items"][0]["like_count"] == 0

    @pytest.mark.asyncio
    async def test_listing_unknown_video(self, client: AsyncClient):
        response = await client.get(f"/api/comments/{new_id()}")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_add(self, authenticated_client: AsyncClient, test_user, make_video):
        video = await make_video(test_user)

        response = await authenticated_client.post(f"/api/comments/{video.id}", json={"content": "First!"})

        assert response.status_code == 201
        assert response.json()["data"]["owner_id"] == test_user.id

    @pytest.mark.asyncio
    async def test_add_to_missing_video(self, authenticated_client: AsyncClient):
        response = await authenticated_client.post(f"/api/comments/{new_id()}", json={"content": "Hi"})

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_owner_edits_and_deletes(self, authenticated_client: AsyncClient, test_user, make_video, make_comment):
        video = await make_video(test_user)
        comment = await make_comment(video, test_user)

        edited = await authenticated_client.patch(f"/api/comments/c/{comment.id}", json={"content": "Edited"})
        deleted = await authenticated_client.delete(f"/api/comments/c/{comment.id}")
        listing = await authenticated_client.get(f"/api/comments/{video.id}")

        assert edited.json()["data"]["content"] == "Edited"
        assert deleted.status_code == 200
        assert listing.json()["data"]["total_items"] == 0

    @pytest.mark.asyncio
    async def test_non_owner_rejected(
        self, client: AsyncClient, act_as, test_user, other_user, make_video, make_comment, db_session
    ):
        video = await make_video(test_user)
        comment = await make_comment(video, test_user, "Original")
        act_as(other_user)

        edited = await client.patch(f"/api/comments/c/{comment.id}", json={"content": "Nope"})
        deleted = await client.delete(f"/api/comments/c/{comment.id}")

        assert (edited.status_code, deleted.status_code) == (403, 403)
        await db_session.refresh(comment)
        assert comment.content == "Original"

    @pytest.mark.asyncio
    async def test_draft_comments_hidden(
        self, client: AsyncClient, act_as, test_user, other_user, make_video, make_comment
    ):
        draft = await make_video(test_user, is_published=False)
        await make_comment(draft, test_user, "note to self")

        anonymous = await client.get(f"/api/comments/{draft.id}")
        act_as(other_user)
        posted = await client.post(f"/api/comments/{draft.id}", json={"content": "Found it"})
        act_as(test_user)
        own = await client.get(f"/api/comments/{draft.id}")

        assert anonymous.status_code == 404
        assert posted.status_code == 404
        assert own.json()["data"]["total_items"] == 1
