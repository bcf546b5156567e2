"""Tests for video API endpoints."""

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models import Comment, Like, Video
from src.models.base import new_id


def _upload_files(thumbnail: str = "thumb.png") -> dict:
    return {
        "video_file": ("clip.mp4", b"frames", "video/mp4"),
        "thumbnail": (thumbnail, b"pixels", "image/png"),
    }


class TestListVideos:
    """Tests for GET /api/videos."""

    @pytest.mark.asyncio
    async def test_search_listing(self, client: AsyncClient, test_user, make_video):
        """Only matching published videos, each with an owner summary."""
        await make_video(test_user, "Intro to FastAPI")
        await make_video(test_user, "Deep dive", description="After the intro")
        await make_video(test_user, "Intro draft", is_published=False)
        await make_video(test_user, "Unrelated")

        response = await client.get("/api/videos", params={"query": "intro"})

        assert response.status_code == 200
        page = response.json()["data"]
        assert page["total_items"] == 2
        assert page["current_page"] == 1
        assert {item["title"] for item in page["items"]} == {"Intro to FastAPI", "Deep dive"}
        for item in page["items"]:
            assert set(item["owner"]) == {"id", "username", "display_name", "avatar_url"}
            assert "password_hash" not in item["owner"]

    @pytest.mark.asyncio
    async def test_owner_filter(self, client: AsyncClient, test_user, other_user, make_video):
        await make_video(test_user, "mine")
        await make_video(other_user, "theirs")

        response = await client.get("/api/videos", params={"user_id": other_user.id})

        assert [item["title"] for item in response.json()["data"]["items"]] == ["theirs"]

    @pytest.mark.asyncio
    async def test_sorting(self, client: AsyncClient, test_user, make_video):
        await make_video(test_user, "low", view_count=1)
        await make_video(test_user, "high", view_count=9)

        response = await client.get("/api/videos", params={"sort_by": "view_count", "sort_type": "desc"})

        assert [item["title"] for item in response.json()["data"]["items"]] == ["high", "low"]

    @pytest.mark.asyncio
    async def test_unsortable_field(self, client: AsyncClient):
        response = await client.get("/api/videos", params={"sort_by": "password_hash"})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_page_size_coerced(self, client: AsyncClient, test_user, make_video):
        for i in range(3):
            await make_video(test_user, f"v{i}")

        response = await client.get("/api/videos", params={"page": "0", "limit": "2"})

        page = response.json()["data"]
        assert page["current_page"] == 1
        assert page["page_size"] == 2
        assert page["total_pages"] == 2


class TestPublishVideo:
    """Tests for POST /api/videos."""

    @pytest.mark.asyncio
    async def test_publish(self, authenticated_client: AsyncClient, test_user, asset_store):
        response = await authenticated_client.post(
            "/api/videos",
            data={"title": "My first video", "description": "Hello"},
            files=_upload_files(),
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["owner_id"] == test_user.id
        assert data["video_url"] == asset_store.stored[0]
        assert data["thumbnail_url"] == asset_store.stored[1]
        assert data["duration_seconds"] == 12.5
        assert data["is_published"] is True

    @pytest.mark.asyncio
    async def test_thumbnail_failure_removes_video(
        self, authenticated_client: AsyncClient, asset_store, db_session: AsyncSession
    ):
        asset_store.fail_suffixes.add(".png")

        response = await authenticated_client.post(
            "/api/videos",
            data={"title": "t", "description": "d"},
            files=_upload_files(),
        )

        assert response.status_code == 500
        assert asset_store.removed == asset_store.stored
        count = await db_session.execute(select(func.count()).select_from(Video))
        assert count.scalar_one() == 0

    @pytest.mark.asyncio
    async def test_requires_login(self, client: AsyncClient):
        response = await client.post(
            "/api/videos", data={"title": "t", "description": "d"}, files=_upload_files()
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_blank_title(self, authenticated_client: AsyncClient, asset_store):
        response = await authenticated_client.post(
            "/api/videos", data={"title": "  ", "description": "d"}, files=_upload_files()
        )

        assert response.status_code == 400
        assert response.json()["errors"] == ["title"]
        assert asset_store.stored == []


class TestGetVideo:
    """Tests for GET /api/videos/{id}."""

    @pytest.mark.asyncio
    async def test_view_is_recorded(
        self, authenticated_client: AsyncClient, test_user, other_user, make_video, db_session
    ):
        first = await make_video(other_user, "first")
        second = await make_video(other_user, "second")

        for video in (first, second, first):
            response = await authenticated_client.get(f"/api/videos/{video.id}")
            assert response.status_code == 200

        data = response.json()["data"]
        assert data["view_count"] == 2
        assert data["owner"]["username"] == "otheruser"
        assert data["is_liked"] is False
        await db_session.refresh(test_user)
        assert test_user.watch_history == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_like_status(self, authenticated_client: AsyncClient, test_user, make_video, db_session):
        video = await make_video(test_user)
        db_session.add(Like(liked_by_id=test_user.id, video_id=video.id))
        await db_session.commit()

        data = (await authenticated_client.get(f"/api/videos/{video.id}")).json()["data"]

        assert data["like_count"] == 1
        assert data["is_liked"] is True

    @pytest.mark.asyncio
    async def test_unpublished_hidden(self, client: AsyncClient, act_as, test_user, other_user, make_video):
        video = await make_video(test_user, is_published=False)

        act_as(other_user)
        hidden = await client.get(f"/api/videos/{video.id}")
        act_as(test_user)
        visible = await client.get(f"/api/videos/{video.id}")

        assert hidden.status_code == 404
        assert visible.status_code == 200

    @pytest.mark.asyncio
    async def test_not_found(self, client: AsyncClient):
        response = await client.get(f"/api/videos/{new_id()}")

        assert response.status_code == 404
        assert response.json()["message"] == "Video not found"


class TestModifyVideo:
    """Tests for update, delete and publish toggling."""

    @pytest.mark.asyncio
    async def test_update_with_thumbnail(self, authenticated_client: AsyncClient, test_user, make_video, asset_store):
        video = await make_video(test_user, thumbnail_url="https://assets.test/old.png")

        response = await authenticated_client.patch(
            f"/api/videos/{video.id}",
            data={"title": "New title", "description": "New description"},
            files={"thumbnail": ("new.png", b"pixels", "image/png")},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["title"] == "New title"
        assert data["thumbnail_url"] == asset_store.stored[0]
        assert asset_store.removed == ["https://assets.test/old.png"]

    @pytest.mark.asyncio
    async def test_update_without_thumbnail(self, authenticated_client: AsyncClient, test_user, make_video, asset_store):
        video = await make_video(test_user)

        response = await authenticated_client.patch(
            f"/api/videos/{video.id}", data={"title": "Renamed", "description": "Same"}
        )

        assert response.json()["data"]["thumbnail_url"] == video.thumbnail_url
        assert asset_store.removed == []

    @pytest.mark.asyncio
    async def test_non_owner_cannot_modify(
        self, client: AsyncClient, act_as, test_user, other_user, make_video, asset_store, db_session
    ):
        video = await make_video(test_user, "Original")
        act_as(other_user)

        update = await client.patch(
            f"/api/videos/{video.id}",
            data={"title": "Hijacked", "description": "x"},
            files={"thumbnail": ("t.png", b"p", "image/png")},
        )
        delete = await client.delete(f"/api/videos/{video.id}")
        publish = await client.patch(f"/api/videos/{video.id}/publish")

        assert [update.status_code, delete.status_code, publish.status_code] == [403, 403, 403]
        assert asset_store.stored == []
        await db_session.refresh(video)
        assert video.title == "Original"
        assert video.is_published is True

    @pytest.mark.asyncio
    async def test_delete_cascades(
        self, authenticated_client: AsyncClient, test_user, other_user, make_video, make_comment, db_session, asset_store
    ):
        video = await make_video(test_user)
        comment = await make_comment(video, other_user)
        db_session.add_all([
            Like(liked_by_id=other_user.id, video_id=video.id),
            Like(liked_by_id=test_user.id, comment_id=comment.id),
        ])
        await db_session.commit()

        response = await authenticated_client.delete(f"/api/videos/{video.id}")

        assert response.status_code == 200
        for model in (Video, Comment, Like):
            count = await db_session.execute(select(func.count()).select_from(model))
            assert count.scalar_one() == 0
        assert set(asset_store.removed) == {video.video_url, video.thumbnail_url}

    @pytest.mark.asyncio
    async def test_toggle_publish(self, authenticated_client: AsyncClient, test_user, make_video):
        video = await make_video(test_user)

        first = await authenticated_client.patch(f"/api/videos/{video.id}/publish")
        second = await authenticated_client.patch(f"/api/videos/{video.id}/publish")

        assert first.json()["data"]["is_published"] is False
        assert second.json()["data"]["is_published"] is True
