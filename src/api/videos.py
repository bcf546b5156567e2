"""Video API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.responses import EnvelopeResponse, ok
from src.auth import get_current_user, get_optional_user
from src.config import get_settings
from src.db import get_db
from src.db.crud import (
    create_video,
    delete_video,
    get_owned_video,
    get_visible_video,
    record_view,
    toggle_publish,
    update_video,
)
from src.models.schemas import VideoCreate, VideoRead, VideoUpdate, validate_model
from src.models.user import User
from src.services.assets import AssetStore, discard_assets, get_asset_store, stage_upload
from src.utils.cache import invalidate_channel_stats
from src.utils.errors import UpstreamError
from src.utils.logging import LogContext, get_logger
from src.utils.pagination import paginate
from src.views import fetch_one
from src.views.catalog import video_detail_view, video_listing_view

router = APIRouter()
settings = get_settings()
logger = get_logger(__name__)


@router.get("")
async def list_videos(
    db: Annotated[AsyncSession, Depends(get_db)],
    viewer: Annotated[User | None, Depends(get_optional_user)],
    page: Annotated[str | None, Query()] = None,
    limit: Annotated[str | None, Query()] = None,
    query: Annotated[str | None, Query()] = None,
    sort_by: Annotated[str | None, Query()] = None,
    sort_type: Annotated[str | None, Query()] = None,
    user_id: Annotated[str | None, Query()] = None,
) -> EnvelopeResponse:
    """Search and page through published videos (plus the viewer's own)."""
    spec = video_listing_view(
        query=query,
        owner_id=user_id,
        viewer_id=viewer.id if viewer else None,
        sort_by=sort_by,
        sort_type=sort_type,
    )
    result = await paginate(db, spec, page, limit)
    return ok(200, result, "Videos fetched successfully")


@router.post("", status_code=201)
async def publish_video(
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    store: Annotated[AssetStore, Depends(get_asset_store)],
    title: Annotated[str, Form()],
    description: Annotated[str, Form()],
    video_file: Annotated[UploadFile, File()],
    thumbnail: Annotated[UploadFile, File()],
) -> EnvelopeResponse:
    """Upload a video and its thumbnail, then publish it."""
    data = validate_model(VideoCreate, title=title, description=description)
    log = LogContext(logger, user=user.id)

    video_asset = await stage_upload(store, video_file, settings.asset_staging_dir)
    if video_asset is None:
        log.error("video upload failed")
        raise UpstreamError("Video upload failed")

    thumbnail_asset = await stage_upload(store, thumbnail, settings.asset_staging_dir)
    if thumbnail_asset is None:
        log.error("thumbnail upload failed, removing uploaded video")
        await discard_assets(store, video_asset.url)
        raise UpstreamError("Thumbnail upload failed")

    video = await create_video(
        db,
        user.id,
        data,
        video_url=video_asset.url,
        thumbnail_url=thumbnail_asset.url,
        duration_seconds=video_asset.duration_seconds,
    )
    await invalidate_channel_stats(user.id)
    return ok(201, VideoRead.model_validate(video), "Video published successfully")


@router.get("/{video_id}")
async def get_video(
    video_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    viewer: Annotated[User | None, Depends(get_optional_user)],
) -> EnvelopeResponse:
    """Fetch a video; counts a view and updates the viewer's history."""
    video = await get_visible_video(db, video_id, viewer.id if viewer else None)
    await record_view(db, video, viewer)
    await invalidate_channel_stats(video.owner_id)
    detail = await fetch_one(db, video_detail_view(video.id, viewer.id if viewer else None))
    return ok(200, detail, "Video fetched successfully")


@router.patch("/{video_id}")
async def update_video_details(
    video_id: str,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    store: Annotated[AssetStore, Depends(get_asset_store)],
    title: Annotated[str, Form()],
    description: Annotated[str, Form()],
    thumbnail: Annotated[UploadFile | None, File()] = None,
) -> EnvelopeResponse:
    data = validate_model(VideoUpdate, title=title, description=description)
    # Ownership first, so a rejected request never uploads anything
    await get_owned_video(db, video_id, user.id)

    thumbnail_url = None
    if thumbnail is not None and thumbnail.filename:
        asset = await stage_upload(store, thumbnail, settings.asset_staging_dir)
        if asset is None:
            raise UpstreamError("Thumbnail upload failed")
        thumbnail_url = asset.url

    video, previous_thumbnail = await update_video(db, video_id, user.id, data, thumbnail_url)
    await discard_assets(store, previous_thumbnail)
    return ok(200, VideoRead.model_validate(video), "Video updated successfully")


@router.delete("/{video_id}")
async def remove_video(
    video_id: str,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    store: Annotated[AssetStore, Depends(get_asset_store)],
) -> EnvelopeResponse:
    deleted = await delete_video(db, video_id, user.id)
    await discard_assets(store, deleted.video_url, deleted.thumbnail_url)
    await invalidate_channel_stats(user.id)
    return ok(200, {"id": deleted.id}, "Video deleted successfully")


@router.patch("/{video_id}/publish")
async def toggle_publish_status(
    video_id: str,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> EnvelopeResponse:
    video = await toggle_publish(db, video_id, user.id)
    await invalidate_channel_stats(user.id)
    return ok(
        200,
        {"id": video.id, "is_published": video.is_published},
        "Publish status toggled successfully",
    )
