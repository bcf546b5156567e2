"""Comment API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.responses import EnvelopeResponse, ok
from src.auth import get_current_user, get_optional_user
from src.db import get_db
from src.db.crud import add_comment, delete_comment, get_visible_video, update_comment, video_owner_id
from src.models.schemas import CommentCreate, CommentRead, CommentUpdate
from src.models.user import User
from src.utils.cache import invalidate_channel_stats
from src.utils.pagination import paginate
from src.views.catalog import comment_listing_view

router = APIRouter()


@router.get("/{video_id}")
async def list_comments(
    video_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    viewer: Annotated[User | None, Depends(get_optional_user)],
    page: Annotated[str | None, Query()] = None,
    limit: Annotated[str | None, Query()] = None,
) -> EnvelopeResponse:
    """Page through a video's comments, oldest first."""
    video = await get_visible_video(db, video_id, viewer.id if viewer else None)
    result = await paginate(db, comment_listing_view(video.id), page, limit)
    return ok(200, result, "Comments fetched successfully")


@router.post("/{video_id}", status_code=201)
async def create_comment(
    video_id: str,
    data: CommentCreate,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> EnvelopeResponse:
    comment = await add_comment(db, video_id, user.id, data)
    await invalidate_channel_stats(await video_owner_id(db, comment.video_id))
    return ok(201, CommentRead.model_validate(comment), "Comment added successfully")


@router.patch("/c/{comment_id}")
async def edit_comment(
    comment_id: str,
    data: CommentUpdate,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> EnvelopeResponse:
    comment = await update_comment(db, comment_id, user.id, data)
    return ok(200, CommentRead.model_validate(comment), "Comment updated successfully")


@router.delete("/c/{comment_id}")
async def remove_comment(
    comment_id: str,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> EnvelopeResponse:
    video_id = await delete_comment(db, comment_id, user.id)
    await invalidate_channel_stats(await video_owner_id(db, video_id))
    return ok(200, {"id": comment_id}, "Comment deleted successfully")
