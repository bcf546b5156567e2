"""Channel dashboard API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.responses import EnvelopeResponse, ok
from src.auth import get_current_user
from src.db import get_db
from src.models.user import User
from src.utils.cache import cache, channel_stats_key
from src.utils.pagination import paginate
from src.views import fetch_one
from src.views.catalog import channel_stats_view, channel_videos_view

router = APIRouter()

EMPTY_STATS = {
    "total_videos": 0,
    "total_views": 0,
    "total_likes": 0,
    "total_comments": 0,
    "total_tweets": 0,
    "subscriber_count": 0,
    "subscribed_to_count": 0,
}


@router.get("/stats")
async def get_channel_stats(
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> EnvelopeResponse:
    """Totals for the current user's channel (cached briefly)."""

    async def compute() -> dict:
        return await fetch_one(db, channel_stats_view(user.id)) or dict(EMPTY_STATS)

    stats = await cache.get_or_set(channel_stats_key(user.id), compute)
    return ok(200, stats, "Channel stats fetched successfully")


@router.get("/videos")
async def get_channel_videos(
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    page: Annotated[str | None, Query()] = None,
    limit: Annotated[str | None, Query()] = None,
) -> EnvelopeResponse:
    """Every video of the current user's channel, unpublished included."""
    result = await paginate(db, channel_videos_view(user.id), page, limit)
    return ok(200, result, "Channel videos fetched successfully")
