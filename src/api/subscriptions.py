"""Subscription API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.responses import EnvelopeResponse, ok
from src.auth import get_current_user
from src.db import get_db
from src.db.crud import RelationKind, get_user, toggle
from src.models.base import parse_id
from src.models.schemas import ToggleRead
from src.models.user import User
from src.utils.cache import invalidate_channel_stats
from src.utils.pagination import paginate
from src.views.catalog import channel_subscribers_view, subscribed_channels_view

router = APIRouter()


@router.post("/c/{channel_id}")
async def toggle_subscription(
    channel_id: str,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> EnvelopeResponse:
    result = await toggle(db, RelationKind.SUBSCRIPTION, channel_id, user.id)
    # Both sides' counts change
    await invalidate_channel_stats(user.id, parse_id(channel_id, "channel_id"))
    message = "Subscribed" if result.created else "Unsubscribed"
    return ok(200, ToggleRead(created=result.created), message)


@router.get("/c/{channel_id}")
async def list_channel_subscribers(
    channel_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    page: Annotated[str | None, Query()] = None,
    limit: Annotated[str | None, Query()] = None,
) -> EnvelopeResponse:
    channel = await get_user(db, channel_id)
    result = await paginate(db, channel_subscribers_view(channel.id), page, limit)
    return ok(200, result, "Subscribers fetched successfully")


@router.get("/u/{subscriber_id}")
async def list_subscribed_channels(
    subscriber_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    page: Annotated[str | None, Query()] = None,
    limit: Annotated[str | None, Query()] = None,
) -> EnvelopeResponse:
    subscriber = await get_user(db, subscriber_id)
    result = await paginate(db, subscribed_channels_view(subscriber.id), page, limit)
    return ok(200, result, "Subscribed channels fetched successfully")
