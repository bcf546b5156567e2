"""Like API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.responses import EnvelopeResponse, ok
from src.auth import get_current_user
from src.db import get_db
from src.db.crud import RelationKind, toggle, video_owner_id
from src.models.base import parse_id
from src.models.schemas import ToggleRead
from src.models.user import User
from src.utils.cache import invalidate_channel_stats
from src.utils.pagination import paginate
from src.views.catalog import liked_items_view

router = APIRouter()


async def _toggle_like(db: AsyncSession, kind: RelationKind, target_id: str, user: User) -> EnvelopeResponse:
    result = await toggle(db, kind, target_id, user.id)
    if kind is RelationKind.VIDEO_LIKE:
        # Video likes feed the owner's dashboard totals
        await invalidate_channel_stats(await video_owner_id(db, parse_id(target_id, "video_id")))
    label = kind.spec.target_label.capitalize()
    message = f"{label} liked" if result.created else f"{label} unliked"
    return ok(200, ToggleRead(created=result.created), message)


@router.post("/toggle/v/{video_id}")
async def toggle_video_like(
    video_id: str,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> EnvelopeResponse:
    return await _toggle_like(db, RelationKind.VIDEO_LIKE, video_id, user)


@router.post("/toggle/c/{comment_id}")
async def toggle_comment_like(
    comment_id: str,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> EnvelopeResponse:
    return await _toggle_like(db, RelationKind.COMMENT_LIKE, comment_id, user)


@router.post("/toggle/t/{tweet_id}")
async def toggle_tweet_like(
    tweet_id: str,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> EnvelopeResponse:
    return await _toggle_like(db, RelationKind.TWEET_LIKE, tweet_id, user)


@router.get("/{kind}")
async def list_liked_items(
    kind: str,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    page: Annotated[str | None, Query()] = None,
    limit: Annotated[str | None, Query()] = None,
) -> EnvelopeResponse:
    """Liked videos, comments or tweets, most recently liked first."""
    result = await paginate(db, liked_items_view(user.id, kind), page, limit)
    return ok(200, result, f"Liked {kind} fetched successfully")
