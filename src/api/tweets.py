"""Tweet API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.responses import EnvelopeResponse, ok
from src.auth import get_current_user
from src.db import get_db
from src.db.crud import create_tweet, delete_tweet, get_user, update_tweet
from src.models.schemas import TweetCreate, TweetRead, TweetUpdate
from src.models.user import User
from src.utils.cache import invalidate_channel_stats
from src.utils.pagination import paginate
from src.views.catalog import user_tweets_view

router = APIRouter()


@router.post("", status_code=201)
async def post_tweet(
    data: TweetCreate,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> EnvelopeResponse:
    tweet = await create_tweet(db, user.id, data)
    await invalidate_channel_stats(user.id)
    return ok(201, TweetRead.model_validate(tweet), "Tweet created successfully")


@router.get("/user/{user_id}")
async def list_user_tweets(
    user_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    page: Annotated[str | None, Query()] = None,
    limit: Annotated[str | None, Query()] = None,
) -> EnvelopeResponse:
    owner = await get_user(db, user_id)
    result = await paginate(db, user_tweets_view(owner.id), page, limit)
    return ok(200, result, "Tweets fetched successfully")


@router.patch("/{tweet_id}")
async def edit_tweet(
    tweet_id: str,
    data: TweetUpdate,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> EnvelopeResponse:
    tweet = await update_tweet(db, tweet_id, user.id, data)
    return ok(200, TweetRead.model_validate(tweet), "Tweet updated successfully")


@router.delete("/{tweet_id}")
async def remove_tweet(
    tweet_id: str,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> EnvelopeResponse:
    await delete_tweet(db, tweet_id, user.id)
    await invalidate_channel_stats(user.id)
    return ok(200, {"id": tweet_id}, "Tweet deleted successfully")
