"""CRUD operations for tweets."""

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.crud.common import ensure_owner, get_or_404
from src.models import Like, Tweet
from src.models.schemas import TweetCreate, TweetUpdate


async def create_tweet(db: AsyncSession, owner_id: str, data: TweetCreate) -> Tweet:
    tweet = Tweet(owner_id=owner_id, content=data.content)
    db.add(tweet)
    await db.commit()
    await db.refresh(tweet)
    return tweet


async def update_tweet(db: AsyncSession, tweet_id: str, actor_id: str, data: TweetUpdate) -> Tweet:
    tweet = await get_or_404(db, Tweet, tweet_id, "tweet")
    ensure_owner(tweet, actor_id)
    tweet.content = data.content
    await db.commit()
    await db.refresh(tweet)
    return tweet


async def delete_tweet(db: AsyncSession, tweet_id: str, actor_id: str) -> None:
    tweet = await get_or_404(db, Tweet, tweet_id, "tweet")
    ensure_owner(tweet, actor_id)
    await db.execute(delete(Like).where(Like.tweet_id == tweet.id))
    await db.delete(tweet)
    await db.commit()
