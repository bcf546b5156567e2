"""Tests for like and subscription toggles."""

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.crud import RelationKind, toggle
from src.models import Like, Subscription
from src.models.base import new_id
from src.models.user import User
from src.utils.errors import InvalidReferenceError, NotFoundError


async def _count(db: AsyncSession, model) -> int:
    return (await db.execute(select(func.count()).select_from(model))).scalar_one()


class TestToggle:
    """Tests for toggle()."""

    @pytest.mark.asyncio
    async def test_like_unlike_like(self, db_session: AsyncSession, test_user: User, make_video):
        video = await make_video(test_user)

        results = [
            (await toggle(db_session, RelationKind.VIDEO_LIKE, video.id, test_user.id)).created
            for _ in range(3)
        ]

        assert results == [True, False, True]
        assert await _count(db_session, Like) == 1

    @pytest.mark.asyncio
    async def test_actors_are_independent(
        self, db_session: AsyncSession, test_user: User, other_user: User, make_tweet
    ):
        tweet = await make_tweet(test_user)

        await toggle(db_session, RelationKind.TWEET_LIKE, tweet.id, test_user.id)
        result = await toggle(db_session, RelationKind.TWEET_LIKE, tweet.id, other_user.id)

        assert result.created is True
        assert await _count(db_session, Like) == 2

    @pytest.mark.asyncio
    async def test_missing_target(self, db_session: AsyncSession, test_user: User):
        with pytest.raises(NotFoundError):
            await toggle(db_session, RelationKind.COMMENT_LIKE, new_id(), test_user.id)
        assert await _count(db_session, Like) == 0

    @pytest.mark.asyncio
    async def test_malformed_target(self, db_session: AsyncSession, test_user: User):
        with pytest.raises(InvalidReferenceError):
            await toggle(db_session, RelationKind.VIDEO_LIKE, "42", test_user.id)

    @pytest.mark.asyncio
    async def test_subscription(self, db_session: AsyncSession, test_user: User, other_user: User):
        first = await toggle(db_session, RelationKind.SUBSCRIPTION, other_user.id, test_user.id)
        second = await toggle(db_session, RelationKind.SUBSCRIPTION, other_user.id, test_user.id)

        assert (first.created, second.created) == (True, False)
        assert await _count(db_session, Subscription) == 0

    @pytest.mark.asyncio
    async def test_created_record(self, db_session: AsyncSession, test_user: User, make_video):
        video = await make_video(test_user)

        result = await toggle(db_session, RelationKind.VIDEO_LIKE, video.id, test_user.id)

        assert result.record.video_id == video.id
        assert result.record.comment_id is None


class TestUnpublishedTargets:
    """Video likes respect publish status when created, not when removed."""

    @pytest.mark.asyncio
    async def test_like_hidden_video(self, db_session: AsyncSession, test_user: User, other_user: User, make_video):
        draft = await make_video(test_user, is_published=False)

        with pytest.raises(NotFoundError):
            await toggle(db_session, RelationKind.VIDEO_LIKE, draft.id, other_user.id)
        assert await _count(db_session, Like) == 0

    @pytest.mark.asyncio
    async def test_unlike_after_unpublish(
        self, db_session: AsyncSession, test_user: User, other_user: User, make_video
    ):
        video = await make_video(test_user)
        await toggle(db_session, RelationKind.VIDEO_LIKE, video.id, other_user.id)
        video.is_published = False
        await db_session.commit()

        result = await toggle(db_session, RelationKind.VIDEO_LIKE, video.id, other_user.id)

        assert result.created is False
        assert await _count(db_session, Like) == 0
