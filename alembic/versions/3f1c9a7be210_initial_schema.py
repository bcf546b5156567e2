"""initial_schema

Revision ID: 3f1c9a7be210
Revises:
Create Date: 2026-10-17 10:00:00.000000
"""
from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7be210'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column('id', sa.String(36), primary_key=True)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def _user_fk(name: str) -> sa.Column:
    return sa.Column(name, sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)


def upgrade() -> None:
    op.create_table(
        'users',
        _id(),
        sa.Column('username', sa.String(50), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('display_name', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('avatar_url', sa.String(2000), nullable=True),
        sa.Column('cover_image_url', sa.String(2000), nullable=True),
        sa.Column('watch_history', sa.JSON(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_created_at', 'users', ['created_at'])

    op.create_table(
        'videos',
        _id(),
        _user_fk('owner_id'),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('video_url', sa.String(2000), nullable=False),
        sa.Column('thumbnail_url', sa.String(2000), nullable=False),
        sa.Column('duration_seconds', sa.Float(), nullable=False),
        sa.Column('view_count', sa.Integer(), nullable=False),
        sa.Column('is_published', sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_videos_owner_id', 'videos', ['owner_id'])
    op.create_index('ix_videos_created_at', 'videos', ['created_at'])
    # Public listing: WHERE is_published ORDER BY created_at
    op.create_index('ix_videos_published_created', 'videos', ['is_published', 'created_at'])

    op.create_table(
        'comments',
        _id(),
        sa.Column(
            'video_id', sa.String(36), sa.ForeignKey('videos.id', ondelete='CASCADE'), nullable=False
        ),
        _user_fk('owner_id'),
        sa.Column('content', sa.Text(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_comments_video_id', 'comments', ['video_id'])
    op.create_index('ix_comments_owner_id', 'comments', ['owner_id'])
    op.create_index('ix_comments_created_at', 'comments', ['created_at'])

    op.create_table(
        'tweets',
        _id(),
        _user_fk('owner_id'),
        sa.Column('content', sa.Text(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_tweets_owner_id', 'tweets', ['owner_id'])
    op.create_index('ix_tweets_created_at', 'tweets', ['created_at'])

    op.create_table(
        'playlists',
        _id(),
        _user_fk('owner_id'),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('videos', sa.JSON(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_playlists_owner_id', 'playlists', ['owner_id'])
    op.create_index('ix_playlists_created_at', 'playlists', ['created_at'])

    op.create_table(
        'likes',
        _id(),
        _user_fk('liked_by_id'),
        sa.Column(
            'video_id', sa.String(36), sa.ForeignKey('videos.id', ondelete='CASCADE'), nullable=True
        ),
        sa.Column(
            'comment_id', sa.String(36), sa.ForeignKey('comments.id', ondelete='CASCADE'), nullable=True
        ),
        sa.Column(
            'tweet_id', sa.String(36), sa.ForeignKey('tweets.id', ondelete='CASCADE'), nullable=True
        ),
        *_timestamps(),
        sa.UniqueConstraint('liked_by_id', 'video_id', name='uq_like_user_video'),
        sa.UniqueConstraint('liked_by_id', 'comment_id', name='uq_like_user_comment'),
        sa.UniqueConstraint('liked_by_id', 'tweet_id', name='uq_like_user_tweet'),
        sa.CheckConstraint(
            '(CASE WHEN video_id IS NULL THEN 0 ELSE 1 END)'
            ' + (CASE WHEN comment_id IS NULL THEN 0 ELSE 1 END)'
            ' + (CASE WHEN tweet_id IS NULL THEN 0 ELSE 1 END) = 1',
            name='ck_like_single_target',
        ),
    )
    op.create_index('ix_likes_liked_by_id', 'likes', ['liked_by_id'])
    op.create_index('ix_likes_video_id', 'likes', ['video_id'])
    op.create_index('ix_likes_comment_id', 'likes', ['comment_id'])
    op.create_index('ix_likes_tweet_id', 'likes', ['tweet_id'])
    op.create_index('ix_likes_created_at', 'likes', ['created_at'])

    op.create_table(
        'subscriptions',
        _id(),
        _user_fk('subscriber_id'),
        _user_fk('channel_id'),
        *_timestamps(),
        sa.UniqueConstraint('subscriber_id', 'channel_id', name='uq_subscription_pair'),
    )
    op.create_index('ix_subscriptions_subscriber_id', 'subscriptions', ['subscriber_id'])
    op.create_index('ix_subscriptions_channel_id', 'subscriptions', ['channel_id'])
    op.create_index('ix_subscriptions_created_at', 'subscriptions', ['created_at'])


def downgrade() -> None:
    op.drop_table('subscriptions')
    op.drop_table('likes')
    op.drop_table('playlists')
    op.drop_table('tweets')
    op.drop_table('comments')
    op.drop_table('videos')
    op.drop_table('users')
