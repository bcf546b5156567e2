"""Named views used by the API.

Each function composes filters, joins and shapes into a ``PipelineSpec``.
Identifier arguments are validated by ``build_view`` and raise
``InvalidReferenceError`` when malformed.
"""

from src.utils.errors import ValidationError
from src.views.builder import (
    AnyOf,
    Contains,
    FilterOp,
    Join,
    PipelineSpec,
    Predicate,
    Size,
    Sort,
    Term,
    Total,
    build_view,
)

OWNER_SUMMARY = ("id", "username", "display_name", "avatar_url")
HISTORY_OWNER_SUMMARY = ("id", "display_name", "avatar_url")
PLAYLIST_VIDEO_SUMMARY = ("id", "title", "thumbnail_url", "duration_seconds")
CHANNEL_SUMMARY = ("id", "username", "display_name", "avatar_url", "cover_image_url")
PUBLIC_USER_FIELDS = ("id", "username", "email", "display_name", "avatar_url", "cover_image_url")
VIDEO_FIELDS = (
    "id",
    "title",
    "description",
    "video_url",
    "thumbnail_url",
    "duration_seconds",
    "view_count",
    "is_published",
    "created_at",
    "updated_at",
)

DESCENDING_VALUES = {"desc", "descending", "-1"}
ASCENDING_VALUES = {"asc", "ascending", "1"}

# Liked item kind -> (like column, target collection, output field, target shape)
LIKE_TARGETS = {
    "videos": ("video_id", "videos", "video", VIDEO_FIELDS + ("owner",)),
    "comments": ("comment_id", "comments", "comment", ("id", "content", "video_id", "created_at", "owner")),
    "tweets": ("tweet_id", "tweets", "tweet", ("id", "content", "created_at", "owner")),
}


def owner_join(
    shape: tuple[str, ...] = OWNER_SUMMARY,
    local_key: str = "owner_id",
    output_field: str = "owner",
) -> Join:
    return Join("users", local_key, "id", output_field, shape=shape, singular=True)


def visible_videos(viewer_id: str | None = None) -> tuple[Predicate, ...]:
    """Published videos, plus the viewer's own unpublished ones."""
    if viewer_id:
        return (AnyOf((Term("is_published", True), Term("owner_id", viewer_id))),)
    return (Term("is_published", True),)


def parse_sort_direction(sort_type: str | int | None) -> bool:
    """Return True for a descending sort."""
    if sort_type is None or sort_type == "":
        return False
    value = str(sort_type).strip().lower()
    if value in DESCENDING_VALUES:
        return True
    if value in ASCENDING_VALUES:
        return False
    raise ValidationError("sort_type must be 'asc' or 'desc'", details=["sort_type"])


def video_listing_view(
    query: str | None = None,
    owner_id: str | None = None,
    viewer_id: str | None = None,
    sort_by: str | None = None,
    sort_type: str | int | None = None,
) -> PipelineSpec:
    """Searchable video list with owner summaries.

    Unpublished videos are only listed for their owner.
    """
    filters: list = []
    search = (query or "").strip()
    if search:
        filters.append(AnyOf((
            Term("title", search, FilterOp.ICONTAINS),
            Term("description", search, FilterOp.ICONTAINS),
        )))
    if owner_id:
        filters.append(Term("owner_id", owner_id))
    filters.extend(visible_videos(viewer_id))

    return build_view(
        "videos",
        filters=filters,
        joins=(owner_join(),),
        shape=VIDEO_FIELDS + ("owner",),
        sort=Sort(sort_by or "created_at", descending=parse_sort_direction(sort_type)),
    )


def video_detail_view(video_id: str, viewer_id: str | None = None) -> PipelineSpec:
    """One video with its owner, like count and whether the viewer likes it."""
    return build_view(
        "videos",
        filters=(Term("id", video_id),),
        joins=(
            owner_join(),
            Join("likes", "id", "video_id", "likes", shape=("liked_by_id",)),
        ),
        derive=(
            Size("likes", "like_count"),
            Contains("likes", "liked_by_id", viewer_id, "is_liked"),
        ),
        shape=VIDEO_FIELDS + ("owner", "like_count", "is_liked"),
    )


def channel_profile_view(username: str, viewer_id: str | None = None) -> PipelineSpec:
    """Public channel page: user fields, subscription counts, viewer's status."""
    return build_view(
        "users",
        filters=(Term("username", username.strip().lower()),),
        joins=(
            Join("subscriptions", "id", "channel_id", "subscribers", shape=("subscriber_id",)),
            Join("subscriptions", "id", "subscriber_id", "subscribed_to", shape=("channel_id",)),
        ),
        derive=(
            Size("subscribers", "subscriber_count"),
            Size("subscribed_to", "subscribed_to_count"),
            Contains("subscribers", "subscriber_id", viewer_id, "is_subscribed"),
        ),
        shape=PUBLIC_USER_FIELDS + ("subscriber_count", "subscribed_to_count", "is_subscribed"),
    )


def channel_stats_view(user_id: str) -> PipelineSpec:
    """Scalar totals for a channel's dashboard."""
    return build_view(
        "users",
        filters=(Term("id", user_id),),
        joins=(
            Join(
                "videos",
                "id",
                "owner_id",
                "videos",
                shape=("view_count", "like_count", "comment_count"),
                joins=(
                    Join("likes", "id", "video_id", "like_count", count_only=True),
                    Join("comments", "id", "video_id", "comment_count", count_only=True),
                ),
            ),
            Join("subscriptions", "id", "channel_id", "subscriber_count", count_only=True),
            Join("subscriptions", "id", "subscriber_id", "subscribed_to_count", count_only=True),
            Join("tweets", "id", "owner_id", "total_tweets", count_only=True),
        ),
        derive=(
            Size("videos", "total_videos"),
            Total("videos", "view_count", "total_views"),
            Total("videos", "like_count", "total_likes"),
            Total("videos", "comment_count", "total_comments"),
        ),
        shape=(
            "total_videos",
            "total_views",
            "total_likes",
            "total_comments",
            "total_tweets",
            "subscriber_count",
            "subscribed_to_count",
        ),
    )


def watch_history_view(user_id: str) -> PipelineSpec:
    """A user's watch history resolved to videos, in history order.

    Videos unpublished since by someone else drop out.
    """
    return build_view(
        "users",
        filters=(Term("id", user_id),),
        joins=(
            Join(
                "videos",
                "watch_history",
                "id",
                "watch_history",
                shape=VIDEO_FIELDS + ("owner",),
                joins=(owner_join(HISTORY_OWNER_SUMMARY),),
                filters=visible_videos(user_id),
            ),
        ),
        shape=("watch_history",),
    )


def comment_listing_view(video_id: str) -> PipelineSpec:
    return build_view(
        "comments",
        filters=(Term("video_id", video_id),),
        joins=(
            owner_join(),
            Join("likes", "id", "comment_id", "like_count", count_only=True),
        ),
        shape=("id", "content", "video_id", "created_at", "updated_at", "owner", "like_count"),
    )


def liked_items_view(actor_id: str, kind: str) -> PipelineSpec:
    """Items of one kind the actor likes, most recent like first."""
    try:
        like_field, target, output, target_shape = LIKE_TARGETS[kind]
    except KeyError:
        raise ValidationError(f"Unknown liked item kind: {kind}", details=["kind"]) from None

    return build_view(
        "likes",
        filters=(Term("liked_by_id", actor_id), Term(like_field, op=FilterOp.PRESENT)),
        joins=(
            Join(
                target,
                like_field,
                "id",
                output,
                shape=target_shape,
                singular=True,
                joins=(owner_join(),),
            ),
        ),
        shape=("id", "created_at", output),
        sort=Sort("created_at", descending=True),
    )


def playlist_detail_view(playlist_id: str, viewer_id: str | None = None) -> PipelineSpec:
    """A playlist with its videos resolved in playlist order.

    Only videos the viewer may see are resolved, counted and totalled.
    """
    return build_view(
        "playlists",
        filters=(Term("id", playlist_id),),
        joins=(
            owner_join(),
            Join(
                "videos",
                "videos",
                "id",
                "videos",
                shape=VIDEO_FIELDS + ("owner",),
                joins=(owner_join(),),
                filters=visible_videos(viewer_id),
            ),
        ),
        derive=(
            Size("videos", "video_count"),
            Total("videos", "duration_seconds", "total_duration_seconds"),
        ),
        shape=(
            "id",
            "name",
            "description",
            "owner",
            "videos",
            "video_count",
            "total_duration_seconds",
            "created_at",
            "updated_at",
        ),
    )


def user_playlists_view(owner_id: str, viewer_id: str | None = None) -> PipelineSpec:
    """A user's playlists with a summary of each visible video."""
    return build_view(
        "playlists",
        filters=(Term("owner_id", owner_id),),
        joins=(
            Join(
                "videos",
                "videos",
                "id",
                "videos",
                shape=PLAYLIST_VIDEO_SUMMARY,
                filters=visible_videos(viewer_id),
            ),
        ),
        derive=(Size("videos", "video_count"),),
        shape=("id", "name", "description", "videos", "video_count", "created_at", "updated_at"),
        sort=Sort("created_at", descending=True),
    )


def user_tweets_view(owner_id: str) -> PipelineSpec:
    return build_view(
        "tweets",
        filters=(Term("owner_id", owner_id),),
        joins=(
            owner_join(),
            Join("likes", "id", "tweet_id", "like_count", count_only=True),
        ),
        shape=("id", "content", "owner", "like_count", "created_at", "updated_at"),
        sort=Sort("created_at", descending=True),
    )


def channel_subscribers_view(channel_id: str) -> PipelineSpec:
    return build_view(
        "subscriptions",
        filters=(Term("channel_id", channel_id),),
        joins=(owner_join(CHANNEL_SUMMARY, local_key="subscriber_id", output_field="subscriber"),),
        shape=("id", "created_at", "subscriber"),
    )


def subscribed_channels_view(subscriber_id: str) -> PipelineSpec:
    return build_view(
        "subscriptions",
        filters=(Term("subscriber_id", subscriber_id),),
        joins=(owner_join(CHANNEL_SUMMARY, local_key="channel_id", output_field="channel"),),
        shape=("id", "created_at", "channel"),
    )


def channel_videos_view(owner_id: str) -> PipelineSpec:
    """Every video of a channel, unpublished included, for its dashboard."""
    return build_view(
        "videos",
        filters=(Term("owner_id", owner_id),),
        joins=(
            Join("likes", "id", "video_id", "like_count", count_only=True),
            Join("comments", "id", "video_id", "comment_count", count_only=True),
        ),
        shape=VIDEO_FIELDS + ("like_count", "comment_count"),
        sort=Sort("created_at", descending=True),
    )
