"""CRUD operations for videos."""

from dataclasses import dataclass

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.crud.common import ensure_owner, get_or_404
from src.models import Comment, Like, User, Video
from src.models.schemas import VideoCreate, VideoUpdate
from src.utils.errors import NotFoundError
from src.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class DeletedVideo:
    """Asset URLs left behind by a deleted video."""

    id: str
    video_url: str
    thumbnail_url: str


async def create_video(
    db: AsyncSession,
    owner_id: str,
    data: VideoCreate,
    video_url: str,
    thumbnail_url: str,
    duration_seconds: float | None = None,
) -> Video:
    video = Video(
        owner_id=owner_id,
        title=data.title,
        description=data.description,
        video_url=video_url,
        thumbnail_url=thumbnail_url,
        duration_seconds=duration_seconds or 0.0,
        view_count=0,
        is_published=True,
    )
    db.add(video)
    await db.commit()
    await db.refresh(video)
    logger.info(f"Published video {video.id} for user {owner_id}")
    return video


async def get_owned_video(db: AsyncSession, video_id: str, actor_id: str) -> Video:
    """Load a video the actor is about to change.

    Raises:
        NotFoundError: no such video
        PermissionDeniedError: the actor is not the owner
    """
    video = await get_or_404(db, Video, video_id, "video")
    ensure_owner(video, actor_id)
    return video


async def get_visible_video(db: AsyncSession, video_id: str, viewer_id: str | None) -> Video:
    """Load a video; unpublished videos exist only for their owner."""
    video = await get_or_404(db, Video, video_id, "video")
    if not video.is_published and video.owner_id != viewer_id:
        raise NotFoundError("Video not found")
    return video


async def video_owner_id(db: AsyncSession, video_id: str) -> str | None:
    result = await db.execute(select(Video.owner_id).where(Video.id == video_id))
    return result.scalar_one_or_none()


async def record_view(db: AsyncSession, video: Video, viewer: User | None) -> None:
    """Count a view and move the video to the end of the viewer's history.

    A video appears in a history at most once.
    """
    video.view_count = (video.view_count or 0) + 1
    if viewer is not None:
        history = [vid for vid in viewer.watch_history or [] if vid != video.id]
        history.append(video.id)
        # Reassign so the JSON column is flagged dirty
        viewer.watch_history = history
    await db.commit()


async def update_video(
    db: AsyncSession,
    video_id: str,
    actor_id: str,
    data: VideoUpdate,
    thumbnail_url: str | None = None,
) -> tuple[Video, str | None]:
    """Update title and description, and optionally the thumbnail.

    Returns:
        The video and the replaced thumbnail URL (None if unchanged)
    """
    video = await get_owned_video(db, video_id, actor_id)
    video.title = data.title
    video.description = data.description

    previous_thumbnail = None
    if thumbnail_url:
        previous_thumbnail = video.thumbnail_url
        video.thumbnail_url = thumbnail_url

    await db.commit()
    await db.refresh(video)
    return video, previous_thumbnail


async def delete_video(db: AsyncSession, video_id: str, actor_id: str) -> DeletedVideo:
    """Delete a video together with its comments and every like on either."""
    video = await get_owned_video(db, video_id, actor_id)
    deleted = DeletedVideo(id=video.id, video_url=video.video_url, thumbnail_url=video.thumbnail_url)

    comment_ids = select(Comment.id).where(Comment.video_id == video.id).scalar_subquery()
    await db.execute(delete(Like).where(Like.comment_id.in_(comment_ids)))
    await db.execute(delete(Like).where(Like.video_id == video.id))
    await db.execute(delete(Comment).where(Comment.video_id == video.id))
    await db.delete(video)
    await db.commit()

    logger.info(f"Deleted video {deleted.id}")
    return deleted


async def toggle_publish(db: AsyncSession, video_id: str, actor_id: str) -> Video:
    video = await get_owned_video(db, video_id, actor_id)
    video.is_published = not video.is_published
    await db.commit()
    await db.refresh(video)
    return video
