"""CRUD operations for comments."""

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.crud.common import ensure_owner, get_or_404
from src.db.crud.videos import get_visible_video
from src.models import Comment, Like
from src.models.schemas import CommentCreate, CommentUpdate


async def add_comment(db: AsyncSession, video_id: str, owner_id: str, data: CommentCreate) -> Comment:
    """Comment on a video.

    Raises:
        NotFoundError: the video does not exist or is not visible to the author
    """
    video = await get_visible_video(db, video_id, owner_id)
    comment = Comment(video_id=video.id, owner_id=owner_id, content=data.content)
    db.add(comment)
    await db.commit()
    await db.refresh(comment)
    return comment


async def update_comment(db: AsyncSession, comment_id: str, actor_id: str, data: CommentUpdate) -> Comment:
    comment = await get_or_404(db, Comment, comment_id, "comment")
    ensure_owner(comment, actor_id)
    comment.content = data.content
    await db.commit()
    await db.refresh(comment)
    return comment


async def delete_comment(db: AsyncSession, comment_id: str, actor_id: str) -> str:
    """Delete a comment and its likes.

    Returns:
        The id of the video the comment was on
    """
    comment = await get_or_404(db, Comment, comment_id, "comment")
    ensure_owner(comment, actor_id)
    video_id = comment.video_id
    await db.execute(delete(Like).where(Like.comment_id == comment.id))
    await db.delete(comment)
    await db.commit()
    return video_id
