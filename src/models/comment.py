"""Comment model."""

from sqlalchemy import ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base, IdMixin, TimestampMixin


class Comment(Base, IdMixin, TimestampMixin):
    """A comment left on a video."""

    __tablename__ = "comments"

    video_id: Mapped[str] = mapped_column(ForeignKey("videos.id", ondelete="CASCADE"), index=True)
    owner_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    content: Mapped[str] = mapped_column(Text)

    def __repr__(self) -> str:
        return f"<Comment(id={self.id}, video_id={self.video_id})>"
