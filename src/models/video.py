"""Video model."""

from typing import TYPE_CHECKING

from sqlalchemy import Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.constants import TITLE_MAX_LENGTH
from src.models.base import Base, IdMixin, TimestampMixin

if TYPE_CHECKING:
    from src.models.user import User


class Video(Base, IdMixin, TimestampMixin):
    """An uploaded video. Only published videos show up in public listings."""

    __tablename__ = "videos"

    owner_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH))
    description: Mapped[str] = mapped_column(Text)
    video_url: Mapped[str] = mapped_column(String(2000))
    thumbnail_url: Mapped[str] = mapped_column(String(2000))
    duration_seconds: Mapped[float] = mapped_column(Float, default=0.0)
    view_count: Mapped[int] = mapped_column(Integer, default=0)
    is_published: Mapped[bool] = mapped_column(default=True)

    owner: Mapped["User"] = relationship("User", back_populates="videos")

    __table_args__ = (
        # Public listing: WHERE is_published ORDER BY created_at
        Index("ix_videos_published_created", "is_published", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Video(id={self.id}, title={self.title})>"
