"""Playlist model."""

from sqlalchemy import JSON, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base, IdMixin, TimestampMixin


class Playlist(Base, IdMixin, TimestampMixin):
    """A named, ordered list of videos owned by a user."""

    __tablename__ = "playlists"

    owner_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str] = mapped_column(Text)

    # Video ids in playlist order; the same video may appear more than once
    videos: Mapped[list] = mapped_column(JSON, default=list)

    def __repr__(self) -> str:
        return f"<Playlist(id={self.id}, name={self.name})>"
