"""User model."""

from typing import TYPE_CHECKING

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.constants import USERNAME_MAX_LENGTH
from src.models.base import Base, IdMixin, TimestampMixin

if TYPE_CHECKING:
    from src.models.video import Video


class User(Base, IdMixin, TimestampMixin):
    """A registered user. Every user is also a channel."""

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(USERNAME_MAX_LENGTH), unique=True, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    display_name: Mapped[str] = mapped_column(String(255))
    password_hash: Mapped[str] = mapped_column(String(255))
    avatar_url: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    cover_image_url: Mapped[str | None] = mapped_column(String(2000), nullable=True)

    # Ordered list of video ids, oldest view first
    watch_history: Mapped[list] = mapped_column(JSON, default=list)

    # Using lazy="select" so listing users never drags their videos along;
    # videos are queried through views with filters/pagination
    videos: Mapped[list["Video"]] = relationship(
        "Video",
        back_populates="owner",
        cascade="all, delete-orphan",
        lazy="select",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username})>"
