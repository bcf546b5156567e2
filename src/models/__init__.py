"""SQLAlchemy models."""

from src.models.base import Base, is_valid_id, new_id, parse_id
from src.models.comment import Comment
from src.models.playlist import Playlist
from src.models.relations import Like, Subscription
from src.models.tweet import Tweet
from src.models.user import User
from src.models.video import Video

__all__ = [
    "Base",
    "User",
    "Video",
    "Comment",
    "Like",
    "Playlist",
    "Subscription",
    "Tweet",
    "is_valid_id",
    "new_id",
    "parse_id",
]
