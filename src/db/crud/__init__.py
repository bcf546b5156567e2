"""CRUD operations module."""

from src.db.crud.comments import add_comment, delete_comment, update_comment
from src.db.crud.common import ensure_owner, get_or_404
from src.db.crud.playlists import (
    add_video,
    create_playlist,
    delete_playlist,
    get_owned_playlist,
    remove_video,
    update_playlist,
)
from src.db.crud.relations import RelationKind, ToggleResult, toggle
from src.db.crud.tweets import create_tweet, delete_tweet, update_tweet
from src.db.crud.users import (
    authenticate,
    change_password,
    create_user,
    get_user,
    get_user_by_login,
    replace_image,
    update_account,
)
from src.db.crud.videos import (
    DeletedVideo,
    create_video,
    delete_video,
    get_owned_video,
    get_visible_video,
    record_view,
    toggle_publish,
    update_video,
    video_owner_id,
)

__all__ = [
    "DeletedVideo",
    "RelationKind",
    "ToggleResult",
    "add_comment",
    "add_video",
    "authenticate",
    "change_password",
    "create_playlist",
    "create_tweet",
    "create_user",
    "create_video",
    "delete_comment",
    "delete_playlist",
    "delete_tweet",
    "delete_video",
    "ensure_owner",
    "get_or_404",
    "get_owned_playlist",
    "get_owned_video",
    "get_user",
    "get_user_by_login",
    "get_visible_video",
    "record_view",
    "remove_video",
    "replace_image",
    "toggle",
    "toggle_publish",
    "update_account",
    "update_comment",
    "update_playlist",
    "update_tweet",
    "update_video",
    "video_owner_id",
]
