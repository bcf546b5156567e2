"""CRUD operations for playlists.

A playlist keeps its videos as an ordered list of ids; adding appends and
removing drops every occurrence.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.db.crud.common import ensure_owner, get_or_404
from src.db.crud.videos import get_visible_video
from src.models import Playlist
from src.models.base import parse_id
from src.models.schemas import PlaylistCreate, PlaylistUpdate


async def create_playlist(db: AsyncSession, owner_id: str, data: PlaylistCreate) -> Playlist:
    playlist = Playlist(owner_id=owner_id, name=data.name, description=data.description, videos=[])
    db.add(playlist)
    await db.commit()
    await db.refresh(playlist)
    return playlist


async def get_owned_playlist(db: AsyncSession, playlist_id: str, actor_id: str) -> Playlist:
    playlist = await get_or_404(db, Playlist, playlist_id, "playlist")
    ensure_owner(playlist, actor_id)
    return playlist


async def add_video(db: AsyncSession, playlist_id: str, video_id: str, actor_id: str) -> Playlist:
    """Append a video to a playlist.

    Raises:
        NotFoundError: the playlist or the video does not exist, or the
            video is unpublished and not the actor's
        PermissionDeniedError: the actor does not own the playlist
    """
    playlist = await get_owned_playlist(db, playlist_id, actor_id)
    video = await get_visible_video(db, video_id, actor_id)
    playlist.videos = [*(playlist.videos or []), video.id]
    await db.commit()
    await db.refresh(playlist)
    return playlist


async def remove_video(db: AsyncSession, playlist_id: str, video_id: str, actor_id: str) -> Playlist:
    playlist = await get_owned_playlist(db, playlist_id, actor_id)
    video_id = parse_id(video_id, "video_id")
    playlist.videos = [vid for vid in playlist.videos or [] if vid != video_id]
    await db.commit()
    await db.refresh(playlist)
    return playlist


async def update_playlist(db: AsyncSession, playlist_id: str, actor_id: str, data: PlaylistUpdate) -> Playlist:
    playlist = await get_owned_playlist(db, playlist_id, actor_id)
    if data.name is not None:
        playlist.name = data.name
    if data.description is not None:
        playlist.description = data.description
    await db.commit()
    await db.refresh(playlist)
    return playlist


async def delete_playlist(db: AsyncSession, playlist_id: str, actor_id: str) -> None:
    playlist = await get_owned_playlist(db, playlist_id, actor_id)
    await db.delete(playlist)
    await db.commit()
