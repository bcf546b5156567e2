"""Playlist API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.responses import EnvelopeResponse, ok
from src.auth import get_current_user, get_optional_user
from src.db import get_db
from src.db.crud import (
    add_video,
    create_playlist,
    delete_playlist,
    get_user,
    remove_video,
    update_playlist,
)
from src.models.schemas import PlaylistCreate, PlaylistRead, PlaylistUpdate
from src.models.user import User
from src.utils.errors import NotFoundError
from src.utils.pagination import paginate
from src.views import fetch_one
from src.views.catalog import playlist_detail_view, user_playlists_view

router = APIRouter()


@router.post("", status_code=201)
async def new_playlist(
    data: PlaylistCreate,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> EnvelopeResponse:
    playlist = await create_playlist(db, user.id, data)
    return ok(201, PlaylistRead.model_validate(playlist), "Playlist created successfully")


@router.get("/user/{user_id}")
async def list_user_playlists(
    user_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    viewer: Annotated[User | None, Depends(get_optional_user)],
    page: Annotated[str | None, Query()] = None,
    limit: Annotated[str | None, Query()] = None,
) -> EnvelopeResponse:
    owner = await get_user(db, user_id)
    view = user_playlists_view(owner.id, viewer.id if viewer else None)
    result = await paginate(db, view, page, limit)
    return ok(200, result, "Playlists fetched successfully")


@router.get("/{playlist_id}")
async def get_playlist(
    playlist_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    viewer: Annotated[User | None, Depends(get_optional_user)],
) -> EnvelopeResponse:
    """A playlist with the videos the viewer may see, in playlist order."""
    view = playlist_detail_view(playlist_id, viewer.id if viewer else None)
    playlist = await fetch_one(db, view)
    if playlist is None:
        raise NotFoundError("Playlist not found")
    return ok(200, playlist, "Playlist fetched successfully")


@router.patch("/add/{video_id}/{playlist_id}")
async def add_video_to_playlist(
    video_id: str,
    playlist_id: str,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> EnvelopeResponse:
    playlist = await add_video(db, playlist_id, video_id, user.id)
    return ok(200, PlaylistRead.model_validate(playlist), "Video added to playlist")


@router.patch("/remove/{video_id}/{playlist_id}")
async def remove_video_from_playlist(
    video_id: str,
    playlist_id: str,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> EnvelopeResponse:
    playlist = await remove_video(db, playlist_id, video_id, user.id)
    return ok(200, PlaylistRead.model_validate(playlist), "Video removed from playlist")


@router.patch("/{playlist_id}")
async def edit_playlist(
    playlist_id: str,
    data: PlaylistUpdate,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> EnvelopeResponse:
    playlist = await update_playlist(db, playlist_id, user.id, data)
    return ok(200, PlaylistRead.model_validate(playlist), "Playlist updated successfully")


@router.delete("/{playlist_id}")
async def remove_playlist(
    playlist_id: str,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> EnvelopeResponse:
    await delete_playlist(db, playlist_id, user.id)
    return ok(200, {"id": playlist_id}, "Playlist deleted successfully")
