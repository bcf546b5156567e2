"""User account and channel API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.responses import EnvelopeResponse, ok
from src.auth import get_current_user, get_optional_user
from src.config import get_settings
from src.db import get_db
from src.db.crud import change_password, replace_image, update_account
from src.models.schemas import AccountUpdate, PasswordChange, UserRead
from src.models.user import User
from src.services.assets import AssetStore, discard_assets, get_asset_store, stage_upload
from src.utils.errors import NotFoundError, UpstreamError
from src.views import fetch_one
from src.views.catalog import channel_profile_view, watch_history_view

router = APIRouter()
settings = get_settings()


async def _replace_user_image(
    db: AsyncSession,
    store: AssetStore,
    user: User,
    field: str,
    upload: UploadFile,
    label: str,
) -> User:
    asset = await stage_upload(store, upload, settings.asset_staging_dir)
    if asset is None:
        raise UpstreamError(f"{label} upload failed")
    previous = await replace_image(db, user, field, asset.url)
    await discard_assets(store, previous)
    return user


@router.patch("/account")
async def update_account_details(
    data: AccountUpdate,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> EnvelopeResponse:
    user = await update_account(db, user, data)
    return ok(200, UserRead.model_validate(user), "Account details updated successfully")


@router.post("/password")
async def update_password(
    data: PasswordChange,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> EnvelopeResponse:
    await change_password(db, user, data)
    return ok(200, {}, "Password changed successfully")


@router.patch("/avatar")
async def update_avatar(
    avatar: Annotated[UploadFile, File()],
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    store: Annotated[AssetStore, Depends(get_asset_store)],
) -> EnvelopeResponse:
    user = await _replace_user_image(db, store, user, "avatar_url", avatar, "Avatar")
    return ok(200, UserRead.model_validate(user), "Avatar updated successfully")


@router.patch("/cover-image")
async def update_cover_image(
    cover_image: Annotated[UploadFile, File()],
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    store: Annotated[AssetStore, Depends(get_asset_store)],
) -> EnvelopeResponse:
    user = await _replace_user_image(db, store, user, "cover_image_url", cover_image, "Cover image")
    return ok(200, UserRead.model_validate(user), "Cover image updated successfully")


@router.get("/channel/{username}")
async def get_channel_profile(
    username: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    viewer: Annotated[User | None, Depends(get_optional_user)],
) -> EnvelopeResponse:
    """Public channel profile with subscription counts."""
    channel = await fetch_one(db, channel_profile_view(username, viewer.id if viewer else None))
    if channel is None:
        raise NotFoundError("Channel not found")
    return ok(200, channel, "Channel fetched successfully")


@router.get("/history")
async def get_watch_history(
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> EnvelopeResponse:
    """Videos the user watched, oldest view first."""
    row = await fetch_one(db, watch_history_view(user.id))
    history = row["watch_history"] if row else []
    return ok(200, history, "Watch history fetched successfully")
