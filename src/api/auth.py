"""Authentication API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.responses import EnvelopeResponse, ok
from src.auth import get_current_user, login_session, logout_session
from src.config import get_settings
from src.db import get_db
from src.db.crud import authenticate, create_user, get_user_by_login
from src.models.schemas import LoginRequest, UserRead, UserRegister, validate_model
from src.models.user import User
from src.services.assets import AssetStore, discard_assets, get_asset_store, stage_upload
from src.utils.errors import ConflictError, UpstreamError
from src.utils.logging import LogContext, get_logger

router = APIRouter()
settings = get_settings()
logger = get_logger(__name__)


@router.post("/register", status_code=201)
async def register(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    store: Annotated[AssetStore, Depends(get_asset_store)],
    username: Annotated[str, Form()],
    email: Annotated[str, Form()],
    display_name: Annotated[str, Form()],
    password: Annotated[str, Form()],
    avatar: Annotated[UploadFile, File()],
    cover_image: Annotated[UploadFile | None, File()] = None,
) -> EnvelopeResponse:
    """Register a user with an avatar and an optional cover image."""
    data = validate_model(
        UserRegister,
        username=username,
        email=email,
        display_name=display_name,
        password=password,
    )
    # Checked before uploading so a duplicate never costs an upload
    if await get_user_by_login(db, data.username, data.email) is not None:
        raise ConflictError("User with this username or email already exists")

    log = LogContext(logger, username=data.username)
    avatar_asset = await stage_upload(store, avatar, settings.asset_staging_dir)
    if avatar_asset is None:
        log.error("avatar upload failed")
        raise UpstreamError("Avatar upload failed")
    cover_asset = await stage_upload(store, cover_image, settings.asset_staging_dir)

    try:
        user = await create_user(
            db,
            data,
            avatar_url=avatar_asset.url,
            cover_image_url=cover_asset.url if cover_asset else None,
        )
    except ConflictError:
        await discard_assets(store, avatar_asset.url, cover_asset.url if cover_asset else None)
        raise

    login_session(request, user)
    return ok(201, UserRead.model_validate(user), "User registered successfully")


@router.post("/login")
async def login(
    request: Request,
    data: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> EnvelopeResponse:
    user = await authenticate(db, data)
    login_session(request, user)
    logger.info(f"User {user.id} logged in")
    return ok(200, UserRead.model_validate(user), "Logged in successfully")


@router.post("/logout")
async def logout(
    request: Request,
    user: Annotated[User, Depends(get_current_user)],
) -> EnvelopeResponse:
    """Log out the current user."""
    logout_session(request)
    return ok(200, {}, "Logged out successfully")


@router.get("/me")
async def get_me(user: Annotated[User, Depends(get_current_user)]) -> EnvelopeResponse:
    """Get current authenticated user."""
    return ok(200, UserRead.model_validate(user), "Current user fetched successfully")
