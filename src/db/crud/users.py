"""CRUD operations for users and their accounts.

Password hashing is CPU bound, so it runs in a worker thread.
"""

import asyncio

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.crud.common import get_or_404
from src.models import User
from src.models.schemas import AccountUpdate, LoginRequest, PasswordChange, UserRegister
from src.utils.errors import AuthenticationError, ConflictError, ValidationError
from src.utils.logging import get_logger
from src.utils.secrets import hash_password, verify_password

logger = get_logger(__name__)

IMAGE_FIELDS = ("avatar_url", "cover_image_url")


async def get_user(db: AsyncSession, user_id: str) -> User:
    return await get_or_404(db, User, user_id, "user")


async def get_user_by_login(db: AsyncSession, username: str | None, email: str | None) -> User | None:
    """Find a user by username or email (both compared case-insensitively)."""
    conditions = []
    if username:
        conditions.append(User.username == username.strip().lower())
    if email:
        conditions.append(User.email == email.strip().lower())
    if not conditions:
        return None
    result = await db.execute(select(User).where(or_(*conditions)).limit(1))
    return result.scalar_one_or_none()


async def create_user(
    db: AsyncSession,
    data: UserRegister,
    avatar_url: str,
    cover_image_url: str | None = None,
) -> User:
    """Register a new user.

    Raises:
        ConflictError: the username or email is already taken
    """
    if await get_user_by_login(db, data.username, data.email) is not None:
        raise ConflictError("User with this username or email already exists")

    user = User(
        username=data.username,
        email=data.email,
        display_name=data.display_name,
        password_hash=await asyncio.to_thread(hash_password, data.password),
        avatar_url=avatar_url,
        cover_image_url=cover_image_url,
        watch_history=[],
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise ConflictError("User with this username or email already exists") from e

    await db.refresh(user)
    logger.info(f"Registered user {user.username} ({user.id})")
    return user


async def authenticate(db: AsyncSession, data: LoginRequest) -> User:
    """Check credentials; the error does not reveal which part was wrong."""
    user = await get_user_by_login(db, data.username, data.email)
    if user is None or not await asyncio.to_thread(verify_password, data.password, user.password_hash):
        raise AuthenticationError("Invalid credentials")
    return user


async def update_account(db: AsyncSession, user: User, data: AccountUpdate) -> User:
    if data.email is not None and data.email != user.email:
        taken = await db.execute(select(User.id).where(User.email == data.email))
        if taken.scalar_one_or_none() is not None:
            raise ConflictError("Email already in use")
        user.email = data.email
    if data.display_name is not None:
        user.display_name = data.display_name

    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise ConflictError("Email already in use") from e
    await db.refresh(user)
    return user


async def change_password(db: AsyncSession, user: User, data: PasswordChange) -> None:
    if not await asyncio.to_thread(verify_password, data.old_password, user.password_hash):
        raise ValidationError("Invalid old password", details=["old_password"])
    user.password_hash = await asyncio.to_thread(hash_password, data.new_password)
    await db.commit()
    logger.info(f"Password changed for user {user.id}")


async def replace_image(db: AsyncSession, user: User, field: str, url: str) -> str | None:
    """Point an image field at a new asset.

    Returns:
        The previous URL, for the caller to remove from the asset store
    """
    if field not in IMAGE_FIELDS:
        raise ValueError(f"Not an image field: {field}")
    previous = getattr(user, field)
    setattr(user, field, url)
    await db.commit()
    await db.refresh(user)
    return previous
