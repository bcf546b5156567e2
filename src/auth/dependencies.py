"""Session-based authentication dependencies for FastAPI."""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.db import get_db
from src.models.base import is_valid_id
from src.models.user import User
from src.utils.errors import AuthenticationError

SESSION_USER_KEY = "user_id"


def login_session(request: Request, user: User) -> None:
    """Bind the session cookie to a user, dropping anything stored before."""
    request.session.clear()
    request.session[SESSION_USER_KEY] = user.id


def logout_session(request: Request) -> None:
    request.session.clear()


async def get_optional_user(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User | None:
    """Get current user from session if logged in."""
    user_id = request.session.get(SESSION_USER_KEY)
    if not user_id:
        return None

    user = await db.get(User, user_id) if is_valid_id(user_id) else None

    # Session points at a user that no longer exists
    if user is None:
        request.session.clear()

    return user


async def get_current_user(
    user: Annotated[User | None, Depends(get_optional_user)],
) -> User:
    """Get current user, raising 401 if not authenticated."""
    if user is None:
        raise AuthenticationError()
    return user
