"""Authentication module."""

from src.auth.dependencies import (
    get_current_user,
    get_optional_user,
    login_session,
    logout_session,
)

__all__ = [
    "get_current_user",
    "get_optional_user",
    "login_session",
    "logout_session",
]
