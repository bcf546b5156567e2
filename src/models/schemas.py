"""Pydantic schemas for API validation and serialization."""

import re
from datetime import datetime
from typing import Annotated, Any, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    StringConstraints,
    field_validator,
    model_validator,
)
from pydantic import ValidationError as PydanticValidationError

from src.constants import PASSWORD_MIN_LENGTH, TITLE_MAX_LENGTH, USERNAME_MAX_LENGTH
from src.utils.errors import ValidationError

NonBlank = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
OptionalNonBlank = NonBlank | None

USERNAME_RE = re.compile(r"^[a-z0-9_.-]+$")

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def validate_model(schema: type[SchemaT], **data: Any) -> SchemaT:
    """Build a schema from loose values (e.g. multipart form fields).

    Raises:
        ValidationError: listing every field that failed validation
    """
    try:
        return schema(**data)
    except PydanticValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"]) or "body" for err in e.errors()})
        raise ValidationError(
            f"Invalid or missing fields: {', '.join(fields)}", details=fields
        ) from e


def normalize_email(value: Any) -> Any:
    """Lower-case an email before EmailStr validates it."""
    return value.strip().lower() if isinstance(value, str) else value


# User schemas
class UserRegister(BaseModel):
    """Registration data (sent as multipart form fields with the avatar)."""

    username: Annotated[NonBlank, StringConstraints(max_length=USERNAME_MAX_LENGTH)]
    email: EmailStr
    display_name: NonBlank
    password: Annotated[str, StringConstraints(min_length=PASSWORD_MIN_LENGTH)]

    @field_validator("username")
    @classmethod
    def normalize_username(cls, v: str) -> str:
        v = v.lower()
        if not USERNAME_RE.match(v):
            raise ValueError("Username may only contain letters, digits, '_', '.' and '-'")
        return v

    @field_validator("email", mode="before")
    @classmethod
    def check_email(cls, v: Any) -> Any:
        return normalize_email(v)


class LoginRequest(BaseModel):
    """Login with username or email."""

    username: OptionalNonBlank = None
    email: OptionalNonBlank = None
    password: NonBlank

    @model_validator(mode="after")
    def require_identifier(self) -> "LoginRequest":
        if not (self.username or self.email):
            raise ValueError("username or email is required")
        return self


class AccountUpdate(BaseModel):
    """Account details update; at least one field must be given."""

    display_name: OptionalNonBlank = None
    email: EmailStr | None = None

    @field_validator("email", mode="before")
    @classmethod
    def check_email(cls, v: Any) -> Any:
        return normalize_email(v)

    @model_validator(mode="after")
    def require_any(self) -> "AccountUpdate":
        if self.display_name is None and self.email is None:
            raise ValueError("display_name or email is required")
        return self


class PasswordChange(BaseModel):
    old_password: NonBlank
    new_password: Annotated[str, StringConstraints(min_length=PASSWORD_MIN_LENGTH)]


class UserRead(BaseModel):
    """Public user fields. The password hash is never part of this schema."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    email: str
    display_name: str
    avatar_url: str | None = None
    cover_image_url: str | None = None
    created_at: datetime


# Video schemas
class VideoCreate(BaseModel):
    title: Annotated[NonBlank, StringConstraints(max_length=TITLE_MAX_LENGTH)]
    description: NonBlank


class VideoUpdate(VideoCreate):
    pass


class VideoRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    owner_id: str
    title: str
    description: str
    video_url: str
    thumbnail_url: str
    duration_seconds: float
    view_count: int
    is_published: bool
    created_at: datetime
    updated_at: datetime


# Comment schemas
class CommentCreate(BaseModel):
    content: NonBlank


class CommentUpdate(CommentCreate):
    pass


class CommentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    video_id: str
    owner_id: str
    content: str
    created_at: datetime
    updated_at: datetime


# Tweet schemas
class TweetCreate(BaseModel):
    content: NonBlank


class TweetUpdate(TweetCreate):
    pass


class TweetRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    owner_id: str
    content: str
    created_at: datetime
    updated_at: datetime


# Playlist schemas
class PlaylistCreate(BaseModel):
    name: NonBlank
    description: NonBlank


class PlaylistUpdate(BaseModel):
    """Playlist update; at least one field must be given."""

    name: OptionalNonBlank = None
    description: OptionalNonBlank = None

    @model_validator(mode="after")
    def require_any(self) -> "PlaylistUpdate":
        if self.name is None and self.description is None:
            raise ValueError("name or description is required")
        return self


class PlaylistRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    owner_id: str
    name: str
    description: str
    videos: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


# Relation schemas
class ToggleRead(BaseModel):
    """Outcome of a toggle: True when the relation now exists."""

    created: bool
