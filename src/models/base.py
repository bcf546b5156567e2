"""Declarative base, shared mixins and entity ids."""

import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from src.utils.errors import InvalidReferenceError

ID_LENGTH = 36


def new_id() -> str:
    """Generate an opaque entity id (canonical UUID4 string)."""
    return str(uuid.uuid4())


def is_valid_id(value: object) -> bool:
    """Check that a value is a structurally valid entity id."""
    if not isinstance(value, str) or len(value) != ID_LENGTH:
        return False
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


def parse_id(value: object, label: str = "id") -> str:
    """Return the canonical form of an entity id or raise InvalidReferenceError."""
    if not is_valid_id(value):
        raise InvalidReferenceError(f"Invalid {label}", details=[label])
    return str(uuid.UUID(value))  # type: ignore[arg-type]


def utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class IdMixin:
    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True, default=new_id)


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )
