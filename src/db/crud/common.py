"""Shared helpers for CRUD operations."""

from typing import TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from src.models.base import Base, parse_id
from src.utils.errors import NotFoundError, PermissionDeniedError

ModelT = TypeVar("ModelT", bound=Base)


async def get_or_404(
    db: AsyncSession,
    model: type[ModelT],
    entity_id: str,
    label: str,
) -> ModelT:
    """Load a record by id.

    Raises:
        InvalidReferenceError: the id is malformed
        NotFoundError: no record has this id
    """
    record = await db.get(model, parse_id(entity_id, f"{label}_id"))
    if record is None:
        raise NotFoundError(f"{label.capitalize()} not found")
    return record


def ensure_owner(record: Base, actor_id: str, owner_field: str = "owner_id") -> None:
    """Reject changes by anyone but the record's owner.

    Must run before any mutating statement is issued.
    """
    if getattr(record, owner_field) != actor_id:
        raise PermissionDeniedError()
