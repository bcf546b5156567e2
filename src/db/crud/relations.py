"""Toggle operations for likes and subscriptions.

A relation row's existence is the whole signal, so "like" and "unlike" (or
"subscribe" and "unsubscribe") are one operation: delete the row if it
exists, otherwise create it. Concurrent double submissions from the same
actor are settled by the store's unique constraints, not in-process.
"""

import enum
from dataclasses import dataclass

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.models import Comment, Like, Subscription, Tweet, User, Video
from src.models.base import Base, parse_id
from src.utils.errors import ConflictError, NotFoundError
from src.utils.logging import LogContext, get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RelationSpec:
    model: type[Base]
    actor_field: str
    target_field: str
    target_model: type[Base]
    target_label: str
    # Targets with a publish flag only accept new relations once visible
    gated_by_publish: bool = False


class RelationKind(str, enum.Enum):
    VIDEO_LIKE = "video_like"
    COMMENT_LIKE = "comment_like"
    TWEET_LIKE = "tweet_like"
    SUBSCRIPTION = "subscription"

    @property
    def spec(self) -> RelationSpec:
        return RELATIONS[self]


RELATIONS: dict[RelationKind, RelationSpec] = {
    RelationKind.VIDEO_LIKE: RelationSpec(
        Like, "liked_by_id", "video_id", Video, "video", gated_by_publish=True
    ),
    RelationKind.COMMENT_LIKE: RelationSpec(Like, "liked_by_id", "comment_id", Comment, "comment"),
    RelationKind.TWEET_LIKE: RelationSpec(Like, "liked_by_id", "tweet_id", Tweet, "tweet"),
    RelationKind.SUBSCRIPTION: RelationSpec(
        Subscription, "subscriber_id", "channel_id", User, "channel"
    ),
}


@dataclass
class ToggleResult:
    created: bool
    record: Base | None = None


async def toggle(
    db: AsyncSession,
    relation: RelationKind,
    target_id: str,
    actor_id: str,
) -> ToggleResult:
    """Delete the (actor, target) relation if present, else create it.

    Raises:
        InvalidReferenceError: malformed target or actor id
        NotFoundError: creating a relation to a target that does not exist
            or that the actor cannot see
        ConflictError: a concurrent request created the same relation first
    """
    spec = relation.spec
    target_id = parse_id(target_id, f"{spec.target_label}_id")
    actor_id = parse_id(actor_id, "user_id")
    log = LogContext(logger, relation=relation.value, actor=actor_id, target=target_id)

    actor_column = getattr(spec.model, spec.actor_field)
    target_column = getattr(spec.model, spec.target_field)

    result = await db.execute(
        delete(spec.model).where(actor_column == actor_id, target_column == target_id)
    )
    if result.rowcount:
        await db.commit()
        log.debug("relation removed")
        return ToggleResult(created=False)

    target = await db.get(spec.target_model, target_id)
    if target is None or (
        spec.gated_by_publish and not target.is_published and target.owner_id != actor_id
    ):
        await db.rollback()
        raise NotFoundError(f"{spec.target_label.capitalize()} not found")

    record = spec.model(**{spec.actor_field: actor_id, spec.target_field: target_id})
    db.add(record)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        log.warning("concurrent toggle lost the race")
        raise ConflictError("Request already processed, please retry") from e

    await db.refresh(record)
    log.debug("relation created")
    return ToggleResult(created=True, record=record)
