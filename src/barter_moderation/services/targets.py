"""Resolution of polymorphic report targets to their owning rows."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from barter_moderation.core.errors import DependencyError
from barter_moderation.models import Item, Message, User
from barter_moderation.models.report import ReportTargetType

# Target kinds backed by a table this service can read and mutate.
_TARGET_MODELS: dict[str, type[Item] | type[Message] | type[User]] = {
    ReportTargetType.ITEM: Item,
    ReportTargetType.MESSAGE: Message,
    ReportTargetType.USER: User,
}


@dataclass(frozen=True)
class TargetPreview:
    """What a moderator sees of a reported entity."""

    type: str
    data: dict[str, Any]


def load_target(db: Session, target_type: str, target_id: str) -> Item | Message | User | None:
    """Return the row behind ``(target_type, target_id)`` or None.

    ``comment`` and ``other`` targets have no owning table here and always
    resolve to None.
    """
    model = _TARGET_MODELS.get(target_type)
    if model is None:
        return None
    try:
        return db.get(model, target_id)
    except SQLAlchemyError as err:
        raise DependencyError(f"Failed to load {target_type} {target_id}") from err


def _preview_data(entity: Item | Message | User) -> dict[str, Any]:
    if isinstance(entity, Item):
        return {
            "id": entity.id,
            "title": entity.title,
            "description": entity.description,
            "userId": entity.user_id,
            "createdAt": entity.created_at.isoformat(),
            "removed": entity.is_removed,
        }
    if isinstance(entity, Message):
        return {
            "id": entity.id,
            "content": entity.content,
            "senderId": entity.sender_id,
            "receiverId": entity.receiver_id,
            "imageUrl": entity.image_url,
            "createdAt": entity.created_at.isoformat(),
            "removed": entity.is_removed,
        }
    return {
        "id": entity.id,
        "username": entity.username,
        "avatarUrl": entity.avatar_url,
        "createdAt": entity.created_at.isoformat(),
        "banned": entity.is_banned,
    }


def preview_target(db: Session, target_type: str, target_id: str) -> TargetPreview | None:
    """Return a moderator-facing preview of the target, or None when not found."""
    entity = load_target(db, target_type, target_id)
    if entity is None:
        return None
    return TargetPreview(type=target_type, data=_preview_data(entity))
