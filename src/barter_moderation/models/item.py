# src/barter_moderation/models/item.py
"""Marketplace listings, mapped only as far as moderation needs them."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from barter_moderation.db.session import Base
from barter_moderation.db.time import UTCDateTime, utcnow

from ._ids import new_id

ITEM_STATUS_AVAILABLE = "available"
ITEM_STATUS_REMOVED = "removed"


class Item(Base):
    """A free or barter listing posted by a user."""

    __tablename__ = "items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=ITEM_STATUS_AVAILABLE)
    removed_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)

    @property
    def is_removed(self) -> bool:
        return self.removed_at is not None
