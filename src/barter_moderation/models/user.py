# src/barter_moderation/models/user.py
"""User accounts as seen by the moderation core.

The account table is owned by the auth collaborator; only the columns the
ban action and role checks need are mapped here.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from barter_moderation.db.session import Base
from barter_moderation.db.time import UTCDateTime, utcnow

from ._ids import new_id

ROLE_USER = "user"
ROLE_MODERATOR = "moderator"
ROLE_ADMIN = "admin"
MODERATOR_ROLES = frozenset({ROLE_MODERATOR, ROLE_ADMIN})


class User(Base):
    """Marketplace account."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    username: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default=ROLE_USER)
    banned_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    ban_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)

    @property
    def is_banned(self) -> bool:
        """Return True when the account has been banned."""
        return self.banned_at is not None
