# src/barter_moderation/models/keyword.py
"""Models for blocked-keyword rules and the content filter audit log."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from sqlalchemy import Boolean, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from barter_moderation.db.session import Base
from barter_moderation.db.time import UTCDateTime, utcnow

from ._ids import new_id


class PatternType(StrEnum):
    """How a keyword is compared against content."""

    EXACT = "exact"
    CONTAINS = "contains"
    REGEX = "regex"


class KeywordSeverity(StrEnum):
    """Whether a match only flags the content or rejects it."""

    WARNING = "warning"
    BLOCK = "block"


class FilterContentType(StrEnum):
    """Kinds of user-generated text that pass through the filter."""

    ITEM_TITLE = "item_title"
    ITEM_DESCRIPTION = "item_description"
    MESSAGE = "message"


class FilterAction(StrEnum):
    """Outcome recorded for a filter call."""

    BLOCKED = "blocked"
    WARNED = "warned"
    ALLOWED = "allowed"


class BlockedKeyword(Base):
    """A moderation rule evaluated by the keyword filter."""

    __tablename__ = "blocked_keywords"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    keyword: Mapped[str] = mapped_column(Text, nullable=False)
    pattern_type: Mapped[str] = mapped_column(
        String(16), nullable=False, default=PatternType.CONTAINS.value
    )
    severity: Mapped[str] = mapped_column(
        String(16), nullable=False, default=KeywordSeverity.WARNING.value
    )
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)


class ContentFilterLog(Base):
    """Immutable record of a filter call that matched at least one rule."""

    __tablename__ = "content_filter_logs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    content_type: Mapped[str] = mapped_column(String(32), nullable=False)
    content_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    # Only the first matching rule is referenced, even when several matched.
    matched_keyword_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("blocked_keywords.id"),
        nullable=False,
    )
    action_taken: Mapped[str] = mapped_column(String(16), nullable=False)
    content_preview: Mapped[str] = mapped_column(String(200), nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
