# src/barter_moderation/models/moderation.py
"""Audit trail of moderator and system remediation actions."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from barter_moderation.db.session import Base
from barter_moderation.db.time import UTCDateTime, utcnow

from ._ids import new_id


class ModerationActionType(StrEnum):
    """Remediations a moderator (or the escalation sweep) can apply."""

    REMOVE_CONTENT = "remove_content"
    BAN_USER = "ban_user"
    DISMISS_REPORT = "dismiss_report"
    WARN_USER = "warn_user"


class ModerationAction(Base):
    """Append-only record of one executed remediation."""

    __tablename__ = "moderation_actions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    moderator_id: Mapped[str] = mapped_column(String(36), nullable=False)
    action_type: Mapped[str] = mapped_column(String(32), nullable=False)
    target_type: Mapped[str] = mapped_column(String(16), nullable=False)
    target_id: Mapped[str] = mapped_column(String(64), nullable=False)
    report_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("reports.id"),
        nullable=True,
        index=True,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
