# src/barter_moderation/models/report.py
"""Model for user-submitted reports and their lifecycle states."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from sqlalchemy import JSON, Boolean, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from barter_moderation.db.session import Base
from barter_moderation.db.time import UTCDateTime, utcnow

from ._ids import new_id


class ReportTargetType(StrEnum):
    """Kinds of entity a report or moderation action can point at."""

    USER = "user"
    ITEM = "item"
    MESSAGE = "message"
    COMMENT = "comment"
    OTHER = "other"


class ReportStatus(StrEnum):
    """Lifecycle states of a report."""

    PENDING = "pending"
    IN_REVIEW = "in_review"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"


OPEN_STATUSES = frozenset({ReportStatus.PENDING, ReportStatus.IN_REVIEW})
TERMINAL_STATUSES = frozenset({ReportStatus.RESOLVED, ReportStatus.DISMISSED})


class Report(Base):
    """A report filed by a user against a polymorphic target.

    ``target_type``/``target_id`` are not a foreign key; the owning table
    depends on ``target_type``.
    """

    __tablename__ = "reports"
    __table_args__ = (
        Index("ix_reports_escalation", "status", "auto_escalated", "needs_action_by"),
        Index("ix_reports_target", "target_type", "target_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    reporter_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    target_type: Mapped[str] = mapped_column(String(16), nullable=False)
    target_id: Mapped[str] = mapped_column(String(64), nullable=False)
    category: Mapped[str] = mapped_column(String(64), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Column is named "metadata"; the attribute avoids DeclarativeBase.metadata.
    metadata_: Mapped[dict[str, Any] | None] = mapped_column("metadata", JSON, nullable=True)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=ReportStatus.PENDING.value
    )
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    # SLA deadline; set once at intake and never moved.
    needs_action_by: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    first_response_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    resolved_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    resolved_by: Mapped[str | None] = mapped_column(String(36), nullable=True)
    resolution_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    auto_escalated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    @property
    def is_terminal(self) -> bool:
        """Return True once the report has been resolved or dismissed."""
        return self.status in TERMINAL_STATUSES
