"""Moderation-related Pydantic schemas."""

from datetime import datetime

from pydantic import Field

from .common import CamelModel


class ModerationActionCreate(CamelModel):
    """Schema for a moderator remediation, optionally closing a report."""

    action: str = Field(
        ..., description="remove_content, ban_user, dismiss_report or warn_user"
    )
    target_type: str
    target_id: str
    report_id: str | None = Field(None, description="Report closed by this action")
    notes: str | None = None


class ModerationActionResponse(CamelModel):
    """Audit trail entry."""

    id: str
    moderator_id: str
    action_type: str
    target_type: str
    target_id: str
    report_id: str | None
    notes: str | None
    created_at: datetime
