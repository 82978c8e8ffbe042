"""Report-related Pydantic schemas."""

from datetime import datetime
from typing import Any

from pydantic import Field

from .common import CamelModel


class ReportCreate(CamelModel):
    """Schema for filing a report against a user, item, message or comment."""

    target_type: str = Field(..., description="user, item, message, comment or other")
    target_id: str = Field(..., description="Identifier of the reported entity")
    category: str = Field(..., description="Report category, e.g. spam or harassment")
    description: str | None = Field(None, description="Free-form details from the reporter")
    metadata: dict[str, Any] | None = Field(None, description="Client supplied context")


class ReportSummary(CamelModel):
    id: str
    status: str
    created_at: datetime


class ReportCreated(CamelModel):
    report: ReportSummary


class ReportResponse(CamelModel):
    """Schema for report information returned to moderators."""

    id: str
    reporter_id: str
    target_type: str
    target_id: str
    category: str
    description: str | None
    metadata: dict[str, Any] | None = Field(None, validation_alias="metadata_")
    status: str
    created_at: datetime
    needs_action_by: datetime
    first_response_at: datetime | None
    resolved_at: datetime | None
    resolved_by: str | None
    resolution_notes: str | None
    auto_escalated: bool


class ReportCategory(CamelModel):
    id: str
    label: str


class TargetPreviewResponse(CamelModel):
    type: str
    data: dict[str, Any] | None


class AutoAction(CamelModel):
    id: str
    action: str | None


class EscalationResponse(CamelModel):
    """Summary of one escalation sweep."""

    escalated: int
    auto_actions: list[AutoAction]
