"""Moderator-only endpoints: report queue, target previews and remediations."""

from __future__ import annotations

from fastapi import APIRouter, Query, status

from barter_moderation.api.v1.dependencies import ModeratorDep, SessionDep
from barter_moderation.models import ModerationAction
from barter_moderation.schemas.moderation import (
    ModerationActionCreate,
    ModerationActionResponse,
)
from barter_moderation.schemas.report import ReportResponse, TargetPreviewResponse
from barter_moderation.services import reports as report_service
from barter_moderation.services.moderation import ModerationService
from barter_moderation.services.targets import preview_target

router = APIRouter(prefix="/moderation", tags=["moderation"])


@router.get("/reports", response_model=list[ReportResponse])
async def list_reports(
    moderator: ModeratorDep,
    db: SessionDep,
    status_filter: str | None = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
) -> list[ReportResponse]:
    """List reports newest first, optionally filtered by status."""
    reports = report_service.list_reports(db, status=status_filter, limit=limit, offset=offset)
    return [ReportResponse.model_validate(report) for report in reports]


@router.get("/reports/{report_id}", response_model=ReportResponse)
async def get_report(report_id: str, moderator: ModeratorDep, db: SessionDep) -> ReportResponse:
    return ReportResponse.model_validate(report_service.get_report(db, report_id))


@router.get("/reports/{report_id}/target", response_model=TargetPreviewResponse)
async def get_report_target(
    report_id: str,
    moderator: ModeratorDep,
    db: SessionDep,
) -> TargetPreviewResponse:
    """Preview the reported entity. ``data`` is null when it no longer exists."""
    report = report_service.get_report(db, report_id)
    preview = preview_target(db, report.target_type, report.target_id)
    if preview is None:
        return TargetPreviewResponse(type=report.target_type, data=None)
    return TargetPreviewResponse(type=preview.type, data=preview.data)


@router.post("/reports/{report_id}/review", response_model=ReportResponse)
async def start_review(report_id: str, moderator: ModeratorDep, db: SessionDep) -> ReportResponse:
    """Mark a pending report as being reviewed."""
    return ReportResponse.model_validate(report_service.start_review(db, report_id))


@router.post(
    "/actions",
    response_model=ModerationActionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def apply_action(
    payload: ModerationActionCreate,
    moderator: ModeratorDep,
    db: SessionDep,
) -> ModerationAction:
    """Apply a remediation; with ``reportId`` the report is closed in the same transaction."""
    if payload.report_id:
        _, entry = ModerationService.resolve_with_audit(
            db,
            report_id=payload.report_id,
            action_type=payload.action,
            target_type=payload.target_type,
            target_id=payload.target_id,
            moderator_id=moderator.user_id,
            notes=payload.notes,
        )
        return entry

    return ModerationService.apply_action(
        db,
        action_type=payload.action,
        target_type=payload.target_type,
        target_id=payload.target_id,
        moderator_id=moderator.user_id,
        notes=payload.notes,
    )


@router.get("/actions", response_model=list[ModerationActionResponse])
async def list_actions(
    moderator: ModeratorDep,
    db: SessionDep,
    report_id: str | None = Query(None, alias="reportId"),
    limit: int = Query(50, ge=1, le=200),
) -> list[ModerationAction]:
    """Audit trail, newest first."""
    return ModerationService.list_actions(db, report_id=report_id, limit=limit)
