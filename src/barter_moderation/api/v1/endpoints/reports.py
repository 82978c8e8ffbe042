"""Report intake endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from barter_moderation.api.v1.dependencies import CurrentIdentityDep, SessionDep
from barter_moderation.schemas.report import (
    ReportCategory,
    ReportCreate,
    ReportCreated,
    ReportSummary,
)
from barter_moderation.services import reports as report_service

router = APIRouter(tags=["reports"])


@router.post(
    "/report-create",
    response_model=ReportCreated,
    status_code=status.HTTP_201_CREATED,
)
async def create_report(
    payload: ReportCreate,
    identity: CurrentIdentityDep,
    db: SessionDep,
) -> ReportCreated:
    """File a report against a user, item, message, comment or anything else."""
    report = report_service.create_report(
        db,
        reporter_id=identity.user_id,
        target_type=payload.target_type,
        target_id=payload.target_id,
        category=payload.category,
        description=payload.description,
        metadata=payload.metadata,
    )
    return ReportCreated(
        report=ReportSummary(id=report.id, status=report.status, created_at=report.created_at)
    )


@router.get("/report-categories", response_model=list[ReportCategory])
async def list_categories() -> list[ReportCategory]:
    """List the canonical report categories."""
    return [
        ReportCategory(id=key, label=label)
        for key, label in report_service.REPORT_CATEGORIES.items()
    ]
