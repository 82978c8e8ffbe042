"""Report intake and the report status state machine.

Status changes are applied with a conditional UPDATE keyed on the status the
caller observed, so two moderators racing on one report yield exactly one
terminal outcome and the loser gets ``InvalidStateError``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import func, literal, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from barter_moderation.core.errors import (
    AuthError,
    DependencyError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from barter_moderation.core.settings import settings
from barter_moderation.db.time import UTCDateTime, utcnow
from barter_moderation.models import Report
from barter_moderation.models.report import ReportStatus, ReportTargetType

logger = logging.getLogger(__name__)

REPORT_CATEGORIES: dict[str, str] = {
    "harassment": "Harassment or bullying",
    "spam": "Spam or scam",
    "inappropriate": "Inappropriate or adult content",
    "illegal": "Illegal or dangerous activity",
    "self-harm": "Self-harm or suicide",
    "other": "Other",
}

ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    ReportStatus.PENDING: frozenset(
        {ReportStatus.IN_REVIEW, ReportStatus.RESOLVED, ReportStatus.DISMISSED}
    ),
    ReportStatus.IN_REVIEW: frozenset({ReportStatus.RESOLVED, ReportStatus.DISMISSED}),
    ReportStatus.RESOLVED: frozenset(),
    ReportStatus.DISMISSED: frozenset(),
}

_TARGET_TYPES = {member.value for member in ReportTargetType}
_STATUSES = {member.value for member in ReportStatus}


def sla_deadline(created_at: datetime) -> datetime:
    """Return the time by which a report created at ``created_at`` needs action."""
    return created_at + timedelta(hours=settings.report_sla_hours)


def _require_text(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def create_report(
    db: Session,
    *,
    reporter_id: str | None,
    target_type: str,
    target_id: str,
    category: str,
    description: str | None = None,
    metadata: dict[str, Any] | None = None,
    now: datetime | None = None,
) -> Report:
    """Validate and persist a new pending report.

    Repeated reports against one target are all kept.

    Raises:
        AuthError: If there is no authenticated reporter.
        ValidationError: On a missing/unknown target type, empty target id
            or empty category.
        DependencyError: If the insert fails.
    """
    if not reporter_id:
        raise AuthError("Unauthorized")

    target_type = _require_text(target_type, "targetType")
    if target_type not in _TARGET_TYPES:
        raise ValidationError(
            "targetType must be one of: " + ", ".join(sorted(_TARGET_TYPES))
        )
    target_id = _require_text(target_id, "targetId")
    category = _require_text(category, "category").lower()
    if settings.strict_report_categories and category not in REPORT_CATEGORIES:
        raise ValidationError(f"Unknown report category: {category}")
    if metadata is not None and not isinstance(metadata, dict):
        raise ValidationError("metadata must be an object")

    cleaned_description = description.strip() if isinstance(description, str) else None
    created_at = now or utcnow()
    report = Report(
        reporter_id=reporter_id,
        target_type=target_type,
        target_id=target_id,
        category=category,
        description=cleaned_description or None,
        metadata_=metadata,
        status=ReportStatus.PENDING.value,
        created_at=created_at,
        needs_action_by=sla_deadline(created_at),
        auto_escalated=False,
    )
    try:
        db.add(report)
        db.commit()
        db.refresh(report)
    except SQLAlchemyError as err:
        db.rollback()
        logger.warning("Failed to insert report from %s: %s", reporter_id, err)
        raise DependencyError("Failed to create report") from err

    logger.info(
        "Report %s filed against %s %s (%s)",
        report.id,
        report.target_type,
        report.target_id,
        report.category,
    )
    return report


def get_report(db: Session, report_id: str) -> Report:
    """Return the report with ``report_id``.

    Raises:
        NotFoundError: If no such report exists.
    """
    try:
        # Rows loaded earlier in the session may carry a stale status.
        report = db.get(Report, report_id, populate_existing=True)
    except SQLAlchemyError as err:
        raise DependencyError("Failed to load report") from err
    if report is None:
        raise NotFoundError("Report not found")
    return report


def list_reports(
    db: Session,
    *,
    status: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[Report]:
    """Return reports newest first, optionally filtered by ``status``."""
    if status is not None and status not in _STATUSES:
        raise ValidationError(f"Unknown report status: {status}")

    query = select(Report).order_by(Report.created_at.desc(), Report.id)
    if status is not None:
        query = query.where(Report.status == status)
    try:
        return list(db.scalars(query.limit(limit).offset(offset)).all())
    except SQLAlchemyError as err:
        raise DependencyError("Failed to fetch reports") from err


def _check_transition(report: Report, new_status: str) -> None:
    if new_status not in _STATUSES:
        raise ValidationError(f"Unknown report status: {new_status}")
    if report.is_terminal:
        raise InvalidStateError(f"Report {report.id} is already {report.status}")
    if new_status not in ALLOWED_TRANSITIONS[report.status]:
        raise InvalidStateError(
            f"Cannot move report {report.id} from {report.status} to {new_status}"
        )


def apply_transition(
    db: Session,
    report: Report,
    new_status: str,
    *,
    resolved_by: str | None = None,
    resolution_notes: str | None = None,
    now: datetime | None = None,
) -> None:
    """Stage a guarded status transition on ``report`` without committing.

    The UPDATE only matches while the row still carries the status observed on
    ``report``; zero affected rows means another actor won the race.
    ``first_response_at`` is filled on the first move out of ``pending`` and
    never overwritten.

    Raises:
        ValidationError: When resolving without ``resolved_by`` or notes, or
            dismissing without ``resolved_by``.
        InvalidStateError: On a terminal report, a disallowed edge, or a lost race.
    """
    _check_transition(report, new_status)

    moment = now or utcnow()
    values: dict[str, Any] = {
        "status": new_status,
        "first_response_at": func.coalesce(
            Report.first_response_at,
            literal(moment, UTCDateTime()),
        ),
    }
    if new_status in (ReportStatus.RESOLVED, ReportStatus.DISMISSED):
        if not resolved_by:
            raise ValidationError("resolvedBy is required to close a report")
        if new_status == ReportStatus.RESOLVED and not (resolution_notes or "").strip():
            raise ValidationError("resolutionNotes are required to resolve a report")
        values["resolved_at"] = moment
        values["resolved_by"] = resolved_by
        if resolution_notes:
            values["resolution_notes"] = resolution_notes.strip()

    result = db.execute(
        update(Report)
        .where(Report.id == report.id, Report.status == report.status)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise InvalidStateError(f"Report {report.id} was changed by another moderator")


def transition_report(
    db: Session,
    report_id: str,
    new_status: str,
    *,
    resolved_by: str | None = None,
    resolution_notes: str | None = None,
    now: datetime | None = None,
) -> Report:
    """Move a report to ``new_status`` and commit.

    A rejected transition leaves the stored record untouched.
    """
    report = get_report(db, report_id)
    if new_status == ReportStatus.IN_REVIEW and report.status == ReportStatus.IN_REVIEW:
        return report

    try:
        apply_transition(
            db,
            report,
            new_status,
            resolved_by=resolved_by,
            resolution_notes=resolution_notes,
            now=now,
        )
        db.commit()
    except (InvalidStateError, ValidationError):
        db.rollback()
        raise
    except SQLAlchemyError as err:
        db.rollback()
        raise DependencyError("Failed to update report status") from err

    db.refresh(report)
    logger.info("Report %s moved to %s", report.id, report.status)
    return report


def start_review(db: Session, report_id: str, *, now: datetime | None = None) -> Report:
    """Mark a report as opened by a moderator (``pending`` → ``in_review``)."""
    return transition_report(db, report_id, ReportStatus.IN_REVIEW.value, now=now)


def resolve(
    db: Session,
    report_id: str,
    *,
    resolved_by: str,
    resolution_notes: str,
    now: datetime | None = None,
) -> Report:
    """Close a report as ``resolved``."""
    return transition_report(
        db,
        report_id,
        ReportStatus.RESOLVED.value,
        resolved_by=resolved_by,
        resolution_notes=resolution_notes,
        now=now,
    )


def dismiss(
    db: Session,
    report_id: str,
    *,
    resolved_by: str,
    resolution_notes: str | None = None,
    now: datetime | None = None,
) -> Report:
    """Close a report as ``dismissed``."""
    return transition_report(
        db,
        report_id,
        ReportStatus.DISMISSED.value,
        resolved_by=resolved_by,
        resolution_notes=resolution_notes,
        now=now,
    )
