# tests/services/test_reports.py
"""Tests for report intake and the report status state machine."""

from datetime import UTC, datetime, timedelta

import pytest

from barter_moderation.core.errors import AuthError, InvalidStateError, ValidationError
from barter_moderation.core.settings import settings
from barter_moderation.models import Report
from barter_moderation.services import reports as report_service

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def test_create_report_sets_pending_and_sla(db_session) -> None:
    report = report_service.create_report(
        db_session,
        reporter_id="reporter-1",
        target_type="item",
        target_id="item-42",
        category="  SPAM ",
        description="   ",
        metadata={"source": "listing"},
        now=T0,
    )

    assert report.status == "pending"
    assert report.auto_escalated is False
    assert report.created_at == T0
    assert report.needs_action_by == T0 + timedelta(hours=24)
    assert report.category == "spam"
    assert report.description is None
    assert report.metadata_ == {"source": "listing"}
    assert report.first_response_at is None


def test_create_report_requires_reporter(db_session) -> None:
    with pytest.raises(AuthError):
        report_service.create_report(
            db_session, reporter_id=None, target_type="item", target_id="x", category="spam"
        )


@pytest.mark.parametrize(
    ("target_type", "target_id", "category"),
    [
        ("", "item-1", "spam"),
        ("listing", "item-1", "spam"),
        ("item", "", "spam"),
        ("item", "item-1", "  "),
    ],
)
def test_create_report_validates_fields(db_session, target_type, target_id, category) -> None:
    with pytest.raises(ValidationError):
        report_service.create_report(
            db_session,
            reporter_id="reporter-1",
            target_type=target_type,
            target_id=target_id,
            category=category,
        )
    assert db_session.query(Report).count() == 0


def test_create_report_rejects_non_object_metadata(db_session) -> None:
    with pytest.raises(ValidationError):
        report_service.create_report(
            db_session,
            reporter_id="reporter-1",
            target_type="user",
            target_id="user-9",
            category="harassment",
            metadata=["not", "an", "object"],  # type: ignore[arg-type]
        )


def test_repeated_reports_are_all_kept(make_report, db_session) -> None:
    make_report("item", "item-1", reporter_id="a")
    make_report("item", "item-1", reporter_id="a")
    make_report("item", "item-1", reporter_id="b")

    assert db_session.query(Report).filter(Report.target_id == "item-1").count() == 3


def test_strict_categories(db_session, monkeypatch) -> None:
    monkeypatch.setattr(settings, "strict_report_categories", True)

    with pytest.raises(ValidationError):
        report_service.create_report(
            db_session,
            reporter_id="reporter-1",
            target_type="item",
            target_id="item-1",
            category="weird vibes",
        )
    report = report_service.create_report(
        db_session,
        reporter_id="reporter-1",
        target_type="item",
        target_id="item-1",
        category="Self-Harm",
    )
    assert report.category == "self-harm"


def test_review_then_resolve_keeps_first_response(make_report, db_session) -> None:
    report = make_report(created_at=T0)
    opened = T0 + timedelta(hours=1)
    closed = T0 + timedelta(hours=3)

    reviewed = report_service.start_review(db_session, report.id, now=opened)
    assert reviewed.status == "in_review"
    assert reviewed.first_response_at == opened

    resolved = report_service.resolve(
        db_session,
        report.id,
        resolved_by="moderator-1",
        resolution_notes="Listing removed by owner",
        now=closed,
    )
    assert resolved.status == "resolved"
    assert resolved.first_response_at == opened
    assert resolved.resolved_at == closed
    assert resolved.resolved_by == "moderator-1"
    assert resolved.resolution_notes == "Listing removed by owner"
    assert resolved.needs_action_by == T0 + timedelta(hours=24)


def test_pending_can_be_dismissed_directly(make_report, db_session) -> None:
    report = make_report(created_at=T0)

    dismissed = report_service.dismiss(
        db_session, report.id, resolved_by="moderator-1", now=T0 + timedelta(minutes=5)
    )

    assert dismissed.status == "dismissed"
    assert dismissed.first_response_at == T0 + timedelta(minutes=5)
    assert dismissed.resolution_notes is None


def test_start_review_twice_is_a_noop(make_report, db_session) -> None:
    report = make_report(created_at=T0)
    report_service.start_review(db_session, report.id, now=T0 + timedelta(hours=1))

    again = report_service.start_review(db_session, report.id, now=T0 + timedelta(hours=2))

    assert again.status == "in_review"
    assert again.first_response_at == T0 + timedelta(hours=1)


@pytest.mark.parametrize("next_status", ["dismissed", "resolved", "in_review", "pending"])
def test_terminal_report_rejects_every_transition(make_report, db_session, next_status) -> None:
    report = make_report(created_at=T0)
    report_service.resolve(
        db_session,
        report.id,
        resolved_by="moderator-1",
        resolution_notes="Handled",
        now=T0 + timedelta(hours=1),
    )

    with pytest.raises(InvalidStateError):
        report_service.transition_report(
            db_session,
            report.id,
            next_status,
            resolved_by="moderator-2",
            resolution_notes="Second opinion",
            now=T0 + timedelta(hours=2),
        )

    stored = report_service.get_report(db_session, report.id)
    assert stored.status == "resolved"
    assert stored.resolved_by == "moderator-1"
    assert stored.resolution_notes == "Handled"
    assert stored.resolved_at == T0 + timedelta(hours=1)


def test_cannot_move_back_to_pending(make_report, db_session) -> None:
    report = make_report(created_at=T0)
    report_service.start_review(db_session, report.id, now=T0)

    with pytest.raises(InvalidStateError):
        report_service.transition_report(db_session, report.id, "pending")


def test_resolve_requires_notes(make_report, db_session) -> None:
    report = make_report(created_at=T0)

    with pytest.raises(ValidationError):
        report_service.resolve(
            db_session, report.id, resolved_by="moderator-1", resolution_notes=" "
        )

    assert report_service.get_report(db_session, report.id).status == "pending"


def test_stale_writer_loses_the_race(make_report, db_session) -> None:
    report = make_report(created_at=T0)
    # Snapshot taken before another moderator closed the report.
    stale = Report(id=report.id, status="pending")
    report_service.dismiss(db_session, report.id, resolved_by="moderator-1")

    with pytest.raises(InvalidStateError):
        report_service.apply_transition(
            db_session,
            stale,
            "resolved",
            resolved_by="moderator-2",
            resolution_notes="Too late",
        )
    db_session.rollback()

    stored = report_service.get_report(db_session, report.id)
    assert stored.status == "dismissed"
    assert stored.resolved_by == "moderator-1"


def test_list_reports_filters_and_orders_newest_first(make_report, db_session) -> None:
    older = make_report(created_at=T0)
    newer = make_report(created_at=T0 + timedelta(hours=1))
    closed = make_report(created_at=T0 + timedelta(hours=2))
    report_service.dismiss(db_session, closed.id, resolved_by="moderator-1")

    pending = report_service.list_reports(db_session, status="pending")
    assert [r.id for r in pending] == [newer.id, older.id]
    assert len(report_service.list_reports(db_session)) == 3

    with pytest.raises(ValidationError):
        report_service.list_reports(db_session, status="archived")
