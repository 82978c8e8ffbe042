"""SLA escalation for reports nobody acted on.

A sweep selects overdue open reports, claims each one by flipping
``auto_escalated`` with a conditional update, removes reported items and
messages under the system moderator identity, and sends one summary to the
moderators. The flag is the sweep's progress marker: once set it is never
reset, so overlapping or repeated sweeps escalate a report at most once.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from barter_moderation.core.errors import DependencyError, InvalidStateError, ModerationError
from barter_moderation.core.settings import settings
from barter_moderation.db.session import SessionLocal
from barter_moderation.db.time import utcnow
from barter_moderation.models import Report
from barter_moderation.models.moderation import ModerationActionType
from barter_moderation.models.report import OPEN_STATUSES, ReportTargetType
from barter_moderation.services.moderation import ModerationService
from barter_moderation.services.notifier import ModeratorNotifier, get_notifier

logger = logging.getLogger(__name__)

AUTO_REMOVAL_NOTES = "Auto-escalated removal after SLA breach"
AUTO_REMOVABLE_TARGETS = frozenset({ReportTargetType.ITEM, ReportTargetType.MESSAGE})


@dataclass(frozen=True)
class EscalatedReport:
    """One report escalated by a sweep and the automatic action taken on it."""

    report_id: str
    action: str | None

    def as_payload(self) -> dict[str, Any]:
        return {"id": self.report_id, "action": self.action}


@dataclass
class SweepResult:
    """Outcome of a single escalation sweep."""

    escalated: list[EscalatedReport] = field(default_factory=list)
    failures: list[dict[str, str]] = field(default_factory=list)
    selected: int = 0

    @property
    def escalated_count(self) -> int:
        return len(self.escalated)

    @property
    def actions(self) -> list[EscalatedReport]:
        return self.escalated

    def notification(self, now: datetime) -> dict[str, Any]:
        return {
            "type": "auto_escalation",
            "escalated": self.escalated_count,
            "autoActions": [entry.as_payload() for entry in self.escalated],
            "failures": list(self.failures),
            "timestamp": now.isoformat(),
        }


def select_overdue(db: Session, now: datetime, limit: int) -> list[Report]:
    """Return up to ``limit`` open, unescalated reports whose deadline has passed."""
    query = (
        select(Report)
        .where(
            Report.status.in_([status.value for status in OPEN_STATUSES]),
            Report.needs_action_by < now,
            Report.auto_escalated.is_(False),
        )
        .order_by(Report.needs_action_by, Report.id)
        .limit(limit)
    )
    try:
        return list(db.scalars(query).all())
    except SQLAlchemyError as err:
        raise DependencyError("Failed to select overdue reports") from err


def _claim(db: Session, report_id: str) -> bool:
    """Flip ``auto_escalated`` for an open report. False means someone else got it."""
    result = db.execute(
        update(Report)
        .where(
            Report.id == report_id,
            Report.auto_escalated.is_(False),
            Report.status.in_([status.value for status in OPEN_STATUSES]),
        )
        .values(auto_escalated=True)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def _escalate_one(
    db: Session,
    report_id: str,
    target_type: str,
    target_id: str,
    now: datetime,
    result: SweepResult,
) -> None:
    """Claim and remediate one report, committing on its own."""
    try:
        if not _claim(db, report_id):
            db.rollback()
            logger.debug("Report %s already escalated or closed; skipping", report_id)
            return
    except SQLAlchemyError as err:
        db.rollback()
        logger.warning("Could not claim report %s for escalation: %s", report_id, err)
        return

    action: str | None = None
    try:
        if target_type in AUTO_REMOVABLE_TARGETS:
            ModerationService.resolve_report(
                db,
                report_id=report_id,
                action_type=ModerationActionType.REMOVE_CONTENT.value,
                target_type=target_type,
                target_id=target_id,
                moderator_id=settings.system_moderator_id,
                notes=AUTO_REMOVAL_NOTES,
                now=now,
                commit=False,
            )
            action = ModerationActionType.REMOVE_CONTENT.value
        db.commit()
    except InvalidStateError:
        db.rollback()
        logger.info(
            "Report %s changed during escalation; leaving it for the next sweep", report_id
        )
        return
    except (ModerationError, SQLAlchemyError) as err:
        db.rollback()
        logger.warning("Automatic remediation failed for report %s: %s", report_id, err)
        try:
            if not _claim(db, report_id):
                db.rollback()
                return
            db.commit()
        except SQLAlchemyError as claim_err:
            db.rollback()
            logger.warning("Could not mark report %s escalated: %s", report_id, claim_err)
            return
        result.failures.append({"id": report_id, "error": str(err)})

    result.escalated.append(EscalatedReport(report_id=report_id, action=action))
    logger.info(
        "Escalated report %s (%s %s, action=%s)", report_id, target_type, target_id, action
    )


def escalate_overdue(
    db: Session,
    now: datetime | None = None,
    batch_size: int | None = None,
) -> SweepResult:
    """Escalate one batch of overdue reports. Each report commits on its own.

    Raises:
        DependencyError: If the overdue reports cannot be selected at all.
    """
    moment = now or utcnow()
    limit = batch_size or settings.escalation_batch_size
    result = SweepResult()

    overdue = select_overdue(db, moment, limit)
    result.selected = len(overdue)
    logger.debug("Found %d overdue reports", len(overdue))

    # Commits expire loaded rows, so keep plain values.
    candidates = [(report.id, report.target_type, report.target_id) for report in overdue]
    for report_id, target_type, target_id in candidates:
        try:
            _escalate_one(db, report_id, target_type, target_id, moment, result)
        except Exception:
            db.rollback()
            logger.error("Unexpected failure escalating report %s", report_id, exc_info=True)
    return result


async def run_escalation_sweep(
    db: Session,
    now: datetime | None = None,
    notifier: ModeratorNotifier | None = None,
) -> SweepResult:
    """Run one sweep off the event loop and notify moderators once if anything was selected."""
    moment = now or utcnow()
    result = await asyncio.to_thread(escalate_overdue, db, moment)

    if result.selected:
        await (notifier or get_notifier()).notify(result.notification(moment))
        logger.info(
            "Escalation sweep escalated %d of %d overdue reports (%d remediation failures)",
            result.escalated_count,
            result.selected,
            len(result.failures),
        )
    return result


class EscalationWorker:
    """Runs the escalation sweep on a fixed interval inside the app process."""

    def __init__(
        self,
        notifier: ModeratorNotifier | None = None,
        interval_seconds: float | None = None,
    ) -> None:
        self.notifier = notifier or get_notifier()
        self.interval = max(
            0.1,
            float(interval_seconds or settings.escalation_interval_seconds),
        )
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the background sweep loop."""
        if not self.running:
            self._stopping.clear()
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the loop, letting an in-flight sweep finish."""
        if self._task is None:
            return

        self._stopping.set()
        await self._task
        self._task = None

    async def run_once(self) -> SweepResult:
        moment = utcnow()
        result = await asyncio.to_thread(self._escalate_batch, moment)
        if result.selected:
            await self.notifier.notify(result.notification(moment))
        return result

    @staticmethod
    def _escalate_batch(now: datetime) -> SweepResult:
        with SessionLocal() as db:
            return escalate_overdue(db, now)

    async def _run(self) -> None:
        while not self._stopping.is_set():
            try:
                await self.run_once()
            except DependencyError as e:
                logger.warning("EscalationWorker could not read reports: %s", e)
            except Exception as e:
                logger.error("EscalationWorker sweep failed: %s", e, exc_info=True)

            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                continue
