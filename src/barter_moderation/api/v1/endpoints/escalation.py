"""Scheduler-triggered escalation sweep."""

from __future__ import annotations

import logging

from fastapi import APIRouter

from barter_moderation.api.v1.dependencies import SchedulerDep, SessionDep
from barter_moderation.schemas.report import AutoAction, EscalationResponse
from barter_moderation.services.escalation import run_escalation_sweep
from barter_moderation.services.notifier import get_notifier

logger = logging.getLogger(__name__)

router = APIRouter(tags=["escalation"])


@router.post("/report-escalation", response_model=EscalationResponse)
async def trigger_escalation(caller: SchedulerDep, db: SessionDep) -> EscalationResponse:
    """Escalate every overdue report in one bounded batch."""
    logger.debug("Escalation sweep triggered by %s", caller)
    result = await run_escalation_sweep(db, notifier=get_notifier())
    return EscalationResponse(
        escalated=result.escalated_count,
        auto_actions=[
            AutoAction(id=entry.report_id, action=entry.action) for entry in result.actions
        ],
    )
